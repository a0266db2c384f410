import os
import requests
import zipfile
import tarfile
import shutil
import contextlib
from ..cli_logger import logger

ARCHIVE_EXTENSIONS = (".tar.gz", ".tar.bz2", ".tar.xz", ".tgz", ".zip")
MAC_METADATA = ("__MACOSX", ".DS_Store")

# -------------------- Helpers: safe paths & extraction --------------------

def _safe_join(base, *paths):
    """Safely join paths, preventing path traversal attacks."""
    base = os.path.abspath(base)
    final = os.path.abspath(os.path.join(base, *paths))
    if not final.startswith(base + os.sep) and final != base:
        raise IOError(f"Unsafe path detected: {final}")
    return final

def _safe_extract_zip(zip_ref: zipfile.ZipFile, dest_dir: str, log_each=False):
    """Safely extract a zip file, preventing zip slip attacks."""
    for member in zip_ref.infolist():
        target_path = _safe_join(dest_dir, member.filename)
        if member.is_dir():
            if log_each:
                logger.step_info(f"creating: {member.filename}", indent=3)
            os.makedirs(target_path, exist_ok=True)
        else:
            os.makedirs(os.path.dirname(target_path), exist_ok=True)
            if log_each:
                logger.step_info(f"extracting: {member.filename}", indent=2)
            with zip_ref.open(member, 'r') as src, open(target_path, 'wb') as out:
                shutil.copyfileobj(src, out)
            # Preserve file permissions
            mode = member.external_attr >> 16
            if mode:
                os.chmod(target_path, mode)

def _safe_extract_tar(tar_ref: tarfile.TarFile, dest_dir: str, log_each=False):
    """Safely extract a tar file, preventing path traversal attacks."""
    for member in tar_ref.getmembers():
        member_path = _safe_join(dest_dir, member.name)
        if member.isdir():
            if log_each:
                logger.step_info(f"creating: {member.name}", indent=3)
            os.makedirs(member_path, exist_ok=True)
            continue
        os.makedirs(os.path.dirname(member_path), exist_ok=True)
        if log_each:
            logger.step_info(f"extracting: {member.name}", indent=2)
        src = tar_ref.extractfile(member)
        if src is None:
            # links and special files
            continue
        with src as src_file:
            with open(member_path, "wb") as out:
                shutil.copyfileobj(src_file, out)
            if member.mode:
                os.chmod(member_path, member.mode)


def is_archive(filename):
    return filename.lower().endswith(ARCHIVE_EXTENSIONS)


def extract(filepath, dest_dir, verbose=False):
    """Extracts an archive file to a destination directory and removes the archive."""
    os.makedirs(dest_dir, exist_ok=True)
    filename = os.path.basename(filepath)

    try:
        if filename.lower().endswith(".zip"):
            with zipfile.ZipFile(filepath, 'r') as zip_ref:
                _safe_extract_zip(zip_ref, dest_dir, log_each=verbose)
        elif is_archive(filename):
            with tarfile.open(filepath, 'r:*') as tar:
                _safe_extract_tar(tar, dest_dir, log_each=verbose)
        else:
            logger.warning(f"Unsupported archive type for {filename}. Skipping extraction.")
            return None

        with contextlib.suppress(OSError):
            os.remove(filepath)

        logger.success(f"Successfully extracted to {dest_dir}")
        return dest_dir

    except (zipfile.BadZipFile, tarfile.TarError, IOError) as e:
        logger.error(f"Error during extraction: {e}")
        return None

# -------------------- Download & Extract --------------------

def download_and_extract(url, dest_dir, filename=None, timeout=60, verbose=False):
    """Download an archive into dest_dir and extract it there. Returns dest_dir or None."""
    os.makedirs(dest_dir, exist_ok=True)
    if filename is None:
        filename = url.split('/')[-1]
    filepath = os.path.join(dest_dir, filename)

    temp_filepath = filepath + ".tmp"

    try:
        with requests.get(url, stream=True, timeout=timeout) as r:
            r.raise_for_status()
            total_size = int(r.headers.get('content-length', 0))

            with open(temp_filepath, 'wb') as f:
                chunks = logger.progress(
                    r.iter_content(chunk_size=1024 * 256),  # 256KB chunks
                    description=f"Downloading {filename}",
                    total=total_size,
                    unit="b"
                )
                for chunk in chunks:
                    if chunk:  # keep-alive chunks may be empty
                        f.write(chunk)

        # Atomic rename
        os.replace(temp_filepath, filepath)

        logger.step_info(f"Archive:  {filename}")

        return extract(filepath, dest_dir, verbose=verbose)

    except requests.exceptions.RequestException as e:
        logger.error(f"Error downloading {url}: {e}")
        with contextlib.suppress(OSError):
            if os.path.exists(temp_filepath):
                os.remove(temp_filepath)
        return None
    except OSError as e:
        logger.error(f"Error writing {filepath}: {e}")
        return None

# -------------------- Directory helpers --------------------

def hoist_single_directory(dest_dir):
    """
    If dest_dir holds exactly one directory and nothing else (the usual
    'Project-1.2.3/' wrapper of release archives), move its contents up.

    Finder metadata ('__MACOSX/', '.DS_Store') is removed first.
    """
    for junk in MAC_METADATA:
        junk_path = os.path.join(dest_dir, junk)
        if os.path.isdir(junk_path):
            shutil.rmtree(junk_path)
        elif os.path.isfile(junk_path):
            os.remove(junk_path)
    entries = os.listdir(dest_dir)
    if len(entries) != 1:
        return False
    wrapper = os.path.join(dest_dir, entries[0])
    if not os.path.isdir(wrapper):
        return False
    for item in os.listdir(wrapper):
        shutil.move(os.path.join(wrapper, item), os.path.join(dest_dir, item))
    os.rmdir(wrapper)
    return True


def mirror_directory(src_dir, dst_dir):
    """Copy every regular file of src_dir into dst_dir, keeping permissions."""
    os.makedirs(dst_dir, exist_ok=True)
    copied = []
    for item in sorted(os.listdir(src_dir)):
        src = os.path.join(src_dir, item)
        if os.path.isfile(src):
            shutil.copy2(src, os.path.join(dst_dir, item))
            copied.append(item)
    return copied


def is_empty_dir(path):
    return not os.path.exists(path) or (os.path.isdir(path) and not os.listdir(path))
