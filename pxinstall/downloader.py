import os
import platform
import stat
import requests
from .cli_logger import logger
from .resolver import GITHUB_API
from .utils import download_and_extract, hoist_single_directory, is_archive, run_shell_command

MAC_MARKERS = ("osx", "mac", "darwin")
ARCH_MARKERS = {
    "arm64": ("arm", "apple", "m1"),
    "x86_64": ("intel", "x86", "x64"),
}


def source_archive_url(repository, tag):
    return f"https://github.com/{repository}/archive/refs/tags/{tag}.tar.gz"


def clone_url(repository):
    return f"https://github.com/{repository}.git"


def _pick_mac_asset(assets, machine=None):
    """Pick the macOS archive among a release's assets, preferring the host architecture."""
    machine = machine or platform.machine()
    candidates = []
    for asset in assets:
        name = asset.get("name", "")
        lower = name.lower()
        if any(marker in lower for marker in MAC_MARKERS) and is_archive(lower):
            candidates.append(asset)
    if not candidates:
        return None
    for asset in candidates:
        if any(marker in asset["name"].lower() for marker in ARCH_MARKERS.get(machine, ())):
            return asset
    return candidates[0]


def find_binary_asset_url(repository, tag, timeout=30, machine=None):
    """Return the download URL of the prebuilt macOS archive attached to a release, or None."""
    api_url = f"{GITHUB_API}/repos/{repository}/releases/tags/{tag}"
    try:
        resp = requests.get(api_url, timeout=timeout)
        resp.raise_for_status()
        release_info = resp.json()
    except requests.exceptions.RequestException as e:
        logger.error(f"Error fetching release {tag}: {e}")
        return None
    except ValueError:
        logger.error(f"Error parsing GitHub API response for release {tag}.")
        return None

    asset = _pick_mac_asset(release_info.get("assets", []), machine=machine)
    if asset is None:
        logger.warning(f"Release {tag} has no prebuilt macOS archive attached.")
        return None
    return asset.get("browser_download_url")


def _make_executable(directory):
    for item in os.listdir(directory):
        path = os.path.join(directory, item)
        if os.path.isfile(path):
            mode = os.stat(path).st_mode
            os.chmod(path, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def download_binary(url, bin_dir, timeout=60, verbose=False):
    """Download a prebuilt archive and unpack its executables directly into bin_dir."""
    logger.info(f"  - Downloading prebuilt binaries from {url}...")
    if not download_and_extract(url, bin_dir, timeout=timeout, verbose=verbose):
        return None
    hoist_single_directory(bin_dir)
    _make_executable(bin_dir)
    return bin_dir


def download_source_archive(repository, tag, dest_dir, timeout=60, verbose=False):
    """Download the source tarball of a release tag into dest_dir."""
    url = source_archive_url(repository, tag)
    logger.info(f"  - Downloading Perple_X {tag} source code from {url}...")
    filename = f"Perple_X-{tag}.tar.gz"
    if not download_and_extract(url, dest_dir, filename=filename, timeout=timeout, verbose=verbose):
        return None
    hoist_single_directory(dest_dir)
    return dest_dir


def clone_head(repository, dest_dir, verbose=False):
    """Shallow-clone the default branch of the repository into dest_dir."""
    url = clone_url(repository)
    logger.info(f"  - Cloning Perple_X source code from {url}...")
    command = ["git", "clone", "--depth", "1", url, dest_dir]
    lines, process = run_shell_command(command, stream_output=True)
    for line in lines:
        if verbose:
            logger.step_info(line.rstrip(), indent=4)
    if process.returncode != 0:
        logger.error(f"git clone failed with exit code {process.returncode}.")
        return None

    stdout, _, returncode = run_shell_command(["git", "log", "--oneline", "-1"], cwd=dest_dir)
    if returncode == 0 and stdout.strip():
        logger.step_info(f"Latest commit: {stdout.strip()}", indent=4)
    return dest_dir
