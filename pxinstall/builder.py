import os
import shutil
from .cli_logger import logger
from .utils import run_shell_command, mirror_directory


def build(source_root, makefile="OSX_makefile2", jobs=8, verbose=False):
    """
    Compile Perple_X by running make in the 'src' directory of source_root.

    Returns the build directory on success, None otherwise.
    """
    src_dir = os.path.join(source_root, "src")
    if not os.path.isdir(src_dir):
        logger.error(f"Error: Source directory not found: {src_dir}")
        return None

    if not os.path.isfile(os.path.join(src_dir, makefile)):
        logger.error(f"Error: Makefile not found: {os.path.join(src_dir, makefile)}")
        return None

    command = ["make", "-f", makefile, f"-j{jobs}"]
    logger.info(f"Building Perple_X with {jobs} parallel jobs (this can take a while)...")
    lines, process = run_shell_command(command, stream_output=True, cwd=src_dir)
    for line in lines:
        if verbose:
            logger.step_info(line.rstrip(), indent=4)
    if process.returncode != 0:
        logger.error(f"Perple_X build failed: '{' '.join(command)}' exited with code {process.returncode}.")
        return None

    logger.success("Perple_X built successfully.")
    return src_dir


def collect_executables(build_dir, install_dir, executables):
    """
    Copy the named executables from build_dir into bin_backup/ and mirror
    bin_backup/ into bin/.

    Returns (copied, missing).
    """
    backup_dir = os.path.join(install_dir, "bin_backup")
    bin_dir = os.path.join(install_dir, "bin")
    os.makedirs(backup_dir, exist_ok=True)

    copied, missing = [], []
    for exe in executables:
        path = os.path.join(build_dir, exe)
        if os.path.isfile(path):
            shutil.copy2(path, backup_dir)
            copied.append(exe)
        else:
            logger.warning(f"Executable '{exe}' not found after build.")
            missing.append(exe)

    mirror_directory(backup_dir, bin_dir)
    logger.success(f"Executables copied to {bin_dir}")
    return copied, missing
