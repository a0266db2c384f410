import collections
import os
import shutil
import sys
from . import builder
from . import downloader
from .cli_logger import logger
from .resolver import MalformedVersion, parse_version
from .utils import command_exists, is_empty_dir, mirror_directory, run_shell_command

InstallSummary = collections.namedtuple(
    "InstallSummary", "version install_dir strategy executables missing"
)

# tool -> how to get it; the installer never installs these itself
BUILD_TOOLS = {
    "gfortran": "brew install gfortran",
    "make": "xcode-select --install",
}
CLONE_TOOLS = {
    "git": "xcode-select --install",
}


def version_dir(settings, version):
    return os.path.join(settings["perplex"]["install_root"], version.tag)


def _prepare_install_dir(install_dir, force=False):
    if not is_empty_dir(install_dir):
        if not force:
            logger.error(f"Directory '{install_dir}' already exists and is not empty.")
            logger.info("Use --force to replace it, or uninstall that version first.")
            return False
        logger.warning(f"Removing existing installation at {install_dir}...")
        try:
            shutil.rmtree(install_dir)
        except OSError as e:
            logger.error(f"Error removing {install_dir}: {e}")
            return False
    try:
        os.makedirs(install_dir, exist_ok=True)
    except OSError as e:
        logger.error(f"Error creating installation directory {install_dir}: {e}")
        return False
    return True


def missing_build_tools(needs_git=False):
    """Return {tool: remedy} for every build prerequisite not found on PATH."""
    required = dict(BUILD_TOOLS)
    if needs_git:
        required.update(CLONE_TOOLS)
    return {tool: remedy for tool, remedy in required.items() if not command_exists(tool)}


def _install_binary(result, settings, install_dir, verbose=False):
    perplex = settings["perplex"]
    timeout = settings["network"]["timeout"]
    url = downloader.find_binary_asset_url(perplex["repository"], result.version.tag, timeout=timeout)
    if not url:
        return None

    bin_dir = os.path.join(install_dir, "bin")
    if not downloader.download_binary(url, bin_dir, timeout=timeout, verbose=verbose):
        return None

    executables = mirror_directory(bin_dir, os.path.join(install_dir, "bin_backup"))
    if not executables:
        logger.error(f"The prebuilt archive at {url} contained no executables.")
        return None
    missing = [exe for exe in perplex["executables"] if exe not in executables]
    return InstallSummary(result.version, install_dir, "binary", executables, missing)


def _install_from_source(result, settings, install_dir, verbose=False):
    perplex = settings["perplex"]
    version = result.version

    missing_tools = missing_build_tools(needs_git=version.is_head)
    if missing_tools:
        for tool, remedy in missing_tools.items():
            logger.error(f"'{tool}' is required to build Perple_X but was not found. Install it with: {remedy}")
        return None

    if version.is_head:
        source_root = downloader.clone_head(perplex["repository"], install_dir, verbose=verbose)
    else:
        source_root = downloader.download_source_archive(
            perplex["repository"], version.tag, install_dir,
            timeout=settings["network"]["timeout"], verbose=verbose,
        )
    if not source_root:
        logger.error("Failed to fetch the Perple_X source code.")
        return None

    build_dir = builder.build(source_root, makefile=perplex["makefile"], jobs=perplex["jobs"], verbose=verbose)
    if not build_dir:
        return None

    copied, missing = builder.collect_executables(build_dir, install_dir, perplex["executables"])
    if not copied:
        logger.error("The build finished but produced none of the expected executables.")
        return None
    return InstallSummary(version, install_dir, "source", copied, missing)


def install(result, settings, force=False, verbose=False):
    """
    Acquire the resolved version: prebuilt binaries when available, a source
    build otherwise. Returns an InstallSummary, or None on failure.
    """
    if result.strategy is None:
        logger.error(f"Refusing to install {result.version.tag}: the version is not installable.")
        return None

    install_dir = version_dir(settings, result.version)
    logger.info(f"Preparing installation directory at {install_dir}...")
    if not _prepare_install_dir(install_dir, force=force):
        return None

    if result.strategy == "binary":
        logger.info(f"Prebuilt binaries are published for {result.version.tag}; skipping compilation.")
        summary = _install_binary(result, settings, install_dir, verbose=verbose)
        if summary:
            return summary
        logger.warning("Could not install the prebuilt binaries. Falling back to a source build.")
        if not _prepare_install_dir(install_dir, force=True):
            return None

    return _install_from_source(result, settings, install_dir, verbose=verbose)


def list_installed_versions(settings):
    """Return the installed versions under the install root, oldest first and 'head' last."""
    root = settings["perplex"]["install_root"]
    if not os.path.isdir(root):
        return []

    installed = []
    try:
        entries = os.listdir(root)
    except OSError as e:
        logger.warning(f"Could not scan {root} for installed versions: {e}")
        return []
    for entry in entries:
        if not os.path.isdir(os.path.join(root, entry, "bin")):
            continue
        try:
            installed.append(parse_version(entry))
        except MalformedVersion:
            continue
    return sorted(installed, key=lambda v: (v.is_head, () if v.is_head else tuple(v)))


def uninstall_version(token, settings):
    """Remove an installed version. Raises MalformedVersion for a bad token."""
    version = parse_version(token)
    install_dir = version_dir(settings, version)
    if not os.path.exists(install_dir):
        logger.info(f"{version.tag} is not installed at {install_dir}. Nothing to uninstall.")
        return True

    try:
        shutil.rmtree(install_dir)
        logger.success(f"{version.tag} has been successfully uninstalled.")
        return True
    except OSError as e:
        logger.error(f"Error uninstalling {version.tag} from {install_dir}: {e}")
        logger.info("Please check file permissions and ensure the directory is not in use.")
        return False


def _tool_version(tool):
    stdout, _, returncode = run_shell_command([tool, "--version"])
    if returncode != 0 or not stdout.strip():
        return None
    return stdout.strip().splitlines()[0]


def check_environment(settings):
    """Check the host for everything an installation needs. Installs nothing."""
    logger.info("Checking the pxinstall environment...")
    all_ok = True

    if sys.platform != "darwin":
        logger.warning(f"This tool targets macOS; detected platform '{sys.platform}'.")
        all_ok = False

    if hasattr(os, "geteuid") and os.geteuid() == 0:
        logger.warning("Running as root is not supported. Run pxinstall as a regular user.")
        all_ok = False

    if command_exists("brew"):
        logger.success(f"Homebrew: {_tool_version('brew') or 'installed'}")
    else:
        logger.warning("Homebrew was not found. Install it from https://brew.sh (needed for gfortran).")
        all_ok = False

    for tool, remedy in {**BUILD_TOOLS, **CLONE_TOOLS}.items():
        if command_exists(tool):
            logger.success(f"{tool}: {_tool_version(tool) or 'installed'}")
        else:
            logger.warning(f"{tool} was not found on PATH. Install it with: {remedy}")
            all_ok = False

    root = settings["perplex"]["install_root"]
    logger.info(f"Install root: {root}")

    if all_ok:
        logger.success("pxinstall environment is set up correctly!")
    else:
        logger.error("pxinstall environment has issues. Source builds may fail until they are fixed.")
    return all_ok
