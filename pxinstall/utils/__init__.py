from .command_executor import run_shell_command, command_exists
from .file_manager import (
    download_and_extract,
    extract,
    hoist_single_directory,
    is_archive,
    is_empty_dir,
    mirror_directory,
    _safe_join,
    _safe_extract_zip,
    _safe_extract_tar,
)
