import shutil
import subprocess
from ..cli_logger import logger

def run_shell_command(command, stream_output=False, env=None, cwd=None):
    """
    Executes a command, optionally streaming its combined output.

    Args:
        command (list): The command to execute as a list of strings.
        stream_output (bool): If True, streams the output in real-time.
        env (dict, optional): A dictionary of environment variables.
        cwd (str, optional): The working directory for the command.

    Returns:
        If stream_output is True, returns a tuple (line generator, process).
        If stream_output is False, returns a tuple (stdout, stderr, return_code).
    """
    try:
        if stream_output:
            process = subprocess.Popen(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                bufsize=1,
                universal_newlines=True,
                env=env,
                cwd=cwd
            )

            def _generator():
                for line in process.stdout:
                    yield line
                process.communicate()
            return _generator(), process

        else:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                env=env,
                check=False,
                cwd=cwd
            )
            return result.stdout, result.stderr, result.returncode

    except FileNotFoundError as e:
        logger.error(f"Command not found: {e.filename}")
        if stream_output:
            return iter([]), type('obj', (object,), {'returncode': -1})
        else:
            return "", str(e), -1
    except OSError as e:
        logger.error(f"Could not run '{command[0]}': {e}")
        if stream_output:
            return iter([]), type('obj', (object,), {'returncode': -1})
        else:
            return "", str(e), -1


def command_exists(name):
    return shutil.which(name) is not None
