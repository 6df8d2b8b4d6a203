import subprocess
from ..cli_logger import logger


def run_shell_command(command, cwd=None, env=None):
    """
    Executes a command and captures its output.

    Args:
        command (list): The command to execute as a list of strings.
        cwd (str, optional): The working directory for the command.
        env (dict, optional): A dictionary of environment variables.

    Returns:
        A tuple (stdout, stderr, return_code). A missing executable is
        reported as return code -1.
    """
    logger.debug(f"Running: {' '.join(command)}")
    try:
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
        logger.debug(f"Command not found: {e.filename}")
        return "", str(e), -1
