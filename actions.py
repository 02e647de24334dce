import subprocess

from notifier import get_logger

log = get_logger('actions')


class ShellActionRunner:
    """Runs a recovery command through the host shell and reports success.

    Output is not captured. Any callable taking the command string and
    returning a bool can stand in for this class.
    """

    def __init__(self, timeout=None):
        self.timeout = timeout

    def __call__(self, command):
        try:
            result = subprocess.run(command, shell=True, timeout=self.timeout)
        except subprocess.TimeoutExpired:
            log.error(f"Command timed out after {self.timeout}s: {command}")
            return False
        except OSError as e:
            log.error(f"Could not start command {command!r}: {e}")
            return False
        if result.returncode != 0:
            log.debug(f"Command exited with status {result.returncode}: {command}")
        return result.returncode == 0
