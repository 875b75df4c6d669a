"""
Standard exit codes for repoupdate commands.

Following Unix/POSIX conventions for command-line tools.
"""
from typing import Optional

from .domain.operation import OperationStatus, UpdateResult

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
CONFIG_ERROR = 66        # Configuration file error
PERMISSION_ERROR = 67    # Working copy is not writable
PRECONDITION_ERROR = 72  # Not on a release branch, no minor version, ...
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)


def exit_code_for_result(result: UpdateResult) -> int:
    """
    Map a flow result to a process exit code.

    Args:
        result: Outcome of an update flow

    Returns:
        Appropriate exit code
    """
    if result.success:
        return SUCCESS
    if result.status == OperationStatus.SKIPPED:
        if result.action == "not_writable":
            return PERMISSION_ERROR
        return PRECONDITION_ERROR
    return GENERAL_ERROR


class CommandError(Exception):
    """
    Exception that commands can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class ConfigError(CommandError):
    """Raised when there's a configuration error."""
    def __init__(self, message: str, exit_code: Optional[int] = None):
        super().__init__(message, exit_code or CONFIG_ERROR)
