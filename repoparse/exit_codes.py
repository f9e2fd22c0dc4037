"""
Standard exit codes for repoparse.

Following Unix/POSIX conventions for command-line tools.
"""
from typing import Optional

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
CONFIG_ERROR = 66        # Configuration file error
PERMISSION_ERROR = 67    # Insufficient permissions
DATA_ERROR = 70          # Data format or validation error
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for common exceptions
EXCEPTION_EXIT_CODES = {
    'FileNotFoundError': GENERAL_ERROR,
    'IsADirectoryError': GENERAL_ERROR,
    'PermissionError': PERMISSION_ERROR,
    'ReadError': DATA_ERROR,             # tarfile.ReadError
    'ZstdError': DATA_ERROR,
    'UnicodeDecodeError': DATA_ERROR,
    'ValueError': DATA_ERROR,
    'KeyError': DATA_ERROR,
    'JSONDecodeError': DATA_ERROR,
    'ConfigError': CONFIG_ERROR,
    'KeyboardInterrupt': INTERRUPTED,
}


def get_exit_code_for_exception(exc: BaseException) -> int:
    """
    Get the appropriate exit code for an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    if isinstance(exc, CommandError):
        return exc.exit_code
    exc_name = exc.__class__.__name__
    return EXCEPTION_EXIT_CODES.get(exc_name, GENERAL_ERROR)


class CommandError(Exception):
    """
    Exception that commands can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class ConfigError(CommandError):
    """Raised when there's a configuration error."""
    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)


class DecodeError(CommandError):
    """Base class for errors raised while decoding a database stream."""
    def __init__(self, message: str, line: Optional[int] = None):
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message, DATA_ERROR)
        self.line = line


class MalformedStreamError(DecodeError):
    """
    Raised when the database text does not follow the desc block layout.

    Either a value line appeared before any attribute was declared, or an
    attribute was declared while the header attribute was never set.
    """


class UnknownHeaderError(CommandError):
    """Raised when the header token is not a string attribute of the catalog."""
    def __init__(self, token: str):
        super().__init__(f"header attribute '{token}' is not a string attribute", USAGE_ERROR)
        self.token = token


class InvalidPatternError(CommandError):
    """Raised when a search expression is not a valid regular expression."""
    def __init__(self, pattern: str, reason: str):
        super().__init__(f"invalid search expression '{pattern}': {reason}", USAGE_ERROR)
        self.pattern = pattern
        self.reason = reason
