"""
Standard exit codes and error types for imgsync.

Following Unix/POSIX conventions for command-line tools.
"""

# Standard POSIX exit codes
GENERAL_ERROR = 1        # General errors

# Application-specific exit codes (64-113 are typically available)
REGISTRY_ERROR = 65      # Registry call failed (list or copy)
CONFIG_ERROR = 66        # Configuration file error
NETWORK_ERROR = 68       # Target registry unreachable
AUTH_ERROR = 69          # Credential store failed
DATA_ERROR = 70          # Invalid tag pattern or version
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)


class ImgsyncError(Exception):
    """
    Base error for imgsync. Carries the exit code the CLI should use.
    """
    exit_code = GENERAL_ERROR


class ConfigError(ImgsyncError):
    """Raised when the configuration document is unreadable or malformed."""
    exit_code = CONFIG_ERROR


class AuthError(ImgsyncError):
    """Raised when registry credentials cannot be stored."""
    exit_code = AUTH_ERROR


class HealthcheckError(ImgsyncError):
    """Raised when the target registry is unreachable or answers badly."""
    exit_code = NETWORK_ERROR


class FilterError(ImgsyncError):
    """Raised on an invalid tag pattern or an unparsable semantic version."""
    exit_code = DATA_ERROR


class ListError(ImgsyncError):
    """Raised when listing the tags of a repository fails."""
    exit_code = REGISTRY_ERROR


class CopyError(ImgsyncError):
    """Raised when copying a tag between repositories fails."""
    exit_code = REGISTRY_ERROR


def get_exit_code_for_exception(exc: BaseException) -> int:
    """
    Get the appropriate exit code for an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    if isinstance(exc, ImgsyncError):
        return exc.exit_code
    if isinstance(exc, KeyboardInterrupt):
        return INTERRUPTED
    return GENERAL_ERROR
