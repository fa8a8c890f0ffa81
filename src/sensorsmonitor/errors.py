"""
sensorsmonitor Error Taxonomy

Every failure in the monitor is fatal. Each error carries the exit code the
process terminates with, the operation that failed and, where available, the
OS-level detail.
"""

from typing import Optional


# Process exit codes
EXIT_BACKEND_INIT = 1
EXIT_NO_RUNTIME_DIR = 2
EXIT_FAIL_DELETE_EXISTING_PIPE = 3
EXIT_FAIL_CREATE_PIPE = 4
EXIT_FAIL_OPEN_PIPE_FOR_WRITING = 5
EXIT_FAIL_READ_SENSOR = 6
EXIT_INVALID_CONFIG = 7


class SensorsMonitorError(Exception):
    """Base class for all fatal monitor errors."""

    exit_code = 1

    def __init__(
        self,
        operation: str,
        detail: Optional[str] = None,
        exit_code: Optional[int] = None,
    ):
        self.operation = operation
        self.detail = detail
        if exit_code is not None:
            self.exit_code = exit_code
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.detail:
            return f"{self.operation}: {self.detail}"
        return self.operation


class ConfigurationError(SensorsMonitorError):
    """A required configuration value is missing or invalid."""

    exit_code = EXIT_NO_RUNTIME_DIR


class ChannelError(SensorsMonitorError):
    """Probe, delete, create or open of the named pipe failed."""

    exit_code = EXIT_FAIL_OPEN_PIPE_FOR_WRITING


class BackendError(SensorsMonitorError):
    """The sensor backend failed to initialize or to read a value."""

    exit_code = EXIT_BACKEND_INIT


def os_detail(exc: BaseException) -> str:
    """Format an exception the way it is reported next to the exit code."""
    if isinstance(exc, OSError) and exc.errno is not None:
        return f"{exc.strerror or exc}; errno={exc.errno}"
    return str(exc)
