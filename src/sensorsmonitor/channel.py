"""
Publication Channel Manager

Owns the named pipe the rendered line is published through:

    - resolves its path once, from $XDG_RUNTIME_DIR
    - at startup adopts an existing FIFO, replaces anything else found at the
      path, or creates the FIFO
    - each cycle opens it for writing (blocking until a reader attaches),
      writes one line and closes it
"""

import logging
import os
import stat
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .errors import (
    ChannelError,
    ConfigurationError,
    EXIT_FAIL_CREATE_PIPE,
    EXIT_FAIL_DELETE_EXISTING_PIPE,
    EXIT_FAIL_OPEN_PIPE_FOR_WRITING,
    EXIT_NO_RUNTIME_DIR,
    os_detail,
)
from .renderer import encode_line

logger = logging.getLogger("sensorsmonitor.channel")

PIPE_NAME = "sensorsmonitor"
PIPE_MODE = 0o644
RUNTIME_DIR_ENV = "XDG_RUNTIME_DIR"


class ChannelState(Enum):
    UNRESOLVED = "unresolved"
    ABSENT = "absent"
    WRONG_KIND = "wrong_kind"
    READY_AS_PIPE = "ready_as_pipe"


def resolve_channel_path(
    config: Optional[Dict[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Path:
    """
    Build the pipe path from the runtime directory environment variable.

    Args:
        config: Configuration dictionary (``channel`` section)
        environ: Environment to read; defaults to os.environ

    Raises:
        ConfigurationError: if the variable is unset
    """
    channel_config = (config or {}).get("channel", {})
    env_name = channel_config.get("runtime_dir_env", RUNTIME_DIR_ENV)
    pipe_name = channel_config.get("pipe_name", PIPE_NAME)
    environ = os.environ if environ is None else environ

    runtime_dir = environ.get(env_name)
    if runtime_dir is None:
        raise ConfigurationError(f"${env_name} not set", exit_code=EXIT_NO_RUNTIME_DIR)

    return Path(runtime_dir) / pipe_name


class PublicationChannel:
    """
    The named pipe and its lifecycle.

    Only one writer (this process) and one reader per cycle. The path is fixed
    for the lifetime of the object and the pipe is probed once, by
    :meth:`establish`.
    """

    def __init__(self, path: Path, mode: int = PIPE_MODE):
        self.path = Path(path)
        self.mode = mode
        self._state = ChannelState.UNRESOLVED

    @classmethod
    def from_config(
        cls,
        config: Optional[Dict[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "PublicationChannel":
        mode = (config or {}).get("channel", {}).get("mode", PIPE_MODE)
        return cls(resolve_channel_path(config, environ), mode=mode)

    @property
    def state(self) -> ChannelState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is ChannelState.READY_AS_PIPE

    def probe(self) -> ChannelState:
        """Classify whatever currently exists at the path."""
        try:
            st = os.stat(self.path)
        except OSError as e:
            # Anything unstat-able is treated as absent; mkfifo reports the real problem
            logger.debug(f"stat {self.path}: {os_detail(e)}")
            return ChannelState.ABSENT

        if stat.S_ISFIFO(st.st_mode):
            return ChannelState.READY_AS_PIPE
        return ChannelState.WRONG_KIND

    def establish(self) -> ChannelState:
        """
        Make sure a FIFO exists at the path.

        An existing FIFO is adopted as-is so connected consumers keep working.
        Anything else is removed and replaced.

        Raises:
            ChannelError: if removal or creation fails
        """
        if self.is_ready:
            return self._state

        self._state = self.probe()

        if self._state is ChannelState.READY_AS_PIPE:
            logger.info(f"Using existing pipe {self.path}")
            return self._state

        if self._state is ChannelState.WRONG_KIND:
            logger.warning(f"Removing unexpected file {self.path}")
            self._remove_wrong_kind()

        try:
            os.mkfifo(self.path, self.mode)
        except OSError as e:
            raise ChannelError(
                f"failed to create named pipe '{self.path}'",
                detail=os_detail(e),
                exit_code=EXIT_FAIL_CREATE_PIPE,
            ) from e

        logger.info(f"Created pipe {self.path}")
        self._state = ChannelState.READY_AS_PIPE
        return self._state

    def _remove_wrong_kind(self) -> None:
        try:
            if self.path.is_dir() and not self.path.is_symlink():
                os.rmdir(self.path)
            else:
                os.unlink(self.path)
        except OSError as e:
            raise ChannelError(
                f"failed to remove unexpected file '{self.path}'",
                detail=os_detail(e),
                exit_code=EXIT_FAIL_DELETE_EXISTING_PIPE,
            ) from e

    def publish(self, line: str) -> None:
        """
        Write one rendered line to the pipe.

        Opening for write blocks until a reader opens the pipe; there is no
        timeout.

        Raises:
            ChannelError: if the pipe cannot be opened or written
        """
        if not self.is_ready:
            raise ChannelError(
                f"pipe '{self.path}' not established",
                exit_code=EXIT_FAIL_OPEN_PIPE_FOR_WRITING,
            )

        data = encode_line(line)

        try:
            pipe = open(self.path, "wb", buffering=0)
        except OSError as e:
            raise ChannelError(
                f"failed to open {self.path} for write",
                detail=os_detail(e),
                exit_code=EXIT_FAIL_OPEN_PIPE_FOR_WRITING,
            ) from e

        try:
            with pipe:
                pipe.write(data)
        except OSError as e:
            raise ChannelError(
                f"failed to write to {self.path}",
                detail=os_detail(e),
                exit_code=EXIT_FAIL_OPEN_PIPE_FOR_WRITING,
            ) from e

    def remove(self) -> None:
        """Best-effort removal of the pipe on shutdown. Never raises."""
        try:
            if stat.S_ISFIFO(os.lstat(self.path).st_mode):
                os.unlink(self.path)
                logger.debug(f"Removed pipe {self.path}")
        except OSError as e:
            logger.debug(f"Could not remove pipe {self.path}: {os_detail(e)}")
