"""Scoped raw-mode handling for the local terminal."""
import logging
import termios
import threading
import tty
from types import TracebackType
from typing import Any, List, Optional, Type

from .errors import TerminalBusyError

logger = logging.getLogger(__name__)

# Terminal mode is process-wide; only one session may hold raw mode.
_raw_mode_lock = threading.Lock()


class RawTerminal:
    """
    Puts a terminal into raw mode for the duration of a ``with`` block.

    The previous attributes are restored exactly once when the block exits,
    whether it finished normally or raised.
    """

    def __init__(self, fd: int) -> None:
        self.fd = fd
        self._saved: Optional[List[Any]] = None

    def __enter__(self) -> "RawTerminal":
        if not _raw_mode_lock.acquire(blocking=False):
            raise TerminalBusyError("Another session is already using the terminal in raw mode.")
        try:
            self._saved = termios.tcgetattr(self.fd)
            tty.setraw(self.fd)
        except BaseException:
            if self._saved is not None:
                termios.tcsetattr(self.fd, termios.TCSADRAIN, self._saved)
                self._saved = None
            _raw_mode_lock.release()
            raise
        logger.debug(f"Terminal {self.fd} switched to raw mode.")
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        try:
            if self._saved is not None:
                termios.tcsetattr(self.fd, termios.TCSADRAIN, self._saved)
                logger.debug(f"Terminal {self.fd} restored.")
        finally:
            self._saved = None
            _raw_mode_lock.release()
