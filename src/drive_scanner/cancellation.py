from __future__ import annotations

import logging
import signal
import threading
from types import FrameType

logger = logging.getLogger(__name__)


class CancelToken:
    """
    A cooperative cancellation flag shared by every worker of a scan.

    Workers only ever call is_set(). The flag is set once, usually by the
    interrupt handler, and is never cleared.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def is_set(self) -> bool:
        """True if cancellation was requested."""
        return self._event.is_set()

    def set(self) -> None:
        """Request cancellation. Calling more than once has no further effect."""
        if not self._event.is_set():
            logger.info("Cancellation requested, finishing current work...")
        self._event.set()


def install_interrupt_handler(token: CancelToken) -> None:
    """Set the token on SIGINT instead of raising KeyboardInterrupt."""

    def _handler(signum: int, frame: FrameType | None) -> None:
        token.set()

    signal.signal(signal.SIGINT, _handler)
