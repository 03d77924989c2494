from __future__ import annotations

import signal

from drive_scanner.cancellation import CancelToken
from drive_scanner.cancellation import install_interrupt_handler


def test_cancel_token_is_set_once() -> None:
    token = CancelToken()
    assert token.is_set() is False

    token.set()
    token.set()

    assert token.is_set() is True


def test_interrupt_handler_sets_token() -> None:
    token = CancelToken()
    previous = signal.getsignal(signal.SIGINT)
    try:
        install_interrupt_handler(token)
        handler = signal.getsignal(signal.SIGINT)
        handler(signal.SIGINT, None)

    finally:
        signal.signal(signal.SIGINT, previous)

    assert token.is_set() is True
