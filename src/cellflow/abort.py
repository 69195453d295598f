"""Abort signals: cancel listener subscriptions from the outside.

An AbortController hands out a signal. Any listener registered with that
signal is removed when the controller aborts, or immediately if it was
already aborted at registration time.
"""

from __future__ import annotations

from typing import Callable

Disposer = Callable[[], None]


class AbortSignal:
    """Read-only side of an AbortController."""

    __slots__ = ("_aborted", "_reason", "_listeners")

    def __init__(self) -> None:
        self._aborted = False
        self._reason: object = None
        self._listeners: list[Callable[[object], None]] = []

    @property
    def aborted(self) -> bool:
        return self._aborted

    @property
    def reason(self) -> object:
        return self._reason

    def add_listener(self, callback: Callable[[object], None]) -> Disposer:
        """Call callback(reason) on abort. Returns a function that removes it."""
        self._listeners.append(callback)

        def _remove() -> None:
            try:
                self._listeners.remove(callback)
            except ValueError:
                pass  # already removed

        return _remove

    def _abort(self, reason: object) -> None:
        if self._aborted:
            return
        self._aborted = True
        self._reason = reason
        listeners = list(self._listeners)
        self._listeners.clear()
        for callback in listeners:
            callback(reason)

    def __repr__(self) -> str:
        state = f"aborted={self._reason!r}" if self._aborted else "active"
        return f"AbortSignal({state})"


class AbortController:
    """Owner of an AbortSignal.

    Usage:
        controller = AbortController()
        cell.listen(print, signal=controller.signal)
        controller.abort()  # print is no longer called
    """

    __slots__ = ("_signal",)

    def __init__(self) -> None:
        self._signal = AbortSignal()

    @property
    def signal(self) -> AbortSignal:
        return self._signal

    def abort(self, reason: object = None) -> None:
        """Abort the signal. Idempotent."""
        self._signal._abort(reason)
