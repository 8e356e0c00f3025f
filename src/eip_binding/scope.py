"""CancelScope — cooperative cancellation for a single bind invocation.

A scope is created by the caller, passed into
:meth:`~eip_binding.binding.binder.Binder.bind`, and handed down to every
address-directory call. Remote calls already in flight are not interrupted;
the scope is checked before each call is issued, so cancelling aborts the
remaining sequence.
"""
from __future__ import annotations

import threading
import time
from typing import Optional

from eip_binding.errors import BindCancelledError


class CancelScope:
    """Thread-safe cancel flag with an optional deadline.

    Parameters
    ----------
    timeout:
        Seconds from construction after which the scope counts as expired.
        ``None`` (default) means no deadline.

    Examples
    --------
    >>> scope = CancelScope(timeout=30)
    >>> scope.cancelled
    False
    >>> scope.cancel()
    >>> scope.cancelled
    True
    """

    def __init__(self, timeout: Optional[float] = None) -> None:
        if timeout is not None and timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout!r}")
        self._event = threading.Event()
        self._deadline: Optional[float] = (
            time.monotonic() + timeout if timeout is not None else None
        )

    @property
    def cancelled(self) -> bool:
        """True once :meth:`cancel` was called or the deadline passed."""
        return self._event.is_set() or self.expired

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or ``None`` without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def cancel(self) -> None:
        """Cancel the scope. Safe to call from any thread, more than once."""
        self._event.set()

    def raise_if_cancelled(self, operation: str) -> None:
        """Raise :class:`BindCancelledError` if the scope is no longer live.

        Parameters
        ----------
        operation:
            Name of the call about to be issued, used in the error message.
        """
        if self._event.is_set():
            raise BindCancelledError(f"cancelled before {operation}")
        if self.expired:
            raise BindCancelledError(f"deadline exceeded before {operation}")
