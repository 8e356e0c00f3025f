"""Error taxonomy for EIP binding.

Every failure raised by this package derives from :class:`EipBindingError`.
Errors raised inside :meth:`~eip_binding.binding.binder.Binder.bind` are
tagged with the binder step that produced them and with whether the target
address had already been detached from its previous owner when the failure
happened.
"""
from __future__ import annotations

from typing import Optional


class EipBindingError(Exception):
    """Base class for all EIP binding failures.

    Parameters
    ----------
    message:
        Human-readable description of the failure.
    step:
        Binder step that produced the error (``"lookup"``, ``"identify"``,
        ``"detach"``, ``"locate"``, ``"attach"``), or ``None`` when raised
        outside the binder.
    address_detached:
        True when the target address was detached from its previous owner
        before the failure. The address is then attached nowhere.
    """

    def __init__(
        self,
        message: str,
        *,
        step: Optional[str] = None,
        address_detached: bool = False,
    ) -> None:
        self.message = message
        self.step = step
        self.address_detached = address_detached
        super().__init__(message)

    def __str__(self) -> str:
        if self.step:
            return f"while {_STEP_VERBS.get(self.step, self.step)}: {self.message}"
        return self.message


class ConfigError(EipBindingError):
    """Raised when the target address cannot be resolved or is invalid."""


class MetadataError(EipBindingError):
    """Raised when the instance metadata service call fails.

    Parameters
    ----------
    message:
        Description of the failure.
    path:
        Metadata path being fetched, or ``None`` for the token request.
    status:
        HTTP status returned by the service, when one was received.
    """

    def __init__(
        self,
        message: str,
        *,
        path: Optional[str] = None,
        status: Optional[int] = None,
        step: Optional[str] = None,
    ) -> None:
        self.path = path
        self.status = status
        super().__init__(message, step=step)


class NotFoundError(EipBindingError):
    """Raised when a lookup expected to return one result returns none."""


class DirectoryError(EipBindingError):
    """Raised when a remote address-directory call fails.

    Parameters
    ----------
    message:
        Description of the failure.
    operation:
        Name of the directory operation (``"lookup_address"``,
        ``"detach"``, ``"find_attachment_points"``, ``"attach"``).
    code:
        Provider error code (e.g. ``"UnauthorizedOperation"``), if known.
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str,
        code: Optional[str] = None,
        step: Optional[str] = None,
    ) -> None:
        self.operation = operation
        self.code = code
        super().__init__(message, step=step)


class BindCancelledError(EipBindingError):
    """Raised when the caller's cancel scope is cancelled or expires."""


_STEP_VERBS = {
    "lookup": "looking up address",
    "identify": "identifying host",
    "detach": "detaching",
    "locate": "locating network interface",
    "attach": "attaching",
}
