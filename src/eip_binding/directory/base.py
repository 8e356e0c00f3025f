"""Address directory — abstract interface and value types.

AddressDirectory defines the four remote operations the binder needs from a
cloud address-management API. Implementations map each operation to exactly
one remote call and never retry locally.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from eip_binding.scope import CancelScope


@dataclass(frozen=True)
class Address:
    """An Elastic IP as reported by the directory.

    Parameters
    ----------
    public_ip:
        The public IPv4 address.
    allocation_id:
        Opaque allocation handle, required to attach the address.
    association_id:
        Handle of the current binding to a network interface, or ``None``
        when the address is not attached anywhere in the account.
    """

    public_ip: str
    allocation_id: str
    association_id: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.allocation_id:
            raise ValueError(f"Address {self.public_ip!r} has no allocation id")

    @property
    def attached(self) -> bool:
        return bool(self.association_id)


@dataclass(frozen=True)
class AttachmentPoint:
    """A network interface an address can be attached to."""

    network_interface_id: str


class AddressDirectory(ABC):
    """Abstract base class for address-directory backends.

    Every operation receives the caller's :class:`CancelScope`; an
    implementation must check it before issuing its remote call. Remote
    failures are raised as :class:`~eip_binding.errors.DirectoryError`.
    """

    @abstractmethod
    def lookup_address(self, public_ip: str, scope: CancelScope) -> list[Address]:
        """Return the addresses matching *public_ip*.

        Parameters
        ----------
        public_ip:
            Public IPv4 address to look up.
        scope:
            Cancel scope of the current invocation.

        Returns
        -------
        list[Address]
            Matching addresses; empty when the address is unknown.
        """

    @abstractmethod
    def detach(self, association_id: str, scope: CancelScope) -> None:
        """Remove the binding identified by *association_id*."""

    @abstractmethod
    def find_attachment_points(
        self, public_ip: str, scope: CancelScope
    ) -> list[AttachmentPoint]:
        """Return network interfaces whose associated public IP is *public_ip*."""

    @abstractmethod
    def attach(
        self, allocation_id: str, network_interface_id: str, scope: CancelScope
    ) -> str:
        """Attach the allocation to the interface and return the association id."""
