"""Binder — moves an Elastic IP onto the host running this process.

:meth:`Binder.bind` runs a fixed sequence of steps against an
:class:`~eip_binding.directory.base.AddressDirectory` and a
:class:`~eip_binding.metadata.client.MetadataClient`:

1. look up the target address,
2. identify this host (token, public IPv4, instance id),
3. stop early if the target already is this host's public address,
4. detach the address from its previous owner, if it has one,
5. locate this host's network interface,
6. attach the address to that interface.

The first failure aborts the sequence. Nothing is rolled back: if step 4
succeeded and step 5 or 6 fails, the address ends up attached nowhere and
the raised error has ``address_detached`` set.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, TypeVar

from eip_binding.directory.base import AddressDirectory
from eip_binding.errors import EipBindingError, MetadataError, NotFoundError
from eip_binding.metadata.client import MetadataClient
from eip_binding.scope import CancelScope

logger = logging.getLogger(__name__)

PUBLIC_IPV4_PATH = "meta-data/public-ipv4"
INSTANCE_ID_PATH = "meta-data/instance-id"

_T = TypeVar("_T")


@dataclass(frozen=True)
class HostIdentity:
    """Identity of the calling host, read from the metadata service.

    Parameters
    ----------
    public_ip:
        The host's current public IPv4 address.
    instance_id:
        The host's instance identifier.
    """

    public_ip: str
    instance_id: str


@dataclass(frozen=True)
class BindResult:
    """Outcome of a successful :meth:`Binder.bind` call.

    Parameters
    ----------
    already_bound:
        True when the target address already was this host's public address
        and nothing was changed.
    association_id:
        Handle of the new association. ``None`` when ``already_bound``.
    instance_id:
        Instance identifier of this host.
    """

    already_bound: bool
    instance_id: str
    association_id: Optional[str] = None


class Binder:
    """Associates an Elastic IP with the current host.

    Parameters
    ----------
    directory:
        Address directory used for lookups and (dis)associations.
    metadata:
        Metadata client used to identify this host.

    Examples
    --------
    ::

        binder = Binder(Ec2AddressDirectory.from_session(), IMDSClient())
        result = binder.bind("54.162.153.80", CancelScope(timeout=60))
    """

    def __init__(self, directory: AddressDirectory, metadata: MetadataClient) -> None:
        self._directory = directory
        self._metadata = metadata

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def bind(self, target_ip: str, scope: Optional[CancelScope] = None) -> BindResult:
        """Move *target_ip* onto this host.

        Parameters
        ----------
        target_ip:
            Validated public IPv4 address of the Elastic IP.
        scope:
            Cancel scope propagated to every directory call. A scope without
            deadline is used when omitted.

        Returns
        -------
        BindResult

        Raises
        ------
        NotFoundError
            No address for *target_ip*, or no network interface carrying
            this host's public address.
        MetadataError
            The token or a metadata value could not be fetched.
        DirectoryError
            A directory call failed.
        BindCancelledError
            *scope* was cancelled or its deadline passed.
        """
        if scope is None:
            scope = CancelScope()

        with _step("lookup"):
            scope.raise_if_cancelled("lookup_address")
            addresses = self._directory.lookup_address(target_ip, scope)
            if not addresses:
                raise NotFoundError(f"no address found for {target_ip}")
            address = _first(addresses, f"addresses for {target_ip}")

        with _step("identify"):
            host = self.identify_host()

        if target_ip == host.public_ip:
            logger.info(
                "EIP %s is already associated with instance %s", target_ip, host.instance_id
            )
            return BindResult(already_bound=True, instance_id=host.instance_id)

        detached = False
        if address.association_id:
            with _step("detach"):
                logger.info(
                    "Disassociating EIP %s from previous association %s",
                    target_ip,
                    address.association_id,
                )
                scope.raise_if_cancelled("detach")
                self._directory.detach(address.association_id, scope)
            detached = True

        with _step("locate", detached):
            scope.raise_if_cancelled("find_attachment_points")
            points = self._directory.find_attachment_points(host.public_ip, scope)
            if not points:
                raise NotFoundError(f"no network interface found for public IP {host.public_ip}")
            point = _first(points, f"network interfaces for {host.public_ip}")

        with _step("attach", detached):
            logger.info(
                "Associating EIP %s (allocation=%s) to ENI %s on instance %s",
                target_ip,
                address.allocation_id,
                point.network_interface_id,
                host.instance_id,
            )
            scope.raise_if_cancelled("attach")
            association_id = self._directory.attach(
                address.allocation_id, point.network_interface_id, scope
            )

        logger.info(
            "Successfully associated EIP %s with instance %s (association=%s)",
            target_ip,
            host.instance_id,
            association_id,
        )
        return BindResult(
            already_bound=False,
            instance_id=host.instance_id,
            association_id=association_id,
        )

    def identify_host(self) -> HostIdentity:
        """Fetch one token and use it to read this host's public IP and instance id.

        Raises
        ------
        MetadataError
            Tagged with the sub-step that failed, or raised when the public
            IPv4 or the instance id is empty.
        """
        token = _metadata_call("get metadata token", self._metadata.get_token)
        public_ip = _metadata_call(
            "get public-ipv4", lambda: self._metadata.get_metadata(token, PUBLIC_IPV4_PATH)
        ).strip()
        if not public_ip:
            raise MetadataError("get public-ipv4: empty value", path=PUBLIC_IPV4_PATH)
        instance_id = _metadata_call(
            "get instance-id", lambda: self._metadata.get_metadata(token, INSTANCE_ID_PATH)
        ).strip()
        if not instance_id:
            raise MetadataError("get instance-id: empty value", path=INSTANCE_ID_PATH)
        return HostIdentity(public_ip=public_ip, instance_id=instance_id)


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------


@contextmanager
def _step(name: str, address_detached: bool = False) -> Iterator[None]:
    """Tag any :class:`EipBindingError` escaping the block with the binder step."""
    try:
        yield
    except EipBindingError as exc:
        if exc.step is None:
            exc.step = name
        exc.address_detached = exc.address_detached or address_detached
        raise


def _metadata_call(label: str, call: Callable[[], str]) -> str:
    try:
        return call()
    except MetadataError as exc:
        raise MetadataError(
            f"{label}: {exc.message}", path=exc.path, status=exc.status
        ) from exc


def _first(items: list[_T], what: str) -> _T:
    # More than one match is not expected; keep the first.
    if len(items) > 1:
        logger.warning("Found %d %s, using the first", len(items), what)
    return items[0]
