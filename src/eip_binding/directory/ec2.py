"""EC2-backed address directory.

Ec2AddressDirectory implements :class:`AddressDirectory` on top of a boto3
EC2 client. The client is either passed in by the caller or built from an
explicit boto3 session by :meth:`Ec2AddressDirectory.from_session`.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from eip_binding.directory.base import Address, AddressDirectory, AttachmentPoint
from eip_binding.errors import DirectoryError
from eip_binding.scope import CancelScope

logger = logging.getLogger(__name__)

# Error codes EC2 uses when DescribeAddresses matches nothing.
_ADDRESS_NOT_FOUND_CODES = frozenset({"InvalidAddress.NotFound", "InvalidIPAddress.NotFound"})

# Single attempt per request: no SDK-level retries.
_CLIENT_CONFIG = Config(retries={"total_max_attempts": 1})


class Ec2AddressDirectory(AddressDirectory):
    """Address directory using the EC2 ``*Address`` and ``DescribeNetworkInterfaces`` APIs.

    Parameters
    ----------
    client:
        A boto3 EC2 client (``boto3.client("ec2")``).
    """

    def __init__(self, client: Any) -> None:
        self._client = client

    @classmethod
    def from_session(
        cls,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        session: Optional[boto3.session.Session] = None,
    ) -> "Ec2AddressDirectory":
        """Build a directory from a boto3 session, with SDK retries disabled.

        Parameters
        ----------
        region:
            AWS region name; ``None`` lets boto3 resolve it from the
            environment or shared config.
        endpoint_url:
            Override for the EC2 endpoint (e.g. a LocalStack URL).
        session:
            Session to create the client from; a default session otherwise.
        """
        session = session or boto3.session.Session()
        try:
            client = session.client(
                "ec2", region_name=region, endpoint_url=endpoint_url, config=_CLIENT_CONFIG
            )
        except BotoCoreError as exc:
            raise DirectoryError(f"create EC2 client: {exc}", operation="connect") from exc
        logger.debug("Created EC2 client for region %s", client.meta.region_name)
        return cls(client)

    # ------------------------------------------------------------------
    # AddressDirectory interface
    # ------------------------------------------------------------------

    def lookup_address(self, public_ip: str, scope: CancelScope) -> list[Address]:
        scope.raise_if_cancelled("lookup_address")
        try:
            response = self._client.describe_addresses(PublicIps=[public_ip])
        except ClientError as exc:
            if _error_code(exc) in _ADDRESS_NOT_FOUND_CODES:
                return []
            raise _directory_error("lookup_address", f"describe addresses for {public_ip}", exc) from exc
        except BotoCoreError as exc:
            raise _directory_error("lookup_address", f"describe addresses for {public_ip}", exc) from exc

        addresses: list[Address] = []
        for entry in response.get("Addresses", []):
            allocation_id = entry.get("AllocationId")
            if not allocation_id:
                raise DirectoryError(
                    f"address {entry.get('PublicIp', public_ip)} has no allocation id",
                    operation="lookup_address",
                )
            addresses.append(
                Address(
                    public_ip=entry.get("PublicIp", public_ip),
                    allocation_id=allocation_id,
                    association_id=entry.get("AssociationId"),
                )
            )
        return addresses

    def detach(self, association_id: str, scope: CancelScope) -> None:
        scope.raise_if_cancelled("detach")
        try:
            self._client.disassociate_address(AssociationId=association_id)
        except (ClientError, BotoCoreError) as exc:
            raise _directory_error("detach", f"disassociate {association_id}", exc) from exc

    def find_attachment_points(
        self, public_ip: str, scope: CancelScope
    ) -> list[AttachmentPoint]:
        scope.raise_if_cancelled("find_attachment_points")
        try:
            response = self._client.describe_network_interfaces(
                Filters=[
                    {"Name": "addresses.association.public-ip", "Values": [public_ip]},
                ]
            )
        except (ClientError, BotoCoreError) as exc:
            raise _directory_error(
                "find_attachment_points", f"describe network interfaces for {public_ip}", exc
            ) from exc
        return [
            AttachmentPoint(network_interface_id=eni["NetworkInterfaceId"])
            for eni in response.get("NetworkInterfaces", [])
            if eni.get("NetworkInterfaceId")
        ]

    def attach(
        self, allocation_id: str, network_interface_id: str, scope: CancelScope
    ) -> str:
        scope.raise_if_cancelled("attach")
        try:
            response = self._client.associate_address(
                AllocationId=allocation_id,
                NetworkInterfaceId=network_interface_id,
            )
        except (ClientError, BotoCoreError) as exc:
            raise _directory_error(
                "attach", f"associate {allocation_id} with {network_interface_id}", exc
            ) from exc
        return response.get("AssociationId", "")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _error_code(exc: Exception) -> Optional[str]:
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code")
    return None


def _directory_error(operation: str, action: str, exc: Exception) -> DirectoryError:
    return DirectoryError(f"{action}: {exc}", operation=operation, code=_error_code(exc))
