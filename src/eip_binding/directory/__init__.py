"""directory — the cloud address-management surface used by the binder.

Public API
----------
``AddressDirectory``
    Abstract base class with the four operations the binder needs.
``Address`` / ``AttachmentPoint``
    Frozen value types returned by a directory.
``Ec2AddressDirectory``
    boto3-backed implementation.
"""
from __future__ import annotations

from eip_binding.directory.base import Address, AddressDirectory, AttachmentPoint
from eip_binding.directory.ec2 import Ec2AddressDirectory

__all__ = [
    "Address",
    "AddressDirectory",
    "AttachmentPoint",
    "Ec2AddressDirectory",
]
