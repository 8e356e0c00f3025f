"""aws-eip-binding — move an Elastic IP onto the EC2 instance running this process.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Quick start
-----------
::

    from eip_binding import Binder, CancelScope, Ec2AddressDirectory, IMDSClient

    binder = Binder(Ec2AddressDirectory.from_session(), IMDSClient())
    result = binder.bind("54.162.153.80", CancelScope(timeout=60))
    if result.already_bound:
        print("nothing to do")
"""
from __future__ import annotations

__version__: str = "0.1.0"

# ------------------------------------------------------------------
# Errors
# ------------------------------------------------------------------
from eip_binding.errors import (
    BindCancelledError,
    ConfigError,
    DirectoryError,
    EipBindingError,
    MetadataError,
    NotFoundError,
)
from eip_binding.scope import CancelScope

# ------------------------------------------------------------------
# Capabilities
# ------------------------------------------------------------------
from eip_binding.directory import Address, AddressDirectory, AttachmentPoint, Ec2AddressDirectory
from eip_binding.metadata import IMDSClient, MetadataClient

# ------------------------------------------------------------------
# Orchestration and configuration
# ------------------------------------------------------------------
from eip_binding.binding import Binder, BindResult, HostIdentity
from eip_binding.config import BindingSettings, resolve_target, validate_ipv4

__all__ = [
    # version
    "__version__",
    # errors
    "BindCancelledError",
    "ConfigError",
    "DirectoryError",
    "EipBindingError",
    "MetadataError",
    "NotFoundError",
    "CancelScope",
    # capabilities
    "Address",
    "AddressDirectory",
    "AttachmentPoint",
    "Ec2AddressDirectory",
    "IMDSClient",
    "MetadataClient",
    # orchestration
    "BindResult",
    "Binder",
    "BindingSettings",
    "HostIdentity",
    "resolve_target",
    "validate_ipv4",
]
