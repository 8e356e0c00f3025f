"""binding — the Elastic IP rebind orchestrator.

Public API
----------
``Binder``
    Runs lookup, host identification, detach and attach in sequence.
``BindResult``
    Frozen dataclass describing what a successful bind did.
``HostIdentity``
    Public IP and instance id of the calling host.
"""
from __future__ import annotations

from eip_binding.binding.binder import Binder, BindResult, HostIdentity

__all__ = [
    "BindResult",
    "Binder",
    "HostIdentity",
]
