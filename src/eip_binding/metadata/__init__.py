"""metadata — identity of the calling host from the instance metadata service.

Public API
----------
``MetadataClient``
    Abstract base class: ``get_token()`` and ``get_metadata(token, path)``.
``IMDSClient``
    IMDSv2 implementation over an injected :class:`requests.Session`.
"""
from __future__ import annotations

from eip_binding.metadata.client import (
    DEFAULT_ENDPOINT,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_TOKEN_TTL_SECONDS,
    IMDSClient,
    MetadataClient,
)

__all__ = [
    "DEFAULT_ENDPOINT",
    "DEFAULT_TIMEOUT_SECONDS",
    "DEFAULT_TOKEN_TTL_SECONDS",
    "IMDSClient",
    "MetadataClient",
]
