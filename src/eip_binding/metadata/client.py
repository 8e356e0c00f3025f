"""Instance metadata — IMDSv2 token and metadata retrieval.

:class:`MetadataClient` is the abstract two-call capability the binder
consumes. :class:`IMDSClient` implements it against the EC2 Instance
Metadata Service v2: a ``PUT`` to the token endpoint returns a session
token, which is then sent with every ``GET`` of a metadata path.

Design notes
------------
- The HTTP session and endpoint are constructor arguments; nothing here
  touches module-level HTTP state.
- No retries and no token caching. One failed call is terminal for that
  call.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

import requests

from eip_binding.errors import MetadataError

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "http://169.254.169.254"
DEFAULT_TOKEN_TTL_SECONDS = 300
DEFAULT_TIMEOUT_SECONDS = 2.0

TOKEN_PATH = "latest/api/token"
TOKEN_TTL_HEADER = "X-aws-ec2-metadata-token-ttl-seconds"
TOKEN_HEADER = "X-aws-ec2-metadata-token"


class MetadataClient(ABC):
    """Abstract base class for host-identity metadata sources."""

    @abstractmethod
    def get_token(self) -> str:
        """Acquire a session token for subsequent metadata reads.

        Raises
        ------
        MetadataError
            If the token request fails or returns any status other than 200.
        """

    @abstractmethod
    def get_metadata(self, token: str, path: str) -> str:
        """Return the raw value stored at *path* (e.g. ``"meta-data/instance-id"``).

        Raises
        ------
        MetadataError
            If the request fails or returns any status other than 200, including
            404 for unknown paths.
        """


class IMDSClient(MetadataClient):
    """MetadataClient backed by the EC2 Instance Metadata Service v2.

    Parameters
    ----------
    session:
        HTTP session used for every request. A fresh
        :class:`requests.Session` is created when omitted.
    endpoint:
        Base URL of the metadata service (default ``http://169.254.169.254``).
    token_ttl:
        Requested token validity in seconds (default 300).
    timeout:
        Per-request timeout in seconds (default 2.0).

    Examples
    --------
    ::

        client = IMDSClient()
        token = client.get_token()
        instance_id = client.get_metadata(token, "meta-data/instance-id")
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        endpoint: str = DEFAULT_ENDPOINT,
        token_ttl: int = DEFAULT_TOKEN_TTL_SECONDS,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._session = session if session is not None else requests.Session()
        self._endpoint = endpoint.rstrip("/")
        self._token_ttl = token_ttl
        self._timeout = timeout

    @property
    def endpoint(self) -> str:
        return self._endpoint

    # ------------------------------------------------------------------
    # MetadataClient interface
    # ------------------------------------------------------------------

    def get_token(self) -> str:
        """PUT the token endpoint and return the token body."""
        url = f"{self._endpoint}/{TOKEN_PATH}"
        try:
            response = self._session.put(
                url,
                headers={TOKEN_TTL_HEADER: str(self._token_ttl)},
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise MetadataError(f"failed to get metadata token: {exc}") from exc

        if response.status_code != 200:
            raise MetadataError(
                f"metadata token request returned status {response.status_code}",
                status=response.status_code,
            )
        return response.text

    def get_metadata(self, token: str, path: str) -> str:
        """GET ``{endpoint}/latest/{path}`` with the session token header."""
        url = f"{self._endpoint}/latest/{path.lstrip('/')}"
        try:
            response = self._session.get(
                url,
                headers={TOKEN_HEADER: token},
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise MetadataError(f"failed to get metadata {path}: {exc}", path=path) from exc

        if response.status_code != 200:
            raise MetadataError(
                f"metadata {path} request returned status {response.status_code}",
                path=path,
                status=response.status_code,
            )
        logger.debug("Fetched metadata %s", path)
        return response.text
