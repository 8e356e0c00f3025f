"""Configuration — target resolution and runtime settings.

:func:`resolve_target` turns the single command-line argument into a
validated IPv4 address, following the ``POD_NAME`` indirection used when
the tool runs as a Kubernetes init container. :class:`BindingSettings`
collects everything the command-line entry point needs to build a binder.
"""
from __future__ import annotations

import ipaddress
import os
from collections.abc import Mapping, Sequence
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from eip_binding.errors import ConfigError
from eip_binding.metadata.client import (
    DEFAULT_ENDPOINT,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_TOKEN_TTL_SECONDS,
)

POD_NAME_SENTINEL = "POD_NAME"


def validate_ipv4(value: str) -> str:
    """Return *value* unchanged if it is a well-formed IPv4 address.

    Raises
    ------
    ConfigError
        For anything else, including IPv6 addresses.
    """
    try:
        ipaddress.IPv4Address(value)
    except ValueError:
        raise ConfigError(f"invalid IPv4 address: {value!r}") from None
    return value


def resolve_target(
    args: Sequence[str],
    environ: Optional[Mapping[str, str]] = None,
) -> str:
    """Resolve the target Elastic IP from command-line arguments.

    If the only argument is ``POD_NAME``, the ``POD_NAME`` environment
    variable is read, its hyphens are replaced with underscores, and the
    variable of that name holds the target address.

    Parameters
    ----------
    args:
        Positional arguments; exactly one is required.
    environ:
        Environment mapping (defaults to :data:`os.environ`).

    Returns
    -------
    str
        The validated IPv4 address.

    Raises
    ------
    ConfigError
        Wrong argument count, empty environment variables, or an invalid
        address.

    Examples
    --------
    >>> resolve_target(["POD_NAME"], {"POD_NAME": "eip-0", "eip_0": "54.162.153.80"})
    '54.162.153.80'
    """
    if environ is None:
        environ = os.environ
    if len(args) != 1:
        raise ConfigError("usage: aws-eip-binding <EIP>")

    target = args[0]
    if target == POD_NAME_SENTINEL:
        pod_name = environ.get(POD_NAME_SENTINEL, "")
        if not pod_name:
            raise ConfigError(f"environment variable {POD_NAME_SENTINEL} is empty")
        env_key = pod_name.replace("-", "_")
        target = environ.get(env_key, "")
        if not target:
            raise ConfigError(
                f"environment variable {env_key} (from {POD_NAME_SENTINEL}={pod_name}) is empty"
            )

    return validate_ipv4(target)


class BindingSettings(BaseModel):
    """Runtime settings for one bind invocation.

    Parameters
    ----------
    target_ip:
        Elastic IP to move onto this host (IPv4 only).
    region:
        AWS region; ``None`` lets boto3 resolve it.
    endpoint_url:
        EC2 endpoint override, e.g. a LocalStack URL.
    metadata_endpoint:
        Base URL of the instance metadata service.
    metadata_token_ttl:
        Requested IMDSv2 token validity in seconds.
    metadata_timeout:
        Per-request timeout for metadata calls, in seconds.
    timeout:
        Overall deadline for the directory calls, in seconds. ``None``
        disables the deadline.
    """

    target_ip: str
    region: Optional[str] = None
    endpoint_url: Optional[str] = None
    metadata_endpoint: str = DEFAULT_ENDPOINT
    metadata_token_ttl: int = Field(default=DEFAULT_TOKEN_TTL_SECONDS, ge=1, le=21600)
    metadata_timeout: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    timeout: Optional[float] = Field(default=None, gt=0)

    model_config = {"frozen": True}

    @field_validator("target_ip")
    @classmethod
    def _check_target_ip(cls, value: str) -> str:
        try:
            ipaddress.IPv4Address(value)
        except ValueError:
            raise ValueError(f"invalid IPv4 address: {value!r}") from None
        return value
