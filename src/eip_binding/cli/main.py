"""CLI entry point for aws-eip-binding.

Invoked as::

    aws-eip-binding [OPTIONS] TARGET

or, during development::

    python -m eip_binding

TARGET is the Elastic IP to move onto this host, or the literal
``POD_NAME`` to read it from the environment (see
:func:`eip_binding.config.resolve_target`).

Exit status is 0 on success (including when the address already is on this
host), 1 when the bind fails and 2 on configuration errors.
"""
from __future__ import annotations

import logging
import sys
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from eip_binding import __version__
from eip_binding.binding import Binder
from eip_binding.config import BindingSettings, resolve_target
from eip_binding.directory import Ec2AddressDirectory
from eip_binding.errors import ConfigError, EipBindingError
from eip_binding.metadata import DEFAULT_ENDPOINT, IMDSClient
from eip_binding.scope import CancelScope

console = Console()
logger = logging.getLogger(__name__)


@click.command(name="aws-eip-binding")
@click.argument("target", nargs=-1)
@click.option(
    "--region",
    envvar="EIP_BINDING_REGION",
    default=None,
    help="AWS region (defaults to the boto3 resolution chain).",
)
@click.option(
    "--endpoint-url",
    envvar=["AWS_ENDPOINT_URL", "AWS_ENDPOINT"],
    default=None,
    help="Override the EC2 endpoint, e.g. a LocalStack URL.",
)
@click.option(
    "--metadata-endpoint",
    envvar="EIP_BINDING_METADATA_ENDPOINT",
    default=DEFAULT_ENDPOINT,
    show_default=True,
    help="Base URL of the instance metadata service.",
)
@click.option(
    "--timeout",
    envvar="EIP_BINDING_TIMEOUT",
    type=float,
    default=None,
    help="Deadline in seconds for the EC2 calls.",
)
@click.option(
    "--log-level",
    default="INFO",
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level.",
)
@click.version_option(version=__version__, prog_name="aws-eip-binding")
def cli(
    target: tuple[str, ...],
    region: Optional[str],
    endpoint_url: Optional[str],
    metadata_endpoint: str,
    timeout: Optional[float],
    log_level: str,
) -> None:
    """Associate the Elastic IP TARGET with this EC2 instance."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        target_ip = resolve_target(list(target))
        settings = BindingSettings(
            target_ip=target_ip,
            region=region,
            endpoint_url=endpoint_url,
            metadata_endpoint=metadata_endpoint,
            timeout=timeout,
        )
    except ConfigError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(2)
    except ValidationError as exc:
        console.print(f"[red]Error:[/red] invalid settings: {escape(str(exc))}")
        sys.exit(2)

    logger.info("Received target %s", settings.target_ip)

    try:
        binder = _build_binder(settings)
        result = binder.bind(settings.target_ip, CancelScope(timeout=settings.timeout))
    except EipBindingError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        if exc.address_detached:
            console.print(
                f"[yellow]Warning:[/yellow] EIP {settings.target_ip} was detached from its "
                "previous owner and is not attached anywhere. Re-run to retry."
            )
        sys.exit(1)

    if result.already_bound:
        console.print(
            f"EIP [bold]{settings.target_ip}[/bold] is already associated with "
            f"instance [bold]{result.instance_id}[/bold]"
        )
    else:
        console.print(
            f"[green]Associated[/green] EIP [bold]{settings.target_ip}[/bold] with "
            f"instance [bold]{result.instance_id}[/bold] "
            f"(association {result.association_id})"
        )


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _build_binder(settings: BindingSettings) -> Binder:
    """Construct the EC2 directory and IMDS client described by *settings*."""
    directory = Ec2AddressDirectory.from_session(
        region=settings.region,
        endpoint_url=settings.endpoint_url,
    )
    metadata = IMDSClient(
        endpoint=settings.metadata_endpoint,
        token_ttl=settings.metadata_token_ttl,
        timeout=settings.metadata_timeout,
    )
    return Binder(directory, metadata)


if __name__ == "__main__":
    cli()
