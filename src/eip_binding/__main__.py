"""Entry point for ``python -m eip_binding``."""
from eip_binding.cli.main import cli

cli()
