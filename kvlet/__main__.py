"""Entry point for ``python -m kvlet``."""

from .cli import cli

cli()
