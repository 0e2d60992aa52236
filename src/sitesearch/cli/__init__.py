"""sitesearch command-line interface (typer)."""

from sitesearch.cli.app import app

__all__ = ["app"]
