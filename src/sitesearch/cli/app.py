"""
Root Typer application for the sitesearch CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from sitesearch.cli.build import build
from sitesearch.cli.serve import serve

app = Typer(
    name="sitesearch",
    help="sitesearch: build and serve a Fuse.js search index for a site.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        from sitesearch import __version__

        typer.echo(f"sitesearch {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """sitesearch CLI: build and serve the site search index."""


app.command("build")(build)
app.command("serve")(serve)
