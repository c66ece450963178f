"""Command line entry points for qtlearn."""

from typer import Typer

from .learn import learn_app


cli = Typer(help="qtlearn command line tools")
cli.add_typer(learn_app, name="learn")

__all__ = ["cli", "learn_app"]
