"""Console output for davessg.

All user-facing output goes through click so that it can be captured by
CliRunner in tests and coloured consistently.
"""

from __future__ import annotations

import click


class Console:
    """Writes build progress to the terminal.

    Attributes:
        verbose: Whether debug messages are printed.
    """

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def info(self, message: str) -> None:
        click.echo(message)

    def debug(self, message: str) -> None:
        if self.verbose:
            click.echo(message)

    def error(self, title: str, **details: str) -> None:
        """Print a red title followed by indented detail lines on stderr.

        Args:
            title: Headline, e.g. "Build failed:".
            **details: Label/value pairs shown below the title.
        """
        click.echo(click.style(title, fg="red", bold=True), err=True)
        for label, value in details.items():
            click.echo(
                click.style(f"  {label.capitalize()}: {value}", fg="yellow"),
                err=True,
            )
