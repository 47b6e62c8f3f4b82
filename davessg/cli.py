"""Command-line interface for davessg.

This module defines the CLI using the Click framework. A single command builds
the site and, with -serve, serves the build directory afterwards.

Options accept both the single-dash spelling (-build-dir) and the double-dash
spelling (--build-dir). Values not given on the command line fall back to
davessg.yaml in the working directory, then to built-in defaults.
"""

from __future__ import annotations

from functools import partial
from pathlib import Path

import click

from . import __version__
from .build import TEMPLATE_NAME, BuildError, build_site, load_config
from .console import Console


@click.command()
@click.version_option(version=__version__, prog_name="davessg")
@click.option("-serve", "--serve", is_flag=True, help="Start web server")
@click.option("-verbose", "--verbose", is_flag=True, help="Verbose output")
@click.option(
    "-bind-addr",
    "--bind-addr",
    default=None,
    help="Listen address for web server (use with -serve) [default: localhost:8009]",
)
@click.option(
    "-build-dir",
    "--build-dir",
    default=None,
    help="Build directory (created if necessary) [default: build/]",
)
@click.option(
    "-source-dir",
    "--source-dir",
    default=None,
    help="Source content dir [default: content/]",
)
@click.option("-base-url", "--base-url", default=None, help="Base URL [default: /]")
@click.option(
    "-template-dir",
    "--template-dir",
    default=None,
    help="Directory holding index.html and static/ [default: templates]",
)
@click.option(
    "-force", "--force", is_flag=True, help="Overwrite existing build files, if necessary"
)
@click.option(
    "-watch",
    "--watch",
    is_flag=True,
    help="Rebuild changed files while serving (use with -serve)",
)
def cli(
    serve: bool,
    verbose: bool,
    bind_addr: str | None,
    build_dir: str | None,
    source_dir: str | None,
    base_url: str | None,
    template_dir: str | None,
    force: bool,
    watch: bool,
):
    """Build a static site from Markdown, HTML and static files."""
    config = load_config(Path.cwd())
    overrides = {
        "bind_addr": bind_addr,
        "build_dir": build_dir,
        "source_dir": source_dir,
        "base_url": base_url,
        "template_dir": template_dir,
    }
    config.update({k: v for k, v in overrides.items() if v is not None})

    console = Console(verbose=verbose)
    build = partial(
        build_site,
        Path(config["source_dir"]),
        Path(config["build_dir"]),
        Path(config["template_dir"]),
        base_url=config["base_url"],
        console=console,
    )

    # Validate the address before doing any work
    if serve:
        from .server import parse_bind_addr

        try:
            host, port = parse_bind_addr(config["bind_addr"])
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="'-bind-addr'") from None

    try:
        result = build(force=force)
    except BuildError as exc:
        console.error("Build failed:", file=str(exc.source_path), error=exc.message)
        raise SystemExit(1) from None
    console.debug(
        f"Built {len(result.built)} of {len(result.files)} file(s) into {result.build_dir}"
    )

    if serve:
        from .server import StaticServer

        server = StaticServer(
            result.build_dir,
            host,
            port,
            console=console,
            rebuild_fn=build if watch else None,
            template_path=Path(config["template_dir"]) / TEMPLATE_NAME,
        )
        watch_paths = (
            [Path(config["source_dir"]), Path(config["template_dir"])] if watch else None
        )
        server.start(watch_paths=watch_paths)


def main():
    """Entry point for the CLI application."""
    cli()
