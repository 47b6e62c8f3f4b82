"""davessg static site generator.

This package provides a minimal static site generator that renders Markdown into
HTML bundles, wraps pages in a single template and copies static assets into a
build directory. Rebuilds are incremental: only sources newer than their output
are written again.

The main entry point is the CLI module, which builds the site and can optionally
serve the build directory over HTTP.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
