"""HTTP API for gitslice."""

from .. import __version__

__all__ = ["__version__"]
