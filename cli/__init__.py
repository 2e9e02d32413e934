"""Command line interface for schemadump."""

from schemadump import __version__

__all__ = ["__version__"]
