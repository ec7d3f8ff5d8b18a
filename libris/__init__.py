"""Libris - ONIX book metadata import pipeline."""

from libris.version import __version__

__all__ = ["__version__"]
