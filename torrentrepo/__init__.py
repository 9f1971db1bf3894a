"""Torrent metadata repository client for document-store data contracts."""

from .__version__ import __version__

__all__ = ["__version__"]
