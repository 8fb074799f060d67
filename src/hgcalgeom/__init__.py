"""Geometry of the passive parts of partial silicon modules, built with pyg4ometry."""

from __future__ import annotations

from ._version import __version__
from .core import construct

__all__ = ["__version__", "construct"]
