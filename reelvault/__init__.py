"""Launcher package for the Reelvault archive service."""

from __future__ import annotations

from app import __version__

__all__ = ["__version__"]
