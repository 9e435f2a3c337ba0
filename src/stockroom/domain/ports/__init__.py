"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import EntityStore

__all__ = ["EntityStore"]
