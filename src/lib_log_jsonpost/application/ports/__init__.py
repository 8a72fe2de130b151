"""Application ports shared by use cases and adapters."""

from __future__ import annotations

from .layout import LayoutPort
from .poster import PosterPort

__all__ = ["LayoutPort", "PosterPort"]
