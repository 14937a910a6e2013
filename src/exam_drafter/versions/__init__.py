"""Multi-version (variant) management."""

from .manager import VersionSetManager

__all__ = ["VersionSetManager"]
