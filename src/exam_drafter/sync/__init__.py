"""
Module: sync

Purpose:
    Keep the live editor surface and the Document model consistent.

Key Classes:
    - ContentSynchronizer: Surface <-> Document mirror with echo suppression
    - EditableSurface: Abstract editor surface
    - MarkupSurface: Headless in-memory surface
    - Selection: Selection range
"""

from .surface import EditableSurface, MarkupSurface, Selection
from .synchronizer import ContentSynchronizer

__all__ = [
    "ContentSynchronizer",
    "EditableSurface",
    "MarkupSurface",
    "Selection",
]
