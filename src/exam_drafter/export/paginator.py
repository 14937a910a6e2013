"""
Module: export.paginator

Purpose:
    Slice one tall content bitmap into page-sized bands and composite each
    band onto a white page canvas.

Key Functions:
    - plan_pages(): Pure band planning from bitmap dimensions
    - compose_pages(): Bands -> page images

Algorithm:
    1. pixels per mm = bitmap width / page width (mm)
    2. content height per page = (page height - top - bottom) * px/mm
    3. If the bitmap fits, one band covering all of it
    4. Otherwise bands of content height, top to bottom. Stop when the
       remaining unsliced height is below the minimum trailing threshold,
       so an inexact multiple never yields a blank trailing page.

Dependencies:
    - PIL: Page canvases
    - export.config: ExportConfig

Used By:
    - export.pdf_writer: export_pdf
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence

from PIL import Image

from .config import ExportConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageBand:
    """
    Horizontal slice of the content bitmap destined for one page.

    Attributes:
        index: 0-based page index
        top: First bitmap row of the band
        height: Band height in pixels
    """

    index: int
    top: int
    height: int

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError(f"Band index cannot be negative: {self.index}")
        if self.top < 0:
            raise ValueError(f"Band top cannot be negative: {self.top}")
        if self.height < 0:
            raise ValueError(f"Band height cannot be negative: {self.height}")

    @property
    def bottom(self) -> int:
        return self.top + self.height


def pixels_per_mm(bitmap_width: int, config: ExportConfig) -> float:
    return bitmap_width / config.page_width_mm


def plan_pages(
    bitmap_width: int,
    bitmap_height: int,
    config: ExportConfig,
) -> tuple[PageBand, ...]:
    """
    Plan page bands for a bitmap.

    Args:
        bitmap_width: Bitmap width in pixels (corresponds to page width)
        bitmap_height: Bitmap height in pixels
        config: Export configuration

    Returns:
        Bands in page order, at least one

    Example:
        >>> cfg = ExportConfig()
        >>> per_page = round(cfg.content_height_mm * 1000 / cfg.page_width_mm)
        >>> len(plan_pages(1000, 3 * per_page, cfg))
        3
    """
    if bitmap_width <= 0:
        raise ValueError(f"bitmap_width must be positive: {bitmap_width}")
    if bitmap_height < 0:
        raise ValueError(f"bitmap_height cannot be negative: {bitmap_height}")

    ratio = pixels_per_mm(bitmap_width, config)
    content_height = int(round(config.content_height_mm * ratio))
    min_trailing = config.min_trailing_mm * ratio

    if bitmap_height <= content_height:
        return (PageBand(index=0, top=0, height=bitmap_height),)

    bands: List[PageBand] = []
    top = 0
    while top < bitmap_height:
        remaining = bitmap_height - top
        if remaining < min_trailing:
            logger.debug(f"Dropping {remaining}px trailing remainder (below threshold)")
            break
        height = min(content_height, remaining)
        bands.append(PageBand(index=len(bands), top=top, height=height))
        top += height

    logger.debug(
        f"Planned {len(bands)} page(s) for {bitmap_height}px "
        f"({content_height}px per page)"
    )
    return tuple(bands)


def compose_pages(
    bitmap: Image.Image,
    bands: Sequence[PageBand],
    config: ExportConfig,
) -> List[Image.Image]:
    """
    Composite each band onto a fresh white page-sized canvas.

    The band is placed flush left at the top margin; page size in pixels
    follows the bitmap's pixel-per-mm ratio.
    """
    ratio = pixels_per_mm(bitmap.width, config)
    page_size = (bitmap.width, int(round(config.page_height_mm * ratio)))
    top_margin = int(round(config.margin_top_mm * ratio))

    pages: List[Image.Image] = []
    for band in bands:
        page = Image.new("RGB", page_size, "white")
        if band.height > 0:
            piece = bitmap.crop((0, band.top, bitmap.width, band.bottom))
            page.paste(piece, (0, top_margin))
        pages.append(page)
    return pages
