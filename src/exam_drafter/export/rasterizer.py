"""
Module: export.rasterizer

Purpose:
    Render canonical html into one tall bitmap, the off-screen equivalent
    of capturing a fully laid-out page-width container.

Key Functions:
    - rasterize_html(): html -> PIL image (full content height)

Algorithm:
    1. Lay the html out with a PyMuPDF Story inside a page-wide box whose
       sides are inset by the page's side margins.
    2. Place the story onto tall scratch pages until it is exhausted,
       remembering how far down each scratch page was filled.
    3. Render each filled strip at ``raster_zoom`` and stack the strips
       vertically. The bitmap is exactly one page wide.

Dependencies:
    - fitz (PyMuPDF): html layout and rasterization
    - PIL: Bitmap assembly

Used By:
    - export.pdf_writer: export_pdf
"""

from __future__ import annotations

import io
import logging
from typing import List

import fitz  # PyMuPDF
from PIL import Image

from .config import ExportConfig, mm_to_pt

logger = logging.getLogger(__name__)

# Scratch pages are tall so most exams lay out in one pass
SCRATCH_PAGE_HEIGHT_PT = 14400.0
MAX_SCRATCH_PAGES = 50


def rasterize_html(html: str, config: ExportConfig) -> Image.Image:
    """
    Render html to a single RGB bitmap.

    Args:
        html: Canonical html of the document
        config: Export configuration

    Returns:
        RGB image, width = page width at raster zoom, height = full
        content height (may span many pages)

    Raises:
        RuntimeError: If the content does not fit in MAX_SCRATCH_PAGES
        Exception: Any PyMuPDF layout/render error is propagated
    """
    page_w = config.page_width_pt
    side = mm_to_pt(config.margin_side_mm)
    mediabox = fitz.Rect(0, 0, page_w, SCRATCH_PAGE_HEIGHT_PT)
    where = fitz.Rect(side, 0, page_w - side, SCRATCH_PAGE_HEIGHT_PT)

    story = fitz.Story(html=html, user_css=config.user_css)
    buffer = io.BytesIO()
    writer = fitz.DocumentWriter(buffer)
    filled_heights: List[float] = []

    try:
        more = 1
        while more:
            if len(filled_heights) >= MAX_SCRATCH_PAGES:
                raise RuntimeError(
                    f"Content exceeds {MAX_SCRATCH_PAGES} scratch pages, aborting layout"
                )
            device = writer.begin_page(mediabox)
            more, filled = story.place(where)
            story.draw(device)
            writer.end_page()
            # Older PyMuPDF returns a Rect, newer a plain 4-tuple
            filled_heights.append(fitz.Rect(filled).y1)
    finally:
        writer.close()

    strips = _render_strips(buffer.getvalue(), filled_heights, page_w, config.raster_zoom)
    bitmap = _stack_vertically(strips)
    logger.debug(
        f"Rasterized {len(html)} chars of html to {bitmap.width}x{bitmap.height}px "
        f"({len(strips)} scratch page(s))"
    )
    return bitmap


def _render_strips(
    pdf_bytes: bytes,
    heights: List[float],
    page_width_pt: float,
    zoom: float,
) -> List[Image.Image]:
    strips: List[Image.Image] = []
    doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    try:
        matrix = fitz.Matrix(zoom, zoom)
        for page, height in zip(doc, heights):
            clip = fitz.Rect(0, 0, page_width_pt, max(height, 1.0))
            pix = page.get_pixmap(matrix=matrix, clip=clip, alpha=False)
            strips.append(Image.frombytes("RGB", (pix.width, pix.height), pix.samples))
    finally:
        doc.close()
    return strips


def _stack_vertically(strips: List[Image.Image]) -> Image.Image:
    width = max(strip.width for strip in strips)
    height = sum(strip.height for strip in strips)
    canvas = Image.new("RGB", (width, height), "white")
    y = 0
    for strip in strips:
        canvas.paste(strip, (0, y))
        y += strip.height
    return canvas
