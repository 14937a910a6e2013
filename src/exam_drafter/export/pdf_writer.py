"""
Module: export.pdf_writer

Purpose:
    Raster PDF export. Page images are written with ReportLab, one image
    filling each page.

Key Functions:
    - write_pdf(): Page images -> PDF (path or binary stream)
    - export_pdf(): html -> bitmap -> bands -> pages -> timestamped PDF file

Dependencies:
    - reportlab: PDF generation
    - PIL: Image handling
    - export.rasterizer / export.paginator

Used By:
    - session.controller: AuthoringSession.export_pdf
"""

from __future__ import annotations

import io
import logging
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Optional, Sequence, Union

from PIL import Image
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from exam_drafter.core.errors import ExportFailure

from .config import ExportConfig
from .files import ExportResult, export_filename, unique_output_path, write_atomically
from .paginator import compose_pages, plan_pages
from .rasterizer import rasterize_html

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "prova-wordwise"


def write_pdf(
    pages: Sequence[Image.Image],
    output: Union[Path, BinaryIO],
    config: ExportConfig,
) -> int:
    """
    Write page images to a PDF, one page per image.

    Each image is stretched to the full page; images from compose_pages
    already carry the page margins.

    Args:
        pages: Page images in order
        output: Destination path or binary stream
        config: Export configuration (page size)

    Returns:
        Number of pages written
    """
    if not pages:
        raise ValueError("Cannot write a PDF without pages")

    page_w, page_h = config.page_width_pt, config.page_height_pt
    target = str(output) if isinstance(output, Path) else output
    c = canvas.Canvas(target, pagesize=(page_w, page_h))

    for page in pages:
        c.drawImage(_pil_to_reader(page), 0, 0, width=page_w, height=page_h)
        c.showPage()

    c.save()
    return len(pages)


def export_pdf(
    html: str,
    output_dir: Path,
    config: Optional[ExportConfig] = None,
    prefix: str = DEFAULT_PREFIX,
    *,
    now: Optional[datetime] = None,
) -> ExportResult:
    """
    Export canonical html as a paginated raster PDF.

    Nothing is written unless every step succeeds.

    Raises:
        ExportFailure: Wrapping any rasterization/serialization error
    """
    config = config or ExportConfig()
    try:
        bitmap = rasterize_html(html, config)
        bands = plan_pages(bitmap.width, bitmap.height, config)
        pages = compose_pages(bitmap, bands, config)

        buffer = io.BytesIO()
        page_count = write_pdf(pages, buffer, config)
        data = buffer.getvalue()

        path = unique_output_path(output_dir, export_filename(prefix, "pdf", now))
        write_atomically(path, data)
    except Exception as e:
        logger.error(f"PDF export failed: {e}")
        raise ExportFailure(f"PDF export failed: {e}", fmt="pdf") from e

    logger.info(f"Exported {page_count} page(s) to {path}")
    return ExportResult(path=path, fmt="pdf", page_count=page_count, size_bytes=len(data))


def _pil_to_reader(img: Image.Image) -> ImageReader:
    """
    Convert PIL image to ReportLab ImageReader.

    Args:
        img: PIL Image object

    Returns:
        ImageReader for use with ReportLab
    """
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    buf.seek(0)
    return ImageReader(buf)
