"""
Module: export

Purpose:
    Two independent converters from canonical html to output artifacts:
    a raster paginator producing PDF and a structural converter producing
    a Word document.
"""

from .config import ExportConfig
from .docx_converter import DocxBlock, build_docx, export_docx, html_to_blocks
from .files import ExportResult, export_filename
from .paginator import PageBand, compose_pages, plan_pages
from .pdf_writer import export_pdf, write_pdf
from .rasterizer import rasterize_html

__all__ = [
    "DocxBlock",
    "ExportConfig",
    "ExportResult",
    "PageBand",
    "build_docx",
    "compose_pages",
    "export_docx",
    "export_filename",
    "export_pdf",
    "html_to_blocks",
    "plan_pages",
    "rasterize_html",
    "write_pdf",
]
