"""
Module: export.config

Purpose:
    Configuration for both exporters.
    Defines page dimensions, margins and rasterization settings.

Key Classes:
    - ExportConfig: Immutable export configuration

Dependencies:
    - dataclasses (std)

Used By:
    - export.rasterizer: Layout width and zoom
    - export.paginator: Page banding
    - export.pdf_writer: Page size
    - export.docx_converter: Page size and margins
"""

from __future__ import annotations

from dataclasses import dataclass

MM_PER_INCH = 25.4
POINTS_PER_INCH = 72.0

DEFAULT_USER_CSS = """
body { font-family: sans-serif; font-size: 11pt; line-height: 1.4; }
h1 { font-size: 18pt; text-align: center; margin-bottom: 6pt; }
h2 { font-size: 14pt; margin-top: 12pt; }
h3 { font-size: 12pt; }
.header p { text-align: center; }
.question { margin-bottom: 10pt; }
.options p { margin-left: 16pt; margin-top: 2pt; margin-bottom: 2pt; }
.answer-key { margin-top: 16pt; }
"""


def mm_to_pt(value_mm: float) -> float:
    """Convert millimetres to PDF points (1/72 inch)."""
    return value_mm * POINTS_PER_INCH / MM_PER_INCH


@dataclass(frozen=True)
class ExportConfig:
    """
    Export configuration (immutable).

    Attributes:
        page_width_mm: Page width (A4 = 210)
        page_height_mm: Page height (A4 = 297)
        margin_top_mm: PDF top margin
        margin_bottom_mm: PDF bottom margin
        margin_side_mm: PDF left/right margin (inset of the layout box)
        scale: Device-pixel-ratio scale factor used when rasterizing
        css_dpi: CSS pixel density (96 px per inch)
        min_trailing_mm: Remaining content below this height is not given
            its own PDF page
        docx_margin_cm: Word document margins on all sides
        user_css: Stylesheet applied when laying out the html

    Example:
        >>> config = ExportConfig()
        >>> config.content_height_mm
        277.0
    """

    page_width_mm: float = 210.0
    page_height_mm: float = 297.0
    margin_top_mm: float = 10.0
    margin_bottom_mm: float = 10.0
    margin_side_mm: float = 20.0
    scale: float = 2.0
    css_dpi: int = 96
    min_trailing_mm: float = 2.0
    docx_margin_cm: float = 2.5
    user_css: str = DEFAULT_USER_CSS

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.page_width_mm <= 0:
            raise ValueError(f"page_width_mm must be positive: {self.page_width_mm}")
        if self.page_height_mm <= 0:
            raise ValueError(f"page_height_mm must be positive: {self.page_height_mm}")
        if self.content_height_mm <= 0:
            raise ValueError("Margins exceed page height")
        if self.content_width_mm <= 0:
            raise ValueError("Margins exceed page width")
        if self.scale <= 0:
            raise ValueError(f"scale must be positive: {self.scale}")
        if self.css_dpi <= 0:
            raise ValueError(f"css_dpi must be positive: {self.css_dpi}")
        if self.min_trailing_mm < 0:
            raise ValueError(f"min_trailing_mm must be non-negative: {self.min_trailing_mm}")
        if self.docx_margin_cm * 20 >= min(self.page_width_mm, self.page_height_mm):
            raise ValueError("DOCX margins exceed page size")

    @property
    def content_width_mm(self) -> float:
        """Width of the layout box (page width minus side margins)."""
        return self.page_width_mm - 2 * self.margin_side_mm

    @property
    def content_height_mm(self) -> float:
        """Height available for content on one PDF page."""
        return self.page_height_mm - self.margin_top_mm - self.margin_bottom_mm

    @property
    def page_width_pt(self) -> float:
        return mm_to_pt(self.page_width_mm)

    @property
    def page_height_pt(self) -> float:
        return mm_to_pt(self.page_height_mm)

    @property
    def raster_zoom(self) -> float:
        """Zoom from PDF points to bitmap pixels (CSS px times scale)."""
        return self.scale * self.css_dpi / POINTS_PER_INCH
