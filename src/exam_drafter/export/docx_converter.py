"""
Module: export.docx_converter

Purpose:
    Structural conversion of canonical html to a Word document.

    The conversion is deliberately lossy: every block becomes a paragraph
    of its plain text. Inline formatting (bold, italics, underline, links)
    and tables are not carried over.

Key Classes:
    - DocxBlock: One output paragraph (heading, bullet or plain)

Key Functions:
    - html_to_blocks(): Walk the html top-level elements -> blocks
    - build_docx(): Blocks -> .docx bytes (single A4 section)
    - export_docx(): html -> timestamped .docx file

Mapping:
    h1         -> centered heading, 20pt before/after
    h2         -> left heading, 15pt before/after
    h3         -> left heading, 10pt before/after
    ul/ol      -> one bulleted paragraph per li, 5pt after
    p with list -> as ul/ol
    div etc.   -> recurse into children
    other      -> plain paragraph of its text, 10pt after

Dependencies:
    - bs4 (BeautifulSoup): html walking
    - docx (python-docx): Word document assembly

Used By:
    - session.controller: AuthoringSession.export_docx
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional

from bs4 import BeautifulSoup, Comment, Doctype, NavigableString, Tag
from docx import Document as WordDocument
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Cm, Pt

from exam_drafter.core.errors import ExportFailure

from .config import ExportConfig
from .files import ExportResult, export_filename, unique_output_path, write_atomically

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "prova-wordwise"

CONTAINER_TAGS = frozenset({"div", "section", "article", "header", "footer", "main", "body", "html"})
LIST_TAGS = ("ul", "ol")

BULLET_SPACE_AFTER = 5
PARAGRAPH_SPACE_AFTER = 10


class BlockKind(str, Enum):
    HEADING = "heading"
    BULLET = "bullet"
    PARAGRAPH = "paragraph"


class Alignment(str, Enum):
    LEFT = "left"
    CENTER = "center"


@dataclass(frozen=True)
class DocxBlock:
    """
    One paragraph of the output document.

    Attributes:
        kind: Heading, bullet or plain paragraph
        text: Plain text content
        level: Heading level (1-3), 0 otherwise
        alignment: Paragraph alignment
        space_before: Spacing before, in points
        space_after: Spacing after, in points
    """

    kind: BlockKind
    text: str
    level: int = 0
    alignment: Alignment = Alignment.LEFT
    space_before: int = 0
    space_after: int = PARAGRAPH_SPACE_AFTER


# level -> (alignment, spacing before/after in pt)
HEADING_STYLES = {
    1: (Alignment.CENTER, 20),
    2: (Alignment.LEFT, 15),
    3: (Alignment.LEFT, 10),
}


# ─────────────────────────────────────────────────────────────────────────────
# HTML -> blocks
# ─────────────────────────────────────────────────────────────────────────────

def html_to_blocks(html: str) -> List[DocxBlock]:
    """
    Convert html to a flat list of paragraph blocks in document order.

    Example:
        >>> [b.kind.value for b in html_to_blocks("<h1>T</h1><ul><li>a</li><li>b</li></ul>")]
        ['heading', 'bullet', 'bullet']
    """
    soup = BeautifulSoup(html, "html.parser")
    blocks: List[DocxBlock] = []
    _walk(soup.children, blocks)
    return blocks


def _walk(nodes: Iterable, blocks: List[DocxBlock]) -> None:
    for node in nodes:
        if isinstance(node, (Comment, Doctype)):
            continue
        if isinstance(node, NavigableString):
            text = _clean(str(node))
            if text:
                blocks.append(DocxBlock(kind=BlockKind.PARAGRAPH, text=text))
            continue
        if not isinstance(node, Tag):
            continue

        name = node.name.lower()
        if name in ("h1", "h2", "h3"):
            level = int(name[1])
            alignment, spacing = HEADING_STYLES[level]
            blocks.append(DocxBlock(
                kind=BlockKind.HEADING,
                text=_clean(node.get_text()),
                level=level,
                alignment=alignment,
                space_before=spacing,
                space_after=spacing,
            ))
        elif name in LIST_TAGS:
            blocks.extend(_list_items(node))
        elif name == "p" and node.find(LIST_TAGS) is not None:
            for inner in node.find_all(LIST_TAGS, recursive=False) or node.find_all(LIST_TAGS):
                blocks.extend(_list_items(inner))
        elif name in CONTAINER_TAGS:
            _walk(node.children, blocks)
        else:
            text = _clean(node.get_text())
            if text:
                blocks.append(DocxBlock(kind=BlockKind.PARAGRAPH, text=text))


def _list_items(list_tag: Tag) -> List[DocxBlock]:
    return [
        DocxBlock(
            kind=BlockKind.BULLET,
            text=_clean(item.get_text()),
            space_after=BULLET_SPACE_AFTER,
        )
        for item in list_tag.find_all("li", recursive=False)
    ]


def _clean(text: str) -> str:
    return " ".join(text.split())


# ─────────────────────────────────────────────────────────────────────────────
# Blocks -> .docx
# ─────────────────────────────────────────────────────────────────────────────

def build_docx(blocks: Iterable[DocxBlock], config: Optional[ExportConfig] = None) -> bytes:
    """Assemble blocks into a single-section Word document and serialize it."""
    config = config or ExportConfig()
    doc = WordDocument()

    section = doc.sections[0]
    section.page_width = Cm(config.page_width_mm / 10)
    section.page_height = Cm(config.page_height_mm / 10)
    margin = Cm(config.docx_margin_cm)
    section.top_margin = margin
    section.bottom_margin = margin
    section.left_margin = margin
    section.right_margin = margin

    for block in blocks:
        if block.kind is BlockKind.HEADING:
            p = doc.add_heading(block.text, level=block.level)
        elif block.kind is BlockKind.BULLET:
            p = doc.add_paragraph(block.text, style="List Bullet")
        else:
            p = doc.add_paragraph(block.text)

        p.alignment = (
            WD_ALIGN_PARAGRAPH.CENTER
            if block.alignment is Alignment.CENTER else WD_ALIGN_PARAGRAPH.LEFT
        )
        p.paragraph_format.space_before = Pt(block.space_before)
        p.paragraph_format.space_after = Pt(block.space_after)

    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()


def export_docx(
    html: str,
    output_dir: Path,
    config: Optional[ExportConfig] = None,
    prefix: str = DEFAULT_PREFIX,
    *,
    now: Optional[datetime] = None,
) -> ExportResult:
    """
    Export canonical html as a .docx file.

    Raises:
        ExportFailure: Wrapping any conversion/serialization error
    """
    try:
        blocks = html_to_blocks(html)
        data = build_docx(blocks, config)
        path = unique_output_path(output_dir, export_filename(prefix, "docx", now))
        write_atomically(path, data)
    except Exception as e:
        logger.error(f"DOCX export failed: {e}")
        raise ExportFailure(f"DOCX export failed: {e}", fmt="docx") from e

    logger.info(f"Exported {len(blocks)} paragraph(s) to {path}")
    return ExportResult(path=path, fmt="docx", size_bytes=len(data))
