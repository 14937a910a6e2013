"""
Tests for the raster PDF exporter.

Layout is patched out in most tests so page counts are exact; one test
runs the real PyMuPDF layout on a small document.
"""

from datetime import datetime
from unittest.mock import patch

import pytest
from PIL import Image
from pypdf import PdfReader

from exam_drafter.core.errors import ExportFailure
from exam_drafter.export import ExportConfig, export_pdf, rasterize_html, write_pdf
from exam_drafter.export.files import export_filename, unique_output_path


WIDTH = 800


@pytest.fixture
def config():
    return ExportConfig()


def _tall_bitmap(config, pages):
    per_page = int(round(config.content_height_mm * WIDTH / config.page_width_mm))
    return Image.new("RGB", (WIDTH, pages * per_page), "white")


class TestWritePdf:
    def test_when_three_images_then_three_a4_pages(self, tmp_path, config):
        pages = [Image.new("RGB", (100, 141), "white") for _ in range(3)]
        out = tmp_path / "out.pdf"

        count = write_pdf(pages, out, config)

        reader = PdfReader(str(out))
        assert count == 3
        assert len(reader.pages) == 3
        box = reader.pages[0].mediabox
        assert float(box.width) == pytest.approx(595.28, abs=0.5)
        assert float(box.height) == pytest.approx(841.89, abs=0.5)

    def test_when_no_pages_then_raises(self, tmp_path, config):
        with pytest.raises(ValueError):
            write_pdf([], tmp_path / "out.pdf", config)


class TestExportPdf:
    @patch("exam_drafter.export.pdf_writer.rasterize_html")
    def test_when_content_is_exactly_two_pages_then_pdf_has_two_pages(self, mock_rasterize, tmp_path, config):
        # Arrange
        mock_rasterize.return_value = _tall_bitmap(config, 2)

        # Act
        result = export_pdf("<p>x</p>", tmp_path, config, now=datetime(2024, 3, 5, 14, 7, 9))

        # Assert
        assert result.page_count == 2
        assert result.fmt == "pdf"
        assert result.path.name == "prova-wordwise-2024-03-05T14-07-09.pdf"
        assert len(PdfReader(str(result.path)).pages) == 2
        assert result.size_bytes == result.path.stat().st_size

    @patch("exam_drafter.export.pdf_writer.rasterize_html")
    def test_when_exported_twice_in_same_second_then_no_overwrite(self, mock_rasterize, tmp_path, config):
        mock_rasterize.return_value = _tall_bitmap(config, 1)
        now = datetime(2024, 3, 5, 14, 7, 9)

        first = export_pdf("<p>x</p>", tmp_path, config, now=now)
        second = export_pdf("<p>x</p>", tmp_path, config, now=now)

        assert first.path != second.path
        assert second.path.name == "prova-wordwise-2024-03-05T14-07-09-2.pdf"

    @patch("exam_drafter.export.pdf_writer.rasterize_html")
    def test_when_rasterization_fails_then_export_failure_and_no_file(self, mock_rasterize, tmp_path, config):
        mock_rasterize.side_effect = RuntimeError("layout crashed")

        with pytest.raises(ExportFailure) as exc_info:
            export_pdf("<p>x</p>", tmp_path, config)

        assert exc_info.value.fmt == "pdf"
        assert exc_info.value.retryable
        assert list(tmp_path.iterdir()) == []

    def test_when_real_layout_then_bitmap_is_one_page_wide(self, config):
        html = "<h1>PROVA</h1>" + "".join(f"<p>{i}. Question text</p>" for i in range(1, 6))

        bitmap = rasterize_html(html, config)

        expected_width = config.page_width_pt * config.raster_zoom
        assert abs(bitmap.width - expected_width) <= 2
        assert 0 < bitmap.height < int(config.page_height_pt * config.raster_zoom)

    def test_when_real_layout_then_end_to_end_pdf_is_written(self, tmp_path, config):
        result = export_pdf("<p>Short exam</p>", tmp_path, config)

        assert result.page_count == 1
        assert len(PdfReader(str(result.path)).pages) == 1

    def test_when_story_reports_filled_area_as_tuple_then_height_follows_it(self, config):
        with patch("exam_drafter.export.rasterizer.fitz.Story") as mock_story:
            mock_story.return_value.place.return_value = (0, (0.0, 0.0, 500.0, 40.0))

            bitmap = rasterize_html("<p>x</p>", config)

        assert abs(bitmap.height - 40.0 * config.raster_zoom) <= 2

    def test_when_layout_raises_then_writer_is_closed(self, config):
        with patch("exam_drafter.export.rasterizer.fitz.Story") as mock_story, \
                patch("exam_drafter.export.rasterizer.fitz.DocumentWriter") as mock_writer:
            mock_story.return_value.place.side_effect = RuntimeError("layout error")

            with pytest.raises(RuntimeError):
                rasterize_html("<p>x</p>", config)

        mock_writer.return_value.close.assert_called_once()


class TestFileNaming:
    def test_filename_pattern(self):
        assert export_filename("prova", "docx", datetime(2024, 1, 2, 3, 4, 5)) == "prova-2024-01-02T03-04-05.docx"

    def test_unique_output_path_counts_up(self, tmp_path):
        (tmp_path / "a.pdf").write_bytes(b"")
        (tmp_path / "a-2.pdf").write_bytes(b"")

        assert unique_output_path(tmp_path, "a.pdf") == tmp_path / "a-3.pdf"
