"""
Unit tests for raster page planning and page composition.
"""

import pytest
from PIL import Image

from exam_drafter.export import ExportConfig, PageBand, compose_pages, plan_pages


WIDTH = 1000


@pytest.fixture
def config():
    return ExportConfig()


@pytest.fixture
def per_page(config):
    """Content height of one page in pixels for a WIDTH-px bitmap."""
    return int(round(config.content_height_mm * WIDTH / config.page_width_mm))


class TestPlanPages:
    def test_when_content_fits_then_single_band(self, config, per_page):
        bands = plan_pages(WIDTH, per_page - 10, config)

        assert bands == (PageBand(index=0, top=0, height=per_page - 10),)

    def test_when_content_exactly_one_page_then_single_band(self, config, per_page):
        assert len(plan_pages(WIDTH, per_page, config)) == 1

    @pytest.mark.parametrize("k", [2, 3, 7])
    def test_when_content_exactly_k_pages_then_k_bands(self, config, per_page, k):
        bands = plan_pages(WIDTH, k * per_page, config)

        assert len(bands) == k
        assert all(b.height == per_page for b in bands)
        assert bands[-1].bottom == k * per_page

    def test_when_remainder_below_threshold_then_no_trailing_page(self, config, per_page):
        # 1px over three pages: well under the 2mm minimum
        bands = plan_pages(WIDTH, 3 * per_page + 1, config)

        assert len(bands) == 3

    def test_when_remainder_above_threshold_then_partial_last_page(self, config, per_page):
        bands = plan_pages(WIDTH, 2 * per_page + 200, config)

        assert len(bands) == 3
        assert bands[-1] == PageBand(index=2, top=2 * per_page, height=200)

    def test_bands_are_contiguous(self, config, per_page):
        bands = plan_pages(WIDTH, 4 * per_page + 500, config)

        for previous, current in zip(bands, bands[1:]):
            assert current.top == previous.bottom
        assert [b.index for b in bands] == list(range(len(bands)))

    def test_when_width_not_positive_then_raises(self, config):
        with pytest.raises(ValueError):
            plan_pages(0, 100, config)

    def test_when_margins_change_then_page_capacity_changes(self, per_page):
        roomy = ExportConfig(margin_top_mm=0, margin_bottom_mm=0)

        assert len(plan_pages(WIDTH, per_page + 50, roomy)) == 1


class TestComposePages:
    def test_each_page_is_white_a4_canvas_with_band_at_top_margin(self, config, per_page):
        # Arrange: solid black content, two full pages
        bitmap = Image.new("RGB", (WIDTH, 2 * per_page), "black")
        bands = plan_pages(bitmap.width, bitmap.height, config)
        top_margin = int(round(config.margin_top_mm * WIDTH / config.page_width_mm))

        # Act
        pages = compose_pages(bitmap, bands, config)

        # Assert
        expected_height = int(round(config.page_height_mm * WIDTH / config.page_width_mm))
        assert len(pages) == 2
        for page in pages:
            assert page.size == (WIDTH, expected_height)
            assert page.getpixel((5, top_margin // 2)) == (255, 255, 255)
            assert page.getpixel((5, top_margin + 5)) == (0, 0, 0)
            assert page.getpixel((5, expected_height - 2)) == (255, 255, 255)

    def test_when_band_is_short_then_rest_of_page_is_white(self, config, per_page):
        bitmap = Image.new("RGB", (WIDTH, 100), "black")
        bands = plan_pages(bitmap.width, bitmap.height, config)

        page = compose_pages(bitmap, bands, config)[0]

        assert page.getpixel((5, 400)) == (255, 255, 255)


class TestPageBand:
    def test_negative_height_rejected(self):
        with pytest.raises(ValueError):
            PageBand(index=0, top=0, height=-1)
