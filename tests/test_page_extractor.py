"""
Tests for per-page extraction: line placement, off-page clamping, image regions.
"""

import unittest
import sys
from pathlib import Path

import numpy as np

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pdf2slides.exceptions import PageExtractionError
from pdf2slides.parser.image_locator import ImageRegionLocator
from pdf2slides.parser.models import FontInfo, GlyphRun, ImageRect, PageRaster, TextItem
from pdf2slides.parser.operators import OPS, OperatorList
from pdf2slides.parser.page_extractor import PageExtractor

PNG_SIGNATURE = b'\x89PNG\r\n\x1a\n'


def white_raster(width_pt=612, height_pt=792, scale=1.0):
    pixels = np.full((int(height_pt * scale), int(width_pt * scale), 3), 255, dtype=np.uint8)
    return PageRaster(pixels, scale)


class FakePage:
    """In-memory page exposing the source page interface."""

    def __init__(self, ops, items, fonts=None, width=612, height=792, page_num=0):
        self.page_num = page_num
        self.width = width
        self.height = height
        self._ops = ops
        self._items = items
        self._fonts = fonts or {}
        self.render_calls = []

    def get_operator_list(self):
        return OperatorList.from_pairs(self._ops)

    def get_text_content(self):
        return self._items

    def get_font(self, name):
        return self._fonts.get(name)

    def render(self, scale):
        self.render_calls.append(scale)
        return white_raster(self.width, self.height, scale)


class BrokenPage(FakePage):

    def get_text_content(self):
        raise IOError('stream truncated')


class UnrenderablePage(FakePage):

    def render(self, scale):
        self.render_calls.append(scale)
        raise RuntimeError('rasterizer crashed')


class TestLinePlacement(unittest.TestCase):
    """Runs → placed lines."""

    def setUp(self):
        self.extractor = PageExtractor({})

    def test_round_trip_single_run(self):
        hello = GlyphRun('Hello', 12, 10, 700, 30, color='FF0000')
        lines = self.extractor.build_lines([hello], 792)
        self.assertEqual(len(lines), 1)
        line = lines[0]
        self.assertEqual(len(line.runs), 1)
        self.assertEqual(line.runs[0].text, 'Hello')
        self.assertEqual(line.runs[0].font_size, 12)
        self.assertEqual(line.runs[0].color, 'FF0000')
        self.assertAlmostEqual(line.y, 89.6)
        self.assertAlmostEqual(line.x, 10)
        self.assertAlmostEqual(line.height, 12 * 1.35)

    def test_line_below_page_dropped(self):
        # Top-origin y = 792 + 10
        run = GlyphRun('ghost', 12, 10, -12.4, 30)
        self.assertEqual(self.extractor.build_lines([run], 792), [])

    def test_small_overhang_kept(self):
        # Top-origin y = 792 - 794 - 2.4, inside the 5pt margin
        run = GlyphRun('edge', 12, 10, 794, 30)
        lines = self.extractor.build_lines([run], 792)
        self.assertEqual(len(lines), 1)
        self.assertLess(lines[0].y, 0)

    def test_lines_top_to_bottom(self):
        runs = [GlyphRun('second', 12, 10, 600, 40), GlyphRun('first', 12, 10, 700, 30)]
        lines = self.extractor.build_lines(runs, 792)
        self.assertEqual([line.text for line in lines], ['first', 'second'])


class TestPageExtractor(unittest.TestCase):
    """Full page pipeline on synthetic collaborator output."""

    def test_extract_page(self):
        ops = [
            (OPS.SET_FILL_RGB_COLOR, [1, 0, 0]),
            (OPS.SHOW_SPACED_TEXT, [['Hello', -300, 'World']]),
            (OPS.SAVE, []),
            (OPS.TRANSFORM, [100, 0, 0, 50, 20, 30]),
            (OPS.PAINT_IMAGE_XOBJECT, []),
            (OPS.RESTORE, []),
        ]
        items = [
            TextItem('Hello', [12, 0, 0, 12, 10, 700], 50, 'F1'),
            TextItem('World', [12, 0, 0, 12, 65, 700], 55, 'F1'),
        ]
        page = FakePage(ops, items, {'F1': FontInfo('ABCDEF+Arial-BoldMT')})
        extraction = PageExtractor({'parser': {'image_scale': 1.0}}).extract_page(page)

        self.assertEqual(len(extraction.lines), 1)
        run = extraction.lines[0].runs[0]
        self.assertEqual(run.text, 'Hello World')
        self.assertEqual(run.color, 'FF0000')
        self.assertTrue(run.bold)
        self.assertEqual(run.font_face, 'Arial')

        self.assertEqual(len(extraction.images), 1)
        image = extraction.images[0]
        self.assertAlmostEqual(image.x, 20)
        self.assertAlmostEqual(image.y, 792 - 80)
        self.assertEqual((image.width_px, image.height_px), (100, 50))
        self.assertTrue(image.image_data.startswith(PNG_SIGNATURE))
        self.assertEqual(page.render_calls, [1.0])
        self.assertFalse(extraction.is_landscape)

    def test_no_images_no_render(self):
        page = FakePage([(OPS.SHOW_TEXT, ['x'])], [TextItem('x', [10, 0, 0, 10, 0, 0], 5)])
        extraction = PageExtractor({}).extract_page(page)
        self.assertEqual(extraction.images, [])
        self.assertEqual(page.render_calls, [])

    def test_images_skipped_when_not_requested(self):
        ops = [(OPS.TRANSFORM, [100, 0, 0, 100, 0, 0]), (OPS.PAINT_IMAGE_XOBJECT, [])]
        page = FakePage(ops, [])
        extraction = PageExtractor({}).extract_page(page, include_images=False)
        self.assertEqual(extraction.images, [])
        self.assertEqual(page.render_calls, [])

    def test_fetch_failure_is_fatal(self):
        page = BrokenPage([], [], page_num=3)
        with self.assertRaises(PageExtractionError) as ctx:
            PageExtractor({}).extract_page(page)
        self.assertEqual(ctx.exception.page_num, 3)
        self.assertIsInstance(ctx.exception.cause, IOError)

    def test_render_failure_keeps_text(self):
        ops = [
            (OPS.SHOW_TEXT, ['Caption']),
            (OPS.TRANSFORM, [50, 0, 0, 50, 100, 100]),
            (OPS.PAINT_IMAGE_XOBJECT, []),
        ]
        page = UnrenderablePage(ops, [TextItem('Caption', [12, 0, 0, 12, 10, 700], 40)])
        extraction = PageExtractor({'parser': {'image_scale': 2.0}}).extract_page(page)
        self.assertEqual(page.render_calls, [2.0])
        self.assertEqual(extraction.images, [])
        self.assertEqual([line.text for line in extraction.lines], ['Caption'])


class TestImageRegionLocator(unittest.TestCase):
    """Top-origin conversion, dedup and cropping."""

    def setUp(self):
        self.locator = ImageRegionLocator({})

    def test_near_duplicates_emitted_once(self):
        rects = [ImageRect(20, 700, 100, 50), ImageRect(21, 699, 101, 51)]
        regions = self.locator.locate(rects, 792, raster=white_raster())
        self.assertEqual(len(regions), 1)
        self.assertAlmostEqual(regions[0].x, 20)
        self.assertAlmostEqual(regions[0].y, 42)

    def test_distinct_placements_kept(self):
        rects = [ImageRect(20, 700, 100, 50), ImageRect(300, 100, 100, 50)]
        regions = self.locator.locate(rects, 792, raster=white_raster())
        self.assertEqual(len(regions), 2)

    def test_crop_clamped_to_raster(self):
        rects = [ImageRect(580, 0, 100, 100)]
        regions = self.locator.locate(rects, 792, raster=white_raster(scale=2.0))
        self.assertEqual(len(regions), 1)
        self.assertEqual((regions[0].width_px, regions[0].height_px), (64, 200))

    def test_tiny_crop_dropped(self):
        rects = [ImageRect(608, 0, 100, 100)]
        self.assertEqual(self.locator.locate(rects, 792, raster=white_raster()), [])

    def test_render_called_lazily(self):
        calls = []

        def render():
            calls.append(1)
            return white_raster()

        self.assertEqual(self.locator.locate([], 792, render=render), [])
        self.assertEqual(calls, [])
        self.locator.locate([ImageRect(0, 0, 50, 50)], 792, render=render)
        self.assertEqual(calls, [1])

    def test_render_failure_yields_no_regions(self):
        def render():
            raise RuntimeError('rasterizer crashed')

        with self.assertLogs('pdf2slides.parser.image_locator', level='WARNING'):
            regions = self.locator.locate([ImageRect(0, 0, 50, 50)], 792, render=render)
        self.assertEqual(regions, [])


if __name__ == '__main__':
    unittest.main()
