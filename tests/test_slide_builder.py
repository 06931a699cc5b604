"""
Tests for font mapping, slide model building per output mode, and PPTX generation.
"""

import io
import tempfile
import unittest
import sys
from pathlib import Path

from PIL import Image
from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.shapes import MSO_SHAPE_TYPE

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pdf2slides.exceptions import InvalidConfigurationError
from pdf2slides.generator.element_renderer import clean_text
from pdf2slides.generator.pptx_generator import PPTXGenerator
from pdf2slides.mapper.font_mapper import FontMapper
from pdf2slides.mapper.style_mapper import StyleMapper
from pdf2slides.parser.models import GlyphRun, ImageRegion, PageExtraction, TextLine
from pdf2slides.rebuilder.coordinate_mapper import CoordinateMapper, OutputMode


def png_bytes(width=40, height=30, color=(200, 30, 30)):
    buffer = io.BytesIO()
    Image.new('RGB', (width, height), color).save(buffer, format='PNG')
    return buffer.getvalue()


def placed_line(runs, x, y, height):
    line = TextLine(runs[0].y, runs)
    line.x, line.y, line.height = x, y, height
    return line


def sample_extraction():
    hello = GlyphRun('Hello ', 12, 72, 700, 40, color='FF0000', bold=True, font_face='Helvetica')
    world = GlyphRun('World', 12, 112, 700, 35, font_face='Helvetica')
    line = placed_line([hello, world], 72, 89.6, 16.2)
    image = ImageRegion(100, 200, 200, 150, png_bytes(), 200, 150)
    return PageExtraction(0, 612, 792, [line], [image])


class TestFontMapper(unittest.TestCase):
    """Family sanitizing and mapping."""

    def setUp(self):
        self.mapper = FontMapper()

    def test_clean_font(self):
        self.assertEqual(self.mapper.clean_font('ArialMT'), 'Arial')
        self.assertEqual(self.mapper.clean_font('Calibri,Bold'), 'Calibri')
        self.assertEqual(self.mapper.clean_font(''), 'Arial')
        self.assertEqual(self.mapper.clean_font('A'), 'Arial')
        self.assertEqual(self.mapper.clean_font('Font#1'), 'Font1')

    def test_map_font(self):
        self.assertEqual(self.mapper.map_font('Helvetica'), 'Arial')
        self.assertEqual(self.mapper.map_font('TimesNewRoman'), 'Times New Roman')
        self.assertEqual(self.mapper.map_font('SimHei'), '黑体')

    def test_unknown_family_passes_through(self):
        self.assertEqual(self.mapper.map_font('Garamond'), 'Garamond')

    def test_loose_match(self):
        self.assertEqual(self.mapper.map_font('courier new'), 'Courier New')

    def test_configured_mapping_wins(self):
        mapper = FontMapper({'font_mapping': {'Helvetica': 'Helvetica Neue'}, 'default_font': 'Calibri'})
        self.assertEqual(mapper.map_font('Helvetica'), 'Helvetica Neue')
        self.assertEqual(mapper.map_font(''), 'Calibri')

    def test_cjk_detection(self):
        self.assertTrue(self.mapper.is_cjk_font('Microsoft YaHei'))
        self.assertFalse(self.mapper.is_cjk_font('Arial'))


class TestStyleMapper(unittest.TestCase):

    def test_font_size_rounded_and_floored(self):
        mapper = StyleMapper({})
        self.assertEqual(mapper.map_run_style('Arial', 11.6, False, False, '000000')['font_size'], 12)
        self.assertEqual(mapper.map_run_style('Arial', 3, False, False, '000000')['font_size'], 6)

    def test_hex_to_rgb(self):
        mapper = StyleMapper({})
        self.assertEqual(mapper.hex_to_rgb('#FF8000'), (255, 128, 0))
        self.assertEqual(mapper.hex_to_rgb('f00'), (255, 0, 0))
        self.assertIsNone(mapper.hex_to_rgb('zzzzzz'))
        self.assertIsNone(mapper.hex_to_rgb(None))


class TestOutputMode(unittest.TestCase):

    def test_aliases(self):
        self.assertEqual(OutputMode.normalize('editable'), 'hybrid')
        self.assertEqual(OutputMode.normalize(' Clean '), 'clean')

    def test_unknown_mode(self):
        with self.assertRaises(InvalidConfigurationError):
            OutputMode.normalize('vector')


class TestCoordinateMapper(unittest.TestCase):
    """Slide models per output mode."""

    def setUp(self):
        self.mapper = CoordinateMapper({})
        self.background = png_bytes(612, 792, (255, 255, 255))

    def test_image_mode_is_background_only(self):
        slide = self.mapper.create_slide_model(sample_extraction(), 'image', 8.5, 11,
                                               background=self.background)
        self.assertEqual([e.type for e in slide.elements], ['background'])
        self.assertEqual(slide.elements[0].position,
                         {'x': 0.0, 'y': 0.0, 'width': 8.5, 'height': 11})

    def test_hybrid_mode_text_over_background(self):
        slide = self.mapper.create_slide_model(sample_extraction(), 'hybrid', 8.5, 11,
                                               background=self.background)
        self.assertEqual([e.type for e in slide.elements], ['background', 'text'])
        text = slide.elements[1]
        self.assertIsNone(text.style['fill_color'])
        self.assertIsNone(slide.background_color)

    def test_clean_mode_images_and_filled_text(self):
        slide = self.mapper.create_slide_model(sample_extraction(), 'clean', 8.5, 11)
        self.assertEqual([e.type for e in slide.elements], ['image', 'text'])
        self.assertEqual(slide.background_color, 'FFFFFF')
        self.assertEqual(slide.elements[1].style['fill_color'], 'FFFFFF')

        image = slide.elements[0].position
        self.assertAlmostEqual(image['x'], 100 / 72)
        self.assertAlmostEqual(image['y'], 200 / 72)
        self.assertAlmostEqual(image['width'], 200 / 72)
        self.assertAlmostEqual(image['height'], 150 / 72)

    def test_text_geometry(self):
        slide = self.mapper.create_slide_model(sample_extraction(), 'clean', 8.5, 11)
        text = slide.get_elements('text')[0]
        position = text.position
        self.assertAlmostEqual(position['x'], 1.0)
        self.assertAlmostEqual(position['y'], 89.6 / 72)
        self.assertAlmostEqual(position['width'], (147 - 72) / 72 + 0.08)
        self.assertAlmostEqual(position['height'], 16.2 / 72 + 0.04)
        self.assertEqual(text.content, 'Hello World')

        runs = text.style['rich_text_runs']
        self.assertEqual([r['text'] for r in runs], ['Hello ', 'World'])
        first = runs[0]['style']
        self.assertEqual(first, {'font_name': 'Arial', 'font_size': 12, 'bold': True,
                                 'italic': False, 'color': 'FF0000'})

    def test_width_clamped_at_right_edge(self):
        run = GlyphRun('edge text', 12, 590, 700, 80)
        extraction = PageExtraction(0, 612, 792, [placed_line([run], 590, 89.6, 16.2)])
        slide = self.mapper.create_slide_model(extraction, 'clean', 8.5, 11)
        position = slide.get_elements('text')[0].position
        self.assertAlmostEqual(position['x'] + position['width'], 8.5)

    def test_height_clamped_at_bottom_edge(self):
        run = GlyphRun('footer', 12, 72, 7, 40)
        extraction = PageExtraction(0, 612, 792, [placed_line([run], 72, 785, 16.2)])
        slide = self.mapper.create_slide_model(extraction, 'clean', 8.5, 11)
        position = slide.get_elements('text')[0].position
        self.assertAlmostEqual(position['y'], 785 / 72)
        self.assertLess(position['height'], 16.2 / 72)
        self.assertAlmostEqual(position['y'] + position['height'], 11)

    def test_text_outside_slide_dropped(self):
        run = GlyphRun('gone', 12, 620, 700, 20)
        extraction = PageExtraction(0, 612, 792, [placed_line([run], 620, 89.6, 16.2)])
        slide = self.mapper.create_slide_model(extraction, 'clean', 8.5, 11)
        self.assertEqual(slide.get_elements('text'), [])

    def test_negative_offsets_clamped(self):
        run = GlyphRun('top', 12, -3, 795, 20)
        extraction = PageExtraction(0, 612, 792, [placed_line([run], -3, -2.4, 16.2)])
        position = self.mapper.create_slide_model(extraction, 'clean', 8.5, 11) \
            .get_elements('text')[0].position
        self.assertEqual((position['x'], position['y']), (0, 0))

    def test_off_page_image_dropped(self):
        image = ImageRegion(10, 800, 50, 50, png_bytes())
        extraction = PageExtraction(0, 612, 792, [], [image])
        slide = self.mapper.create_slide_model(extraction, 'clean', 8.5, 11)
        self.assertEqual(slide.get_elements('image'), [])

    def test_missing_background_tolerated(self):
        slide = self.mapper.create_slide_model(sample_extraction(), 'hybrid', 8.5, 11)
        self.assertEqual(slide.get_elements('background'), [])
        self.assertEqual(len(slide.get_elements('text')), 1)


class TestPPTXGenerator(unittest.TestCase):
    """Presentation assembly, read back through python-pptx."""

    def build(self, mode):
        generator = PPTXGenerator({})
        generator.set_slide_size(612, 792)
        slide = CoordinateMapper({}).create_slide_model(
            sample_extraction(), mode, generator.slide_width, generator.slide_height,
            background=png_bytes(612, 792, (255, 255, 255)), background_format='PNG')
        generator.add_slide_from_model(slide)
        return generator, Presentation(io.BytesIO(generator.to_bytes()))

    def test_slide_size_from_first_page(self):
        generator = PPTXGenerator({})
        self.assertTrue(generator.set_slide_size(612, 792))
        self.assertFalse(generator.set_slide_size(792, 612))
        self.assertAlmostEqual(generator.slide_width, 8.5, places=3)
        self.assertAlmostEqual(generator.slide_height, 11, places=3)

    def test_text_runs_read_back(self):
        generator, prs = self.build('clean')
        self.assertEqual(generator.get_slide_count(), 1)
        slide = prs.slides[0]
        textboxes = [shape for shape in slide.shapes if shape.has_text_frame]
        self.assertEqual(len(textboxes), 1)

        runs = textboxes[0].text_frame.paragraphs[0].runs
        self.assertEqual([run.text for run in runs], ['Hello ', 'World'])
        self.assertEqual(runs[0].font.size.pt, 12)
        self.assertTrue(runs[0].font.bold)
        self.assertEqual(runs[0].font.color.rgb, RGBColor(0xFF, 0x00, 0x00))
        self.assertEqual(runs[0].font.name, 'Arial')
        self.assertFalse(textboxes[0].text_frame.word_wrap)

    def test_clean_slide_has_picture_and_white_background(self):
        _, prs = self.build('clean')
        slide = prs.slides[0]
        pictures = [shape for shape in slide.shapes if shape.shape_type == MSO_SHAPE_TYPE.PICTURE]
        self.assertEqual(len(pictures), 1)
        self.assertEqual(slide.background.fill.fore_color.rgb, RGBColor(0xFF, 0xFF, 0xFF))

    def test_image_slide_is_single_picture(self):
        _, prs = self.build('image')
        shapes = list(prs.slides[0].shapes)
        self.assertEqual(len(shapes), 1)
        self.assertEqual(shapes[0].left, 0)
        self.assertEqual(shapes[0].top, 0)

    def test_save(self):
        generator, _ = self.build('hybrid')
        with tempfile.TemporaryDirectory() as tmp:
            output = Path(tmp) / 'nested' / 'out.pptx'
            self.assertTrue(generator.save(str(output)))
            self.assertTrue(output.exists())


class TestCleanText(unittest.TestCase):

    def test_strips_xml_unsafe_characters(self):
        self.assertEqual(clean_text('a\x00b\x0bc\uffffd'), 'abcd')
        self.assertEqual(clean_text('tab\tok\n'), 'tab\tok\n')


if __name__ == '__main__':
    unittest.main()
