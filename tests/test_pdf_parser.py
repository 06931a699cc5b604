"""
Integration tests against small PDFs generated with PyMuPDF.
"""

import io
import tempfile
import unittest
import sys
from pathlib import Path

import fitz  # PyMuPDF
from PIL import Image
from pptx import Presentation

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pdf2slides.converter import PDFToPPTXConverter
from pdf2slides.exceptions import DocumentOpenError
from pdf2slides.parser.page_extractor import PageExtractor
from pdf2slides.parser.pdf_parser import PDFParser


def build_pdf(pages=1):
    """Letter-size pages with a red line of text and one placed picture."""
    buffer = io.BytesIO()
    Image.new('RGB', (40, 30), (20, 120, 220)).save(buffer, format='PNG')
    picture = buffer.getvalue()

    doc = fitz.open()
    for n in range(pages):
        page = doc.new_page(width=612, height=792)
        page.insert_text((72, 92), f"Hello PDF {n + 1}", fontsize=12, color=(1, 0, 0))
        page.insert_image(fitz.Rect(100, 200, 300, 350), stream=picture)
    data = doc.tobytes()
    doc.close()
    return data


class TestPDFParser(unittest.TestCase):
    """Document access."""

    def setUp(self):
        self.parser = PDFParser()
        self.parser.open(build_pdf(pages=2))

    def tearDown(self):
        self.parser.close()

    def test_page_count_and_size(self):
        self.assertEqual(self.parser.page_count, 2)
        page = self.parser.get_page(1)
        self.assertAlmostEqual(page.width, 612)
        self.assertAlmostEqual(page.height, 792)

    def test_page_out_of_range(self):
        with self.assertRaises(IndexError):
            self.parser.get_page(2)

    def test_render(self):
        raster = self.parser.get_page(0).render(0.5)
        self.assertEqual((raster.width, raster.height), (306, 396))
        self.assertEqual(raster.pixels.shape[2], 3)

    def test_records_fill_colour_and_text(self):
        page = self.parser.get_page(0)
        items = [item for item in page.get_text_content() if item.text.strip()]
        self.assertTrue(items)
        self.assertTrue(all(item.font_name for item in items))
        self.assertIsNotNone(page.get_font(items[0].font_name))

    def test_garbage_rejected(self):
        with self.assertRaises(DocumentOpenError):
            PDFParser().open(b'%PDF-1.4 truncated')

    def test_missing_file_rejected(self):
        with self.assertRaises(DocumentOpenError):
            PDFParser().open('/nonexistent/input.pdf')

    def test_closed_parser_has_no_pages(self):
        self.parser.close()
        self.assertEqual(self.parser.page_count, 0)


class TestExtractionFromPDF(unittest.TestCase):
    """Extraction of a generated page end to end."""

    def setUp(self):
        self.parser = PDFParser()
        self.parser.open(build_pdf())
        self.extraction = PageExtractor({'parser': {'image_scale': 1.0}}).extract_page(
            self.parser.get_page(0))

    def tearDown(self):
        self.parser.close()

    def test_text_line_position_and_colour(self):
        self.assertEqual(len(self.extraction.lines), 1)
        line = self.extraction.lines[0]
        self.assertIn('Hello', line.text)
        self.assertAlmostEqual(line.y, 89.6, delta=1.0)
        self.assertAlmostEqual(line.x, 72, delta=1.0)
        self.assertTrue(all(run.color == 'FF0000' for run in line.runs))
        self.assertAlmostEqual(line.runs[0].font_size, 12, delta=0.1)

    def test_image_region(self):
        self.assertEqual(len(self.extraction.images), 1)
        image = self.extraction.images[0]
        self.assertAlmostEqual(image.x, 100, delta=1.0)
        self.assertAlmostEqual(image.y, 200, delta=1.0)
        self.assertAlmostEqual(image.width, 200, delta=1.0)
        self.assertAlmostEqual(image.height, 150, delta=1.0)


class TestConvertFile(unittest.TestCase):

    def test_clean_conversion_writes_editable_text(self):
        with tempfile.TemporaryDirectory() as tmp:
            pdf_path = Path(tmp) / 'deck.pdf'
            pdf_path.write_bytes(build_pdf(pages=2))

            result = PDFToPPTXConverter({'converter': {'mode': 'clean'}}).convert(str(pdf_path))
            self.assertEqual(result.output_path, str(pdf_path.with_suffix('.pptx')))
            self.assertEqual(result.num_pages, 2)

            prs = Presentation(result.output_path)
            texts = [shape.text_frame.text for slide in prs.slides
                     for shape in slide.shapes if shape.has_text_frame]
            self.assertEqual(len(texts), 2)
            self.assertIn('Hello', texts[0])
            self.assertAlmostEqual(prs.slide_width.inches, 8.5, places=2)


if __name__ == '__main__':
    unittest.main()
