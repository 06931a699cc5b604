"""
PDF to PPTX Converter - Runs a conversion job page by page
"""

import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from .exceptions import ConversionCancelled, DocumentOpenError, Pdf2SlidesError
from .generator.pptx_generator import PPTXGenerator
from .parser.models import PageExtraction
from .parser.page_extractor import PageExtractor
from .parser.pdf_parser import PDFParser
from .rebuilder.coordinate_mapper import CoordinateMapper, OutputMode

logger = logging.getLogger(__name__)

# Share of the progress bar used by the page loop; the rest covers serialization
PAGE_PROGRESS_SPAN = 90
BUILD_PROGRESS = 95


class CancellationToken:
    """Thread-safe cancellation flag shared between a job and its caller."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()


class ConversionResult:
    """Outcome of a finished conversion job."""

    def __init__(self, output_path: Optional[str], num_pages: int, mode: str):
        self.output_path = output_path
        self.num_pages = num_pages
        self.mode = mode

    def to_dict(self) -> Dict[str, Any]:
        return {
            'output_path': self.output_path,
            'num_pages': self.num_pages,
            'mode': self.mode
        }

    def __repr__(self) -> str:
        return f"ConversionResult({self.output_path!r}, pages={self.num_pages}, mode={self.mode})"


class PDFToPPTXConverter:
    """
    Converts PDF documents to PowerPoint presentations.

    Pages are processed strictly in order; only the presentation being
    assembled carries state from one page to the next.
    """

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize the converter.

        Args:
            config: Full configuration dictionary
        """
        self.config = config
        converter_config = config.get('converter', {}) or {}
        self.mode = OutputMode.normalize(converter_config.get('mode', OutputMode.HYBRID))
        self.background_scale = converter_config.get('background_scale', 3.0)
        self.background_format = converter_config.get('background_format', 'JPEG')
        self.background_quality = converter_config.get('background_quality', 95)

        self.page_extractor = PageExtractor(config)
        self.coordinate_mapper = CoordinateMapper(config.get('rebuilder', {}), config.get('mapper', {}))

    def convert(self, pdf_path: Union[str, Path], output_path: Optional[Union[str, Path]] = None,
                mode: Optional[str] = None,
                cancel_token: Optional[CancellationToken] = None,
                progress_callback: Optional[Callable[[int], None]] = None,
                status_callback: Optional[Callable[[str], None]] = None) -> ConversionResult:
        """
        Convert a PDF file and write the presentation.

        Args:
            pdf_path: Path to the input PDF
            output_path: Path of the PPTX to write (defaults to the input name with .pptx)
            mode: Output mode; the configured mode when omitted
            cancel_token: Token checked at the top of every page
            progress_callback: Receives an integer percentage
            status_callback: Receives human-readable status messages

        Returns:
            ConversionResult

        Raises:
            ConversionCancelled: If the token was set; nothing is written
            Pdf2SlidesError: If the document cannot be converted
        """
        mode = OutputMode.normalize(mode) if mode else self.mode
        output_path = Path(output_path) if output_path else Path(pdf_path).with_suffix('.pptx')

        logger.info("=" * 60)
        logger.info(f"Converting {pdf_path} → {output_path} ({mode} mode)")
        logger.info("=" * 60)

        parser = PDFParser(self.config.get('parser', {}))
        parser.open(pdf_path)
        try:
            generator = self.convert_document(parser, mode, cancel_token, progress_callback, status_callback)
        finally:
            parser.close()

        if not generator.save(str(output_path)):
            raise Pdf2SlidesError(f"Failed to write {output_path}")

        self._report(progress_callback, 100)
        self._status(status_callback, "Done")

        return ConversionResult(str(output_path), generator.get_slide_count(), mode)

    def convert_document(self, source, mode: Optional[str] = None,
                         cancel_token: Optional[CancellationToken] = None,
                         progress_callback: Optional[Callable[[int], None]] = None,
                         status_callback: Optional[Callable[[str], None]] = None) -> PPTXGenerator:
        """
        Build a presentation from an open page source.

        Args:
            source: Object with page_count and get_page(n)
            mode: Output mode; the configured mode when omitted
            cancel_token: Token checked at the top of every page
            progress_callback: Receives an integer percentage
            status_callback: Receives human-readable status messages

        Returns:
            PPTXGenerator holding one slide per page, not yet serialized

        Raises:
            ConversionCancelled: If the token was set before a page started
        """
        mode = OutputMode.normalize(mode) if mode else self.mode
        total = source.page_count
        if total == 0:
            raise DocumentOpenError("Document has no pages")

        generator = PPTXGenerator(self.config)

        for page_num in range(total):
            if cancel_token is not None and cancel_token.is_cancelled:
                logger.info(f"Conversion cancelled before page {page_num + 1} of {total}")
                raise ConversionCancelled(page_num)

            self._report(progress_callback, round(page_num / total * PAGE_PROGRESS_SPAN))

            page = source.get_page(page_num)
            if not generator.set_slide_size(page.width, page.height):
                if abs(page.width / 72.0 - generator.slide_width) > 0.01 or \
                        abs(page.height / 72.0 - generator.slide_height) > 0.01:
                    logger.info(f"Page {page_num + 1} is {page.width:.0f}×{page.height:.0f}pt; "
                                f"placed 1:1 on the first page's slide size")

            slide_model = self._convert_page(page, page_num, total, mode, generator,
                                             status_callback)
            generator.add_slide_from_model(slide_model)

        self._report(progress_callback, BUILD_PROGRESS)
        self._status(status_callback, "Building PPTX…")
        logger.info(f"Processed {total} page(s) in {mode} mode")

        return generator

    def _convert_page(self, page, page_num: int, total: int, mode: str,
                      generator: PPTXGenerator, status_callback) -> Any:
        background = None
        if mode in (OutputMode.IMAGE, OutputMode.HYBRID):
            self._status(status_callback, f"Rendering page {page_num + 1} of {total}…")
            background = self._render_background(page)

        if mode == OutputMode.IMAGE:
            extraction = PageExtraction(page_num, page.width, page.height)
        else:
            self._status(status_callback, f"Extracting text — page {page_num + 1} of {total}…")
            extraction = self.page_extractor.extract_page(page, include_images=(mode == OutputMode.CLEAN))

        return self.coordinate_mapper.create_slide_model(
            extraction, mode, generator.slide_width, generator.slide_height,
            background=background, background_format=self.background_format
        )

    def _render_background(self, page) -> Optional[bytes]:
        try:
            raster = page.render(self.background_scale)
            return raster.encode(self.background_format, self.background_quality)
        except Exception as e:
            logger.warning(f"Page {page.page_num + 1}: background render failed: {e}")
            return None

    @staticmethod
    def _report(progress_callback, percent: int):
        if progress_callback is not None:
            progress_callback(percent)

    @staticmethod
    def _status(status_callback, message: str):
        logger.debug(message)
        if status_callback is not None:
            status_callback(message)
