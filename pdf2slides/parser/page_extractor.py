"""
Page Extractor - Runs the extraction pipeline for one page
"""

import logging
from typing import Any, Dict, List

from .graphics_state import GraphicsStateWalker
from .image_locator import ImageRegionLocator
from .models import GlyphRun, PageExtraction, TextLine
from .text_extractor import TextRunExtractor
from ..analyzer.line_clusterer import LineClusterer
from ..analyzer.run_merger import RunMerger
from ..exceptions import PageExtractionError

logger = logging.getLogger(__name__)


class PageExtractor:
    """
    Operator list + text content → colour sequence and image rectangles →
    glyph runs → lines → merged lines, plus cropped image regions.
    """

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize Page Extractor.

        Args:
            config: Full configuration dictionary (uses 'parser' and 'analyzer')
        """
        self.config = config
        parser_config = config.get('parser', {})
        analyzer_config = config.get('analyzer', {})

        self.image_scale = parser_config.get('image_scale', 2.5)
        self.page_margin = config.get('rebuilder', {}).get('page_margin', 5)
        self.baseline_offset_ratio = analyzer_config.get('baseline_offset_ratio', 0.2)
        self.line_height_ratio = analyzer_config.get('line_height_ratio', 1.35)

        self.walker = GraphicsStateWalker(parser_config)
        self.text_extractor = TextRunExtractor(parser_config)
        self.image_locator = ImageRegionLocator(parser_config)
        self.clusterer = LineClusterer(analyzer_config)
        self.merger = RunMerger(analyzer_config)

    def extract_page(self, page, include_images: bool = True) -> PageExtraction:
        """
        Extract styled lines and image regions from one page.

        Args:
            page: Source page (operator list, text content, fonts, rendering)
            include_images: Whether image regions should be located and cropped

        Returns:
            PageExtraction for the page

        Raises:
            PageExtractionError: If the operator list or text content cannot be fetched
        """
        try:
            operator_list = page.get_operator_list()
            text_items = page.get_text_content()
        except PageExtractionError:
            raise
        except Exception as e:
            raise PageExtractionError(page.page_num, e) from e

        walk = self.walker.walk(operator_list)
        runs = self.text_extractor.extract(text_items, walk.colors, page.get_font)
        lines = self.build_lines(runs, page.height)

        images = []
        if include_images and walk.image_rects:
            located = self.image_locator.locate(
                walk.image_rects, page.height,
                render=lambda: page.render(self.image_scale)
            )
            images = [img for img in located if self.is_within_page(img.y, page.height)]

        extraction = PageExtraction(page.page_num, page.width, page.height, lines, images)
        logger.info(f"Page {page.page_num + 1}: {len(text_items)} text items → {len(runs)} runs → "
                    f"{len(lines)} lines, {len(images)} image region(s)")
        return extraction

    def build_lines(self, runs: List[GlyphRun], page_height: float) -> List[TextLine]:
        """
        Cluster, merge and place runs as top-origin lines.

        Args:
            runs: Glyph runs of the page
            page_height: Page height in points

        Returns:
            Placed lines, top to bottom, with off-page lines removed
        """
        lines = self.merger.merge_lines(self.clusterer.cluster(runs))

        placed = []
        for line in lines:
            line.runs = [run for run in line.runs if run.text]
            if not line.runs:
                continue

            max_size = line.max_font_size
            line.x = min(run.x for run in line.runs)
            line.y = page_height - line.baseline_y - max_size * self.baseline_offset_ratio
            line.height = max_size * self.line_height_ratio

            if not self.is_within_page(line.y, page_height):
                logger.debug(f"Dropping off-page line at y={line.y:.1f}: {line.text[:30]!r}")
                continue
            placed.append(line)

        return placed

    def is_within_page(self, y_top: float, page_height: float) -> bool:
        """Check a top-origin y against the page with a small margin."""
        return -self.page_margin <= y_top <= page_height + self.page_margin
