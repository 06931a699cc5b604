"""
Coordinate Mapper - Builds slide models from page extractions
"""

import logging
from typing import Any, Dict, Optional

from .slide_model import SlideModel
from ..exceptions import InvalidConfigurationError
from ..mapper.style_mapper import StyleMapper
from ..parser.models import ImageRegion, PageExtraction, TextLine

logger = logging.getLogger(__name__)

POINTS_PER_INCH = 72.0

IMAGE_Z_INDEX = 0
TEXT_Z_INDEX = 10


class OutputMode:
    """Slide output modes."""

    IMAGE = 'image'
    HYBRID = 'hybrid'
    CLEAN = 'clean'

    ALL = (IMAGE, HYBRID, CLEAN)
    ALIASES = {'editable': HYBRID}

    @classmethod
    def normalize(cls, mode: str) -> str:
        """
        Resolve a mode name or alias.

        Raises:
            InvalidConfigurationError: If the mode is unknown
        """
        name = (mode or '').strip().lower()
        name = cls.ALIASES.get(name, name)
        if name not in cls.ALL:
            raise InvalidConfigurationError(
                f"Unknown output mode '{mode}' (expected one of {', '.join(cls.ALL)}, editable)")
        return name


def pt_to_in(value: float) -> float:
    return value / POINTS_PER_INCH


class CoordinateMapper:
    """
    Maps page extractions (points, top-origin) to slide models (inches).

    One builder serves every output mode: the mode decides whether the slide
    gets a full-bleed page picture, separate image objects, and how text boxes
    are filled.
    """

    def __init__(self, config: Dict[str, Any], mapper_config: Dict[str, Any] = None):
        """
        Initialize Coordinate Mapper.

        Args:
            config: Rebuilder configuration dictionary
            mapper_config: Mapper configuration dictionary (fonts, colours)
        """
        self.config = config or {}
        self.page_margin = self.config.get('page_margin', 5)
        self.text_padding = self.config.get('text_padding', 0.08)
        self.height_padding = self.config.get('height_padding', 0.04)
        self.min_box_width = self.config.get('min_box_width', 0.1)
        self.min_box_height = self.config.get('min_box_height', 0.08)
        self.min_element_size = self.config.get('min_element_size', 0.05)
        self.min_font_size = self.config.get('min_font_size', 6)
        self.background_color = self.config.get('background_color', 'FFFFFF')
        self.style_mapper = StyleMapper(mapper_config or {})

    def create_slide_model(self, extraction: PageExtraction, mode: str,
                           slide_width: float, slide_height: float,
                           background: Optional[bytes] = None,
                           background_format: str = 'JPEG') -> SlideModel:
        """
        Create a slide model for one page.

        Args:
            extraction: Page extraction (lines and image regions)
            mode: Output mode ('image', 'hybrid'/'editable', 'clean')
            slide_width: Slide width in inches
            slide_height: Slide height in inches
            background: Encoded full-page raster (image and hybrid modes)
            background_format: Format of the background raster

        Returns:
            SlideModel object
        """
        mode = OutputMode.normalize(mode)
        slide = SlideModel(extraction.page_num, slide_width, slide_height)

        if mode in (OutputMode.IMAGE, OutputMode.HYBRID):
            if background is not None:
                slide.add_background_image(background, background_format)
            else:
                logger.warning(f"Slide {extraction.page_num + 1}: no page raster for {mode} mode")

        if mode == OutputMode.CLEAN:
            slide.set_background(self.background_color)
            for region in extraction.images:
                self._add_image(region, slide, extraction.page_height)

        if mode in (OutputMode.HYBRID, OutputMode.CLEAN):
            fill_color = self.background_color if mode == OutputMode.CLEAN else None
            for line in extraction.lines:
                self._add_line(line, slide, extraction.page_height, fill_color)

        slide.sort_elements()

        logger.info(f"Slide {extraction.page_num + 1} ({mode}): "
                    f"{len(slide.get_elements('text'))} text boxes, "
                    f"{len(slide.get_elements('image'))} images")
        return slide

    def _is_on_page(self, y_top: float, page_height: float) -> bool:
        return -self.page_margin <= y_top <= page_height + self.page_margin

    def _add_image(self, region: ImageRegion, slide: SlideModel, page_height: float):
        if not self._is_on_page(region.y, page_height):
            logger.debug(f"Dropping off-page image at y={region.y:.1f}")
            return

        x = max(pt_to_in(region.x), 0)
        y = max(pt_to_in(region.y), 0)
        w = min(pt_to_in(region.width), slide.width - x)
        h = min(pt_to_in(region.height), slide.height - y)
        if w < self.min_element_size or h < self.min_element_size:
            logger.debug(f"Dropping image {w:.2f}x{h:.2f}in outside or too small for the slide")
            return

        slide.add_image(region.image_data, {'x': x, 'y': y, 'width': w, 'height': h},
                        region.image_format, z_index=IMAGE_Z_INDEX)

    def _add_line(self, line: TextLine, slide: SlideModel, page_height: float,
                  fill_color: Optional[str]):
        if not self._is_on_page(line.y, page_height):
            logger.debug(f"Dropping off-page line at y={line.y:.1f}")
            return

        runs = [run for run in line.runs if run.text]
        if not runs:
            return

        rich_text_runs = [{
            'text': run.text,
            'style': self.style_mapper.map_run_style(
                run.font_face, run.font_size, run.bold, run.italic, run.color,
                self.min_font_size)
        } for run in runs]

        right = max(run.right for run in runs)
        x = max(pt_to_in(line.x), 0)
        y = max(pt_to_in(line.y), 0)
        w = min(pt_to_in(right - line.x) + self.text_padding, slide.width - x)

        if x >= slide.width or y >= slide.height or w < self.min_element_size:
            logger.debug(f"Dropping text box outside the slide: {line.text[:30]!r}")
            return

        w = min(max(w, self.min_box_width), slide.width - x)
        h = min(max(pt_to_in(line.height) + self.height_padding, self.min_box_height), slide.height - y)

        style = {
            'rich_text_runs': rich_text_runs,
            'fill_color': fill_color,
        }
        slide.add_text(''.join(run.text for run in runs),
                       {'x': x, 'y': y, 'width': w, 'height': h},
                       style, z_index=TEXT_Z_INDEX)
