"""
PPTX Generator - Assembles one slide per page into a presentation
"""

import io
import logging
from pathlib import Path
from typing import Any, Dict

from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.util import Inches

from .element_renderer import ElementRenderer
from ..mapper.style_mapper import StyleMapper
from ..rebuilder.slide_model import SlideModel

logger = logging.getLogger(__name__)

BLANK_LAYOUT_INDEX = 6


class PPTXGenerator:
    """
    Owns the python-pptx Presentation a conversion job writes into.

    The slide size is fixed once, from the first page, and applies to every
    slide of the presentation.
    """

    def __init__(self, config: Dict[str, Any]):
        """
        Open the template, or a default presentation.

        Args:
            config: Full configuration dictionary (uses 'generator' and 'mapper')
        """
        self.config = config
        generator_config = config.get('generator', {}) or {}
        self.template_path = generator_config.get('template')

        if self.template_path and Path(self.template_path).exists():
            self.prs = Presentation(self.template_path)
        else:
            self.prs = Presentation()

        self.slide_dimensions_set = False

        self.style_mapper = StyleMapper(config.get('mapper', {}))
        self.element_renderer = ElementRenderer(self.style_mapper)

    @property
    def slide_width(self) -> float:
        """Slide width in inches."""
        return self.prs.slide_width.inches

    @property
    def slide_height(self) -> float:
        """Slide height in inches."""
        return self.prs.slide_height.inches

    def set_slide_size(self, width_pt: float, height_pt: float) -> bool:
        """
        Fix the slide size from a page size in points.

        Only the first call has an effect.

        Args:
            width_pt: Page width in points
            height_pt: Page height in points

        Returns:
            True if the size was applied by this call
        """
        if self.slide_dimensions_set:
            return False
        self.prs.slide_width = Inches(width_pt / 72.0)
        self.prs.slide_height = Inches(height_pt / 72.0)
        self.slide_dimensions_set = True
        logger.info(f"Set PPT dimensions to {self.slide_width:.2f}\" x {self.slide_height:.2f}\" "
                    f"(from {width_pt:.0f}×{height_pt:.0f}pt)")
        return True

    def add_slide_from_model(self, slide_model: SlideModel) -> Any:
        """
        Append a blank-layout slide and draw the model onto it.

        Args:
            slide_model: Page content in slide inches

        Returns:
            The python-pptx slide
        """
        if not self.slide_dimensions_set:
            self.set_slide_size(slide_model.width * 72.0, slide_model.height * 72.0)

        layouts = self.prs.slide_layouts
        blank_layout = layouts[min(BLANK_LAYOUT_INDEX, len(layouts) - 1)]
        slide = self.prs.slides.add_slide(blank_layout)

        logger.debug(f"Creating slide {slide_model.slide_number + 1} with {len(slide_model.elements)} elements")

        if slide_model.background_color:
            self._set_slide_background_color(slide, slide_model.background_color)

        # Elements are already in z-index order
        for element in slide_model.elements:
            try:
                self.element_renderer.render_element(slide, element)
            except Exception as e:
                logger.warning(f"Failed to render {element.type} element on slide "
                               f"{slide_model.slide_number + 1}: {e}")

        return slide

    def save(self, output_path: str) -> bool:
        """
        Write the presentation, creating parent directories as needed.

        Args:
            output_path: Path to save the PPTX file

        Returns:
            True if the file was written
        """
        try:
            output_file = Path(output_path)
            output_file.parent.mkdir(parents=True, exist_ok=True)

            self.prs.save(str(output_file))
            logger.info(f"Presentation saved to: {output_path}")
            return True

        except Exception as e:
            logger.error(f"Failed to save presentation: {e}")
            return False

    def to_bytes(self) -> bytes:
        """Serialize the presentation in memory."""
        buffer = io.BytesIO()
        self.prs.save(buffer)
        return buffer.getvalue()

    def _set_slide_background_color(self, slide, hex_color: str):
        """
        Fill the slide background with one colour.

        Args:
            slide: PowerPoint slide object
            hex_color: RRGGBB
        """
        rgb = self.style_mapper.hex_to_rgb(hex_color)
        if rgb is None:
            return
        fill = slide.background.fill
        fill.solid()
        fill.fore_color.rgb = RGBColor(*rgb)

    def get_slide_count(self) -> int:
        """Slides added so far."""
        return len(self.prs.slides)
