"""
Element Renderer - Renders individual slide elements to PowerPoint
"""

import io
import logging
import re
from typing import Any

from pptx.dml.color import RGBColor
from pptx.enum.text import MSO_ANCHOR, MSO_AUTO_SIZE
from pptx.util import Inches

from ..mapper.style_mapper import StyleMapper
from ..rebuilder.slide_model import SlideElement

logger = logging.getLogger(__name__)

# C0/C1 controls and non-characters are rejected by the XML writer
XML_UNSAFE_CHARS = re.compile(r'[\x00-\x08\x0B\x0C\x0E-\x1F\x7F-\x9F\uFDD0-\uFDEF\uFFFE\uFFFF]')


def clean_text(text: str) -> str:
    """Remove characters that cannot be stored in slide XML."""
    return XML_UNSAFE_CHARS.sub('', text or '')


class ElementRenderer:
    """
    Renders slide elements to PowerPoint shapes.
    """

    def __init__(self, style_mapper: StyleMapper):
        """
        Initialize Element Renderer.

        Args:
            style_mapper: StyleMapper instance
        """
        self.style_mapper = style_mapper

    def render_text(self, slide, element: SlideElement) -> Any:
        """
        Render a text element as a single-line, multi-run text box.

        Args:
            slide: PowerPoint slide object
            element: SlideElement with text content

        Returns:
            Created shape object, or None if no text survived cleaning
        """
        position = element.position
        style = element.style

        runs = [(clean_text(run_info['text']), run_info['style'])
                for run_info in style.get('rich_text_runs', [])]
        runs = [(text, run_style) for text, run_style in runs if text]
        if not runs:
            logger.debug(f"Text element cleaned away: {element.content[:30]!r}")
            return None

        textbox = slide.shapes.add_textbox(
            Inches(position['x']), Inches(position['y']),
            Inches(position['width']), Inches(position['height'])
        )

        text_frame = textbox.text_frame
        text_frame.word_wrap = False
        text_frame.auto_size = MSO_AUTO_SIZE.NONE
        text_frame.vertical_anchor = MSO_ANCHOR.TOP
        text_frame.margin_left = 0
        text_frame.margin_right = 0
        text_frame.margin_top = 0
        text_frame.margin_bottom = 0

        paragraph = text_frame.paragraphs[0]
        for text, run_style in runs:
            run = paragraph.add_run()
            run.text = text
            self.style_mapper.apply_run_style(run, run_style)

        fill_color = style.get('fill_color')
        rgb = self.style_mapper.hex_to_rgb(fill_color) if fill_color else None
        if rgb is not None:
            textbox.fill.solid()
            textbox.fill.fore_color.rgb = RGBColor(*rgb)
        else:
            textbox.fill.background()
        textbox.line.fill.background()

        return textbox

    def render_image(self, slide, element: SlideElement) -> Any:
        """
        Render an image element (or full-bleed background) to the slide.

        Args:
            slide: PowerPoint slide object
            element: SlideElement with image content

        Returns:
            Created picture object
        """
        position = element.position
        image_stream = io.BytesIO(element.content)

        return slide.shapes.add_picture(
            image_stream,
            Inches(position['x']), Inches(position['y']),
            Inches(position['width']), Inches(position['height'])
        )

    def render_element(self, slide, element: SlideElement) -> Any:
        """
        Render any element type to the slide.

        Args:
            slide: PowerPoint slide object
            element: SlideElement to render

        Returns:
            Created shape/object
        """
        if element.type == 'text':
            return self.render_text(slide, element)
        elif element.is_picture:
            return self.render_image(slide, element)
        else:
            logger.warning(f"Unknown element type: {element.type}")
            return None
