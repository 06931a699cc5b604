"""
Style Mapper - Maps extracted run styles to PowerPoint run attributes
"""

import logging
from typing import Any, Dict, Optional, Tuple

from pptx.dml.color import RGBColor
from pptx.util import Pt

from .font_mapper import FontMapper
from ..utils.xml_utils import set_run_font_xml

logger = logging.getLogger(__name__)


class StyleMapper:
    """
    Applies font family, size, weight, slant and colour to PowerPoint runs.
    """

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize Style Mapper.

        Args:
            config: Mapper configuration dictionary
        """
        self.config = config or {}
        self.font_mapper = FontMapper(self.config)
        self.default_color = self.config.get('default_color', '000000')

    def map_run_style(self, font_face: str, font_size: float, bold: bool, italic: bool,
                      color: str, min_font_size: int = 6) -> Dict[str, Any]:
        """
        Build the style dictionary of one text run.

        Args:
            font_face: Extracted font family
            font_size: Font size in points
            bold: Bold flag
            italic: Italic flag
            color: Hex colour RRGGBB
            min_font_size: Smallest font size emitted

        Returns:
            Style dictionary with font_name, font_size, bold, italic, color
        """
        return {
            'font_name': self.font_mapper.map_font(font_face),
            'font_size': max(int(font_size + 0.5), min_font_size),
            'bold': bool(bold),
            'italic': bool(italic),
            'color': color or self.default_color
        }

    def apply_run_style(self, run, style: Dict[str, Any]):
        """
        Apply a run style dictionary to a PowerPoint run.

        Args:
            run: PowerPoint run object
            style: Style dictionary from map_run_style
        """
        font_name = style.get('font_name', self.font_mapper.default_font)

        run.font.size = Pt(style.get('font_size', 12))
        run.font.bold = style.get('bold', False)
        run.font.italic = style.get('italic', False)

        rgb = self.hex_to_rgb(style.get('color', self.default_color))
        if rgb is not None:
            run.font.color.rgb = RGBColor(*rgb)

        set_run_font_xml(run, font_name, self.font_mapper.is_cjk_font(font_name))

    def hex_to_rgb(self, hex_color: str) -> Optional[Tuple[int, int, int]]:
        """
        Convert hex color to RGB tuple.

        Args:
            hex_color: Hex color string (e.g., 'FF0000' or '#FF0000'), or None

        Returns:
            RGB tuple (r, g, b), or None if conversion fails
        """
        if not hex_color or not isinstance(hex_color, str):
            return None

        hex_color = hex_color.lstrip('#')

        try:
            if len(hex_color) == 6:
                return (int(hex_color[0:2], 16), int(hex_color[2:4], 16), int(hex_color[4:6], 16))
            elif len(hex_color) == 3:
                return (int(hex_color[0] * 2, 16), int(hex_color[1] * 2, 16), int(hex_color[2] * 2, 16))
        except ValueError:
            pass

        logger.warning(f"Invalid hex color: {hex_color}")
        return None
