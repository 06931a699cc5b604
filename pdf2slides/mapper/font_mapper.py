"""
Font Mapper - Maps PDF font families to PowerPoint fonts
"""

import logging
import re
from typing import Dict

from ..utils.xml_utils import is_cjk_font

logger = logging.getLogger(__name__)

STYLE_SUFFIX = re.compile(r',\s*(Bold|Italic|BoldItalic|Regular).*', re.IGNORECASE)
VENDOR_SUFFIX = re.compile(r'(MT|PS|PC|Std|Pro|LT|Regular)$', re.IGNORECASE)
UNSAFE_CHARS = re.compile(r'[^a-zA-Z0-9 \-]')


class FontMapper:
    """
    Sanitizes PDF font family names and maps them to PowerPoint-compatible fonts.
    """

    # Default font mapping
    DEFAULT_FONT_MAP = {
        # Chinese fonts
        'SimHei': '黑体',
        'SimSun': '宋体',
        'NSimSun': '新宋体',
        'FangSong': '仿宋',
        'KaiTi': '楷体',
        'MicrosoftYaHei': '微软雅黑',
        'MicrosoftYaHeiUI': '微软雅黑',
        'Microsoft YaHei': '微软雅黑',

        # Western fonts
        'Helvetica': 'Arial',
        'HelveticaNeue': 'Arial',
        'Times': 'Times New Roman',
        'TimesNewRoman': 'Times New Roman',
        'Courier': 'Courier New',
        'CourierNew': 'Courier New',
        'Arial': 'Arial',
        'ArialNarrow': 'Arial Narrow',
        'Verdana': 'Verdana',
        'Tahoma': 'Tahoma',
        'Georgia': 'Georgia',
        'Calibri': 'Calibri',
        'Cambria': 'Cambria'
    }

    def __init__(self, config: Dict = None):
        """
        Initialize Font Mapper.

        Args:
            config: Mapper configuration dictionary with font mapping
        """
        self.config = config or {}
        # Configured entries win over the defaults
        self.font_map = {**self.DEFAULT_FONT_MAP, **self.config.get('font_mapping', {})}
        self.default_font = self.config.get('default_font', 'Arial')

    def clean_font(self, font_name: str) -> str:
        """
        Strip style and vendor suffixes and unsafe characters from a family name.

        Args:
            font_name: Family name as extracted

        Returns:
            Sanitized family, or the default font if nothing usable remains
        """
        if not font_name or len(font_name) < 2:
            return self.default_font
        name = STYLE_SUFFIX.sub('', font_name)
        name = VENDOR_SUFFIX.sub('', name)
        name = UNSAFE_CHARS.sub('', name).strip()
        return name or self.default_font

    def map_font(self, pdf_font_name: str) -> str:
        """
        Map a PDF font family to a PowerPoint font.

        Args:
            pdf_font_name: Font family from the PDF

        Returns:
            Mapped PowerPoint font name; unknown families pass through sanitized
        """
        cleaned = self.clean_font(pdf_font_name)

        if cleaned in self.font_map:
            mapped = self.font_map[cleaned]
            logger.debug(f"Font mapping: '{pdf_font_name}' → '{mapped}'")
            return mapped

        # Case-insensitive match without spaces ("Times New Roman" vs "TimesNewRoman")
        compact = cleaned.replace(' ', '').lower()
        for pdf_name, ppt_name in self.font_map.items():
            if pdf_name.replace(' ', '').lower() == compact:
                logger.debug(f"Font mapping: '{pdf_font_name}' → '{ppt_name}' (loose match)")
                return ppt_name

        return cleaned

    def is_cjk_font(self, font_name: str) -> bool:
        """
        Check if font is a CJK (Chinese/Japanese/Korean) font.

        Args:
            font_name: Font name to check

        Returns:
            True if CJK font
        """
        return is_cjk_font(font_name)
