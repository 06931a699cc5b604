"""
Text Run Extractor - Turns text-content items into positioned, styled glyph runs
"""

import logging
import math
import re
from collections import namedtuple
from typing import Any, Callable, Dict, List, Optional, Sequence

from .graphics_state import DEFAULT_FILL_COLOR
from .models import GlyphRun, TextItem

logger = logging.getLogger(__name__)

FontStyle = namedtuple('FontStyle', ['bold', 'italic', 'font_face'])

BOLD_PATTERN = re.compile(r'bold|heavy|black|extrabold|semibold|demi')
ITALIC_PATTERN = re.compile(r'italic|oblique|slanted')

# Resource names carry less information than real font names
NAME_BOLD_PATTERN = re.compile(r'bold|heavy|black')
NAME_ITALIC_PATTERN = re.compile(r'italic|oblique')

SUBSET_PREFIX = re.compile(r'^[A-Z]{6}\+')
FAMILY_SEPARATORS = re.compile(r'[-,_]')
FAMILY_SUFFIX = re.compile(r'(MT|PS|PC|Std|Pro|LT)$')


def parse_font_size(transform: Sequence[float]) -> float:
    """
    Font size from a text rendering matrix.

    Uses the length of the vertical basis vector (c, d), which stays correct
    for rotated text where d alone would be near zero.

    Args:
        transform: Matrix [a, b, c, d, e, f]

    Returns:
        Font size, at least 1
    """
    c = transform[2]
    d = transform[3]
    return max(math.sqrt(c * c + d * d), 1.0)


def clean_font_family(font_name: str) -> str:
    """
    Derive a family name from a PDF font name.

    "ABCDEF+Arial-BoldMT" becomes "Arial"; "TimesNewRomanPSMT" becomes "TimesNewRomanPS".

    Args:
        font_name: Internal PDF font name

    Returns:
        Family name, or an empty string if nothing usable remains
    """
    if not font_name:
        return ''
    name = SUBSET_PREFIX.sub('', font_name)
    name = FAMILY_SEPARATORS.split(name)[0]
    name = FAMILY_SUFFIX.sub('', name).strip()
    return name if len(name) > 1 else ''


class FontStyleResolver:
    """
    Resolves bold/italic/family for a font resource name.

    Style detection is keyword matching on font names. Results are cached per
    resource name, so one resolver should be used for one page.
    """

    def __init__(self, config: Dict[str, Any] = None):
        config = config or {}
        self.default_font = config.get('default_font', 'Arial')
        self._cache: Dict[str, FontStyle] = {}

    def resolve(self, font_name: str, font_lookup: Optional[Callable[[str], Any]] = None) -> FontStyle:
        """
        Resolve the style of a font resource.

        Args:
            font_name: Font resource name from the text item
            font_lookup: Callable returning the font object for a resource name

        Returns:
            FontStyle tuple
        """
        if font_name in self._cache:
            return self._cache[font_name]

        font = None
        if font_lookup is not None and font_name:
            try:
                font = font_lookup(font_name)
            except Exception as e:
                logger.debug(f"Font resource '{font_name}' not resolvable: {e}")
                font = None

        if font is not None:
            style = self._style_from_font(font, font_name)
        else:
            style = self._style_from_resource_name(font_name)

        self._cache[font_name] = style
        return style

    def _style_from_font(self, font, font_name: str) -> FontStyle:
        internal_name = getattr(font, 'name', None) or font_name or ''
        raw = internal_name.lower()

        bold = bool(BOLD_PATTERN.search(raw))
        italic = bool(ITALIC_PATTERN.search(raw)) or getattr(font, 'italic', None) is True
        font_face = clean_font_family(internal_name) or self.default_font

        logger.debug(f"Font '{font_name}' → '{internal_name}' (face={font_face}, bold={bold}, italic={italic})")
        return FontStyle(bold, italic, font_face)

    def _style_from_resource_name(self, font_name: str) -> FontStyle:
        raw = (font_name or '').lower()
        return FontStyle(bool(NAME_BOLD_PATTERN.search(raw)),
                         bool(NAME_ITALIC_PATTERN.search(raw)),
                         self.default_font)


class TextRunExtractor:
    """
    Merges text-content items with the colour sequence and font styles.
    """

    def __init__(self, config: Dict[str, Any] = None):
        """
        Initialize Text Run Extractor.

        Args:
            config: Parser configuration dictionary
        """
        self.config = config or {}
        self.char_width_ratio = self.config.get('char_width_ratio', 0.55)

    def extract(self, text_items: List[TextItem], colors: List[str],
                font_lookup: Optional[Callable[[str], Any]] = None) -> List[GlyphRun]:
        """
        Build glyph runs in document order.

        Visible items consume the next colour; whitespace-only items carry no
        ink and reuse the last assigned colour.

        Args:
            text_items: Text-content items in document order
            colors: Colour sequence from the graphics state walker
            font_lookup: Callable returning the font object for a resource name

        Returns:
            List of GlyphRun, one per non-empty item
        """
        resolver = FontStyleResolver(self.config)
        runs = []
        color_index = 0
        last_color = DEFAULT_FILL_COLOR

        for item in text_items:
            text = item.text
            if not text:
                continue

            if text.strip():
                if color_index < len(colors):
                    color = colors[color_index]
                else:
                    if color_index == len(colors):
                        logger.warning(f"Colour sequence exhausted after {len(colors)} entries; "
                                       f"defaulting to black")
                    color = DEFAULT_FILL_COLOR
                color_index += 1
                last_color = color
            else:
                color = last_color

            transform = item.transform
            if len(transform) < 6:
                logger.debug(f"Skipping text item with malformed transform: {item!r}")
                continue

            font_size = parse_font_size(transform)
            style = resolver.resolve(item.font_name, font_lookup)
            width = max(item.width or font_size * len(text) * self.char_width_ratio, 1.0)

            runs.append(GlyphRun(
                text=text,
                font_size=font_size,
                x=transform[4],
                y=transform[5],
                width=width,
                color=color,
                bold=style.bold,
                italic=style.italic,
                font_face=style.font_face
            ))

        if color_index < len(colors):
            logger.debug(f"{len(colors) - color_index} colour entries left unused")

        return runs
