"""
XML Utilities for PowerPoint XML manipulation
"""

import logging
from lxml import etree

logger = logging.getLogger(__name__)

DRAWINGML_NS = 'http://schemas.openxmlformats.org/drawingml/2006/main'

CJK_PATTERNS = [
    'SimHei', 'SimSun', 'Microsoft YaHei', '微软雅黑', '宋体',
    '黑体', '楷体', '仿宋', 'KaiTi', 'FangSong',
    'NSimSun', '新宋体', 'MS Mincho', 'MS Gothic', 'Yu Mincho', 'Yu Gothic',
    'Batang', 'Dotum', 'Hiragino', 'Meiryo', 'Noto Sans CJK'
]


def set_run_font_xml(run, font_name: str, is_cjk: bool = False):
    """
    Set font typefaces at the rPr (run properties) level.

    The Latin and complex-script slots always get the font. The East Asian
    slot is only written for CJK fonts, so PowerPoint keeps its own fallback
    for CJK glyphs inside Western runs.

    Args:
        run: PowerPoint run object
        font_name: Font name to apply
        is_cjk: Whether this is a CJK (Chinese, Japanese, Korean) font
    """
    rPr = run._r.get_or_add_rPr()

    for tag in ('latin', 'ea', 'cs'):
        existing = rPr.find(f'{{{DRAWINGML_NS}}}{tag}')
        if existing is not None:
            rPr.remove(existing)

    # Schema order inside rPr: latin, ea, cs
    slots = ['latin', 'ea', 'cs'] if is_cjk else ['latin', 'cs']
    for tag in slots:
        elem = etree.SubElement(rPr, f'{{{DRAWINGML_NS}}}{tag}')
        elem.set('typeface', font_name)

    logger.debug(f"Run font set to '{font_name}' (CJK: {is_cjk})")


def is_cjk_font(font_name: str) -> bool:
    """
    Check if a font is a CJK (Chinese, Japanese, Korean) font.

    Args:
        font_name: Font name to check

    Returns:
        True if CJK font, False otherwise
    """
    if not font_name:
        return False

    font_lower = font_name.lower()
    return any(pattern.lower() in font_lower for pattern in CJK_PATTERNS)
