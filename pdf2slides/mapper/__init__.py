"""
Style Mapper Module
Maps PDF styles to PowerPoint attributes.
"""

from .style_mapper import StyleMapper
from .font_mapper import FontMapper

__all__ = ['StyleMapper', 'FontMapper']
