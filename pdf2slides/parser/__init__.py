"""
PDF Parser Module
Extracts styled text runs and image regions from PDF pages.
"""

from .pdf_parser import PDFParser, SourcePage
from .page_extractor import PageExtractor
from .graphics_state import GraphicsStateWalker
from .text_extractor import TextRunExtractor
from .image_locator import ImageRegionLocator
from .operators import OPS, OperatorList

__all__ = ['PDFParser', 'SourcePage', 'PageExtractor', 'GraphicsStateWalker',
           'TextRunExtractor', 'ImageRegionLocator', 'OPS', 'OperatorList']
