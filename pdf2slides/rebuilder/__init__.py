"""
Element Rebuilder Module
Converts page extractions to slide models with coordinate mapping.
"""

from .slide_model import SlideModel, SlideElement
from .coordinate_mapper import CoordinateMapper, OutputMode

__all__ = ['SlideModel', 'SlideElement', 'CoordinateMapper', 'OutputMode']
