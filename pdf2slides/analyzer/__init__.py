"""
Layout Analyzer Module
Groups glyph runs into lines and merges same-style fragments.
"""

from .line_clusterer import LineClusterer
from .run_merger import RunMerger

__all__ = ['LineClusterer', 'RunMerger']
