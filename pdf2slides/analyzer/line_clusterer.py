"""
Line Clusterer - Groups glyph runs that share an approximate baseline
"""

import logging
from typing import Any, Dict, List

from ..parser.models import GlyphRun, TextLine

logger = logging.getLogger(__name__)


class LineClusterer:
    """
    Clusters glyph runs into text lines, top of page first.

    The baseline tolerance follows the largest font seen so far in the line,
    so a small run sitting on the same baseline as a large one stays attached.
    """

    def __init__(self, config: Dict[str, Any] = None):
        """
        Initialize Line Clusterer.

        Args:
            config: Analyzer configuration dictionary
        """
        config = config or {}
        self.tolerance_ratio = config.get('line_tolerance_ratio', 0.55)

    def cluster(self, runs: List[GlyphRun]) -> List[TextLine]:
        """
        Cluster runs into lines.

        Args:
            runs: Glyph runs in any order

        Returns:
            Lines ordered top to bottom, runs ordered left to right
        """
        if not runs:
            return []

        ordered = sorted(runs, key=lambda r: (-r.y, r.x))

        lines = []
        current = None
        line_max_size = 0.0

        for run in ordered:
            tolerance = max(line_max_size, run.font_size) * self.tolerance_ratio

            if current is None or abs(run.y - current.baseline_y) > tolerance:
                current = TextLine(baseline_y=run.y)
                line_max_size = run.font_size
                lines.append(current)
            else:
                line_max_size = max(line_max_size, run.font_size)

            current.runs.append(run)

        for line in lines:
            line.runs.sort(key=lambda r: r.x)

        logger.debug(f"Clustered {len(runs)} runs into {len(lines)} lines")
        return lines
