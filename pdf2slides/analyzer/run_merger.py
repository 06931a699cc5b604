"""
Run Merger - Collapses adjacent same-style runs within a line
"""

import logging
from typing import Any, Dict, List

from ..parser.models import GlyphRun, TextLine

logger = logging.getLogger(__name__)


class RunMerger:
    """
    Joins kerned fragments and single characters back into words and phrases.
    """

    def __init__(self, config: Dict[str, Any] = None):
        """
        Initialize Run Merger.

        Args:
            config: Analyzer configuration dictionary
        """
        config = config or {}
        self.merge_gap_ratio = config.get('merge_gap_ratio', 0.8)
        self.space_gap_ratio = config.get('space_gap_ratio', 0.2)
        self.size_tolerance = config.get('size_tolerance', 0.5)

    def merge(self, runs: List[GlyphRun]) -> List[GlyphRun]:
        """
        Merge a left-to-right ordered list of runs.

        A run joins its predecessor when the styles match and the horizontal gap
        is under ``merge_gap_ratio`` of the predecessor's font size. A space is
        inserted when the gap is wider than ``space_gap_ratio`` of the font size.
        Input runs are left untouched.

        Args:
            runs: Runs of one line, ordered by x

        Returns:
            Merged runs
        """
        if not runs:
            return []

        merged = [runs[0].copy()]

        for run in runs[1:]:
            prev = merged[-1]
            gap = run.x - prev.right

            if prev.same_style(run, self.size_tolerance) and gap < prev.font_size * self.merge_gap_ratio:
                separator = ' ' if gap > prev.font_size * self.space_gap_ratio else ''
                prev.text += separator + run.text
                prev.width = run.right - prev.x
            else:
                merged.append(run.copy())

        return merged

    def merge_line(self, line: TextLine) -> TextLine:
        """Return a new line whose runs are merged."""
        merged = TextLine(baseline_y=line.baseline_y, runs=self.merge(line.runs))
        merged.x, merged.y, merged.height = line.x, line.y, line.height
        return merged

    def merge_lines(self, lines: List[TextLine]) -> List[TextLine]:
        """Merge the runs of every line."""
        result = [self.merge_line(line) for line in lines]
        before = sum(len(line.runs) for line in lines)
        after = sum(len(line.runs) for line in result)
        logger.debug(f"Merged {before} runs into {after} across {len(lines)} lines")
        return result
