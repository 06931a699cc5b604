"""
Graphics State Walker - Replays a page operator list to recover the fill colour
of every shown string and the page-space placement of every painted image.
"""

import logging
import math
import re
from collections import namedtuple
from functools import reduce
from typing import Any, Dict, List, Optional, Sequence

from pdfminer.utils import MATRIX_IDENTITY, mult_matrix

from .models import ImageRect
from .operators import OPS
from ..utils.geometry import to_matrix, unit_square_bbox

logger = logging.getLogger(__name__)

DEFAULT_FILL_COLOR = '000000'

GraphicsState = namedtuple('GraphicsState', ['ctm', 'fill_color'])

# stack, colors and image_rects are tuples; each step returns a new WalkState
WalkState = namedtuple('WalkState', ['state', 'stack', 'colors', 'image_rects'])

WalkResult = namedtuple('WalkResult', ['colors', 'image_rects'])

_HEX_COLOR = re.compile(r'^#?([0-9A-Fa-f]{6})$')

# Float noise from colour space conversion, e.g. 1.0000001
COMPONENT_TOLERANCE = 1e-3


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def byte_hex(value: float) -> str:
    """Two-digit upper-case hex of a 0-255 channel value, rounded half up and clamped."""
    return f"{max(0, min(255, int(math.floor(value + 0.5)))):02X}"


def rgb_to_hex(r: float, g: float, b: float) -> str:
    """Convert 0-1 RGB components to an RRGGBB string."""
    return byte_hex(r * 255) + byte_hex(g * 255) + byte_hex(b * 255)


def gray_to_hex(gray: float) -> str:
    """Convert a 0-1 gray level to an RRGGBB string."""
    channel = byte_hex(gray * 255)
    return channel * 3


def color_from_components(components: Sequence[Any]) -> Optional[str]:
    """
    Interpret fill colour operands.

    One component is gray, three are RGB. A pre-formatted hex string is accepted
    as-is. Components within COMPONENT_TOLERANCE of [0, 1] are clamped; anything
    else (patterns, CMYK, out-of-range values) is unrecognized.

    Args:
        components: Operator arguments

    Returns:
        RRGGBB string, or None if the colour space is not recognized
    """
    if not components:
        return None

    if len(components) == 1 and isinstance(components[0], str):
        match = _HEX_COLOR.match(components[0])
        return match.group(1).upper() if match else None

    if not all(_is_number(c) for c in components):
        return None
    if not all(-COMPONENT_TOLERANCE <= c <= 1 + COMPONENT_TOLERANCE for c in components):
        return None
    components = [max(0.0, min(1.0, c)) for c in components]

    if len(components) == 1:
        return gray_to_hex(components[0])
    if len(components) == 3:
        return rgb_to_hex(*components)
    return None


def _is_visible_segment(segment) -> bool:
    if isinstance(segment, str):
        return bool(segment.strip())
    if isinstance(segment, (bytes, bytearray)):
        return len(segment) > 0
    return False


class GraphicsStateWalker:
    """
    Walks an operator list as a left fold, tracking the CTM stack and fill colour.

    Produces one colour entry per visible shown string (aligned with the text
    content items the collaborator emits) and the page-space bounding box of
    every image paint large enough to be a real picture.
    """

    def __init__(self, config: Dict[str, Any] = None, ops=OPS):
        """
        Initialize Graphics State Walker.

        Args:
            config: Parser configuration dictionary
            ops: Operation code table
        """
        config = config or {}
        self.min_image_size = config.get('min_image_size', 20)
        self.ops = ops

        self._handlers = {
            ops.SAVE: self._save,
            ops.RESTORE: self._restore,
            ops.TRANSFORM: self._transform,
            ops.PAINT_FORM_XOBJECT_BEGIN: self._begin_form,
            ops.PAINT_FORM_XOBJECT_END: self._restore,
            ops.SET_FILL_GRAY: self._set_fill_color,
            ops.SET_FILL_RGB_COLOR: self._set_fill_color,
            ops.SET_FILL_COLOR: self._set_fill_color,
            ops.SET_FILL_COLOR_N: self._set_fill_color,
            ops.SHOW_SPACED_TEXT: self._show_spaced_text,
        }
        for fn in ops.SINGLE_TEXT_OPS:
            self._handlers[fn] = self._show_text
        for fn in ops.IMAGE_OPS:
            self._handlers[fn] = self._paint_image

    def walk(self, operator_list) -> WalkResult:
        """
        Replay an operator list.

        Args:
            operator_list: OperatorList or any iterable of (fn, args) pairs

        Returns:
            WalkResult with the colour sequence and image rectangles
        """
        initial = WalkState(
            state=GraphicsState(ctm=MATRIX_IDENTITY, fill_color=DEFAULT_FILL_COLOR),
            stack=(),
            colors=(),
            image_rects=()
        )
        final = reduce(self._step, operator_list, initial)

        if final.stack:
            logger.debug(f"Operator list ended with {len(final.stack)} unbalanced save(s)")
        logger.debug(f"Walked operator list: {len(final.colors)} text colours, "
                     f"{len(final.image_rects)} image placements")

        return WalkResult(colors=list(final.colors), image_rects=list(final.image_rects))

    def _step(self, walk: WalkState, op) -> WalkState:
        fn, args = op
        handler = self._handlers.get(fn)
        if handler is None:
            return walk
        return handler(walk, args or [])

    def _save(self, walk: WalkState, args: List[Any]) -> WalkState:
        return walk._replace(stack=walk.stack + (walk.state,))

    def _restore(self, walk: WalkState, args: List[Any]) -> WalkState:
        if not walk.stack:
            logger.debug("Restore with empty state stack ignored")
            return walk
        return walk._replace(state=walk.stack[-1], stack=walk.stack[:-1])

    def _concat(self, walk: WalkState, values) -> WalkState:
        given = to_matrix(values)
        current = walk.state.ctm
        if given is None:
            logger.debug(f"Malformed transform {values!r}; placement unknown until restore")
            new_ctm = None
        elif current is None:
            new_ctm = None
        else:
            new_ctm = mult_matrix(given, current)
        return walk._replace(state=walk.state._replace(ctm=new_ctm))

    def _transform(self, walk: WalkState, args: List[Any]) -> WalkState:
        return self._concat(walk, args)

    def _begin_form(self, walk: WalkState, args: List[Any]) -> WalkState:
        matrix = args[0] if args and args[0] is not None else MATRIX_IDENTITY
        return self._concat(self._save(walk, args), matrix)

    def _set_fill_color(self, walk: WalkState, args: List[Any]) -> WalkState:
        color = color_from_components(args)
        if color is None:
            return walk
        return walk._replace(state=walk.state._replace(fill_color=color))

    def _show_text(self, walk: WalkState, args: List[Any]) -> WalkState:
        text = args[0] if args else None
        if isinstance(text, str) and not text.strip():
            return walk
        return walk._replace(colors=walk.colors + (walk.state.fill_color,))

    def _show_spaced_text(self, walk: WalkState, args: List[Any]) -> WalkState:
        segments = args[0] if args and isinstance(args[0], (list, tuple)) else []
        count = sum(1 for segment in segments if _is_visible_segment(segment))
        return walk._replace(colors=walk.colors + (walk.state.fill_color,) * count)

    def _paint_image(self, walk: WalkState, args: List[Any]) -> WalkState:
        ctm = walk.state.ctm
        if ctm is None:
            logger.debug("Image painted under an unknown transform; skipped")
            return walk

        x0, y0, x1, y1 = unit_square_bbox(ctm)
        width = x1 - x0
        height = y1 - y0
        if not (math.isfinite(width) and math.isfinite(height)):
            return walk

        # Small placements are icons, rules or bullets drawn as images
        if width < self.min_image_size or height < self.min_image_size:
            logger.debug(f"Skipping small image placement {width:.1f}x{height:.1f}")
            return walk

        return walk._replace(image_rects=walk.image_rects + (ImageRect(x0, y0, width, height),))
