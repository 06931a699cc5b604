"""
Operator List - Decoded page drawing instructions in content-stream order
"""

from typing import Any, Iterator, List, Tuple


class OPS:
    """Operation codes understood by the graphics state walker."""

    SAVE = 'save'
    RESTORE = 'restore'
    TRANSFORM = 'transform'

    SET_FILL_GRAY = 'setFillGray'
    SET_FILL_RGB_COLOR = 'setFillRGBColor'
    SET_FILL_COLOR = 'setFillColor'
    SET_FILL_COLOR_N = 'setFillColorN'

    SHOW_TEXT = 'showText'
    SHOW_SPACED_TEXT = 'showSpacedText'
    NEXT_LINE_SHOW_TEXT = 'nextLineShowText'
    NEXT_LINE_SET_SPACING_SHOW_TEXT = 'nextLineSetSpacingShowText'

    PAINT_IMAGE_XOBJECT = 'paintImageXObject'
    PAINT_INLINE_IMAGE_XOBJECT = 'paintInlineImageXObject'
    PAINT_IMAGE_MASK_XOBJECT = 'paintImageMaskXObject'

    PAINT_FORM_XOBJECT_BEGIN = 'paintFormXObjectBegin'
    PAINT_FORM_XOBJECT_END = 'paintFormXObjectEnd'

    FILL_COLOR_OPS = (SET_FILL_GRAY, SET_FILL_RGB_COLOR, SET_FILL_COLOR, SET_FILL_COLOR_N)
    SINGLE_TEXT_OPS = (SHOW_TEXT, NEXT_LINE_SHOW_TEXT, NEXT_LINE_SET_SPACING_SHOW_TEXT)
    IMAGE_OPS = (PAINT_IMAGE_XOBJECT, PAINT_INLINE_IMAGE_XOBJECT, PAINT_IMAGE_MASK_XOBJECT)


class OperatorList:
    """
    Parallel arrays of operation codes and argument lists.
    """

    def __init__(self):
        self.fn_array: List[str] = []
        self.args_array: List[List[Any]] = []

    def add(self, fn: str, args: List[Any] = None):
        """Append one operation."""
        self.fn_array.append(fn)
        self.args_array.append(list(args) if args else [])

    @classmethod
    def from_pairs(cls, pairs) -> 'OperatorList':
        """Build an operator list from (fn, args) pairs."""
        op_list = cls()
        for fn, args in pairs:
            op_list.add(fn, args)
        return op_list

    def __iter__(self) -> Iterator[Tuple[str, List[Any]]]:
        return iter(zip(self.fn_array, self.args_array))

    def __len__(self) -> int:
        return len(self.fn_array)

    def __repr__(self) -> str:
        return f"OperatorList(ops={len(self.fn_array)})"
