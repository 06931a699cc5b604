"""
Page Models - Intermediate records produced while extracting one PDF page
"""

import io
import logging
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)


class TextItem:
    """One text-content item as emitted by the parsing collaborator."""

    def __init__(self, text: str, transform: Sequence[float], width: float = 0.0,
                 font_name: str = ''):
        """
        Initialize a text item.

        Args:
            text: Decoded string
            transform: Text rendering matrix [a, b, c, d, e, f] in page space
            width: Advance width in page units
            font_name: Font resource name the item was shown with
        """
        self.text = text
        self.transform = tuple(transform)
        self.width = width
        self.font_name = font_name

    def __repr__(self) -> str:
        return f"TextItem({self.text!r}, font={self.font_name!r})"


class FontInfo:
    """Font resource as exposed by the parsing collaborator."""

    def __init__(self, name: str, italic: Optional[bool] = None):
        self.name = name
        self.italic = italic

    def __repr__(self) -> str:
        return f"FontInfo({self.name!r})"


class GlyphRun:
    """
    A positioned, styled run of text.

    Coordinates are PDF points; ``y`` is the baseline measured from the page bottom.
    Merged runs (styled runs) use the same class.
    """

    def __init__(self, text: str, font_size: float, x: float, y: float, width: float,
                 color: str = '000000', bold: bool = False, italic: bool = False,
                 font_face: str = 'Arial'):
        self.text = text
        self.font_size = font_size
        self.x = x
        self.y = y
        self.width = width
        self.color = color
        self.bold = bold
        self.italic = italic
        self.font_face = font_face

    @property
    def right(self) -> float:
        """Right edge in points."""
        return self.x + self.width

    def same_style(self, other: 'GlyphRun', size_tolerance: float = 0.5) -> bool:
        """Check whether two runs share bold, italic, face, colour and size."""
        return (self.bold == other.bold and
                self.italic == other.italic and
                self.font_face == other.font_face and
                self.color == other.color and
                abs(self.font_size - other.font_size) < size_tolerance)

    def copy(self) -> 'GlyphRun':
        return GlyphRun(self.text, self.font_size, self.x, self.y, self.width,
                        self.color, self.bold, self.italic, self.font_face)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'text': self.text,
            'font_size': self.font_size,
            'x': self.x,
            'y': self.y,
            'width': self.width,
            'color': self.color,
            'bold': self.bold,
            'italic': self.italic,
            'font_face': self.font_face
        }

    def __eq__(self, other) -> bool:
        if not isinstance(other, GlyphRun):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"GlyphRun({self.text!r}, size={self.font_size:.1f}, x={self.x:.1f}, y={self.y:.1f})"


StyledRun = GlyphRun


class TextLine:
    """
    Runs sharing an approximate baseline, ordered left to right.

    ``x``, ``y`` (top-origin) and ``height`` are filled in once the line is
    placed on its page.
    """

    def __init__(self, baseline_y: float, runs: List[GlyphRun] = None):
        self.baseline_y = baseline_y
        self.runs: List[GlyphRun] = runs if runs is not None else []
        self.x = 0.0
        self.y = 0.0
        self.height = 0.0

    @property
    def max_font_size(self) -> float:
        return max((run.font_size for run in self.runs), default=0.0)

    @property
    def right(self) -> float:
        return max((run.right for run in self.runs), default=self.x)

    @property
    def text(self) -> str:
        return ''.join(run.text for run in self.runs)

    def __repr__(self) -> str:
        return f"TextLine(baseline={self.baseline_y:.1f}, runs={len(self.runs)}, text={self.text[:30]!r})"


class ImageRect:
    """Image placement rectangle in bottom-origin page space."""

    def __init__(self, x: float, y: float, width: float, height: float):
        self.x = x
        self.y = y
        self.width = width
        self.height = height

    def __repr__(self) -> str:
        return f"ImageRect(x={self.x:.1f}, y={self.y:.1f}, w={self.width:.1f}, h={self.height:.1f})"


class ImageRegion:
    """Cropped image region in top-origin page space."""

    def __init__(self, x: float, y: float, width: float, height: float,
                 image_data: bytes, width_px: int = 0, height_px: int = 0,
                 image_format: str = 'PNG'):
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        self.image_data = image_data
        self.width_px = width_px
        self.height_px = height_px
        self.image_format = image_format

    def __repr__(self) -> str:
        return (f"ImageRegion(x={self.x:.1f}, y={self.y:.1f}, w={self.width:.1f}, "
                f"h={self.height:.1f}, {self.width_px}x{self.height_px}px)")


class PageExtraction:
    """Everything extracted from one page, ready for the slide builder."""

    def __init__(self, page_num: int, page_width: float, page_height: float,
                 lines: List[TextLine] = None, images: List[ImageRegion] = None):
        self.page_num = page_num
        self.page_width = page_width
        self.page_height = page_height
        self.lines: List[TextLine] = lines if lines is not None else []
        self.images: List[ImageRegion] = images if images is not None else []

    @property
    def is_landscape(self) -> bool:
        return self.page_width > self.page_height

    def __repr__(self) -> str:
        return (f"PageExtraction(page={self.page_num}, lines={len(self.lines)}, "
                f"images={len(self.images)})")


class PageRaster:
    """
    Bitmap of a full page rendered at a fixed scale.

    Pixels are a (height, width, channels) uint8 array.
    """

    def __init__(self, pixels: np.ndarray, scale: float):
        self.pixels = pixels
        self.scale = scale

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    def crop(self, x0: int, y0: int, x1: int, y1: int) -> np.ndarray:
        """Return the pixel block [y0:y1, x0:x1]."""
        return self.pixels[y0:y1, x0:x1]

    def encode(self, image_format: str = 'PNG', quality: int = 95) -> bytes:
        """Encode the whole raster."""
        return encode_pixels(self.pixels, image_format, quality)


def encode_pixels(pixels: np.ndarray, image_format: str = 'PNG', quality: int = 95) -> bytes:
    """
    Encode a pixel array with Pillow.

    Args:
        pixels: (height, width, channels) uint8 array
        image_format: 'PNG' or 'JPEG'
        quality: JPEG quality

    Returns:
        Encoded image bytes
    """
    pil_image = Image.fromarray(np.ascontiguousarray(pixels))
    image_format = image_format.upper()
    if image_format in ('JPEG', 'JPG') and pil_image.mode not in ('RGB', 'L'):
        pil_image = pil_image.convert('RGB')

    img_bytes = io.BytesIO()
    if image_format in ('JPEG', 'JPG'):
        pil_image.save(img_bytes, format='JPEG', quality=quality)
    else:
        pil_image.save(img_bytes, format=image_format)
    return img_bytes.getvalue()
