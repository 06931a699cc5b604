"""
Slide Model - Page content laid out in slide inches, ready for rendering
"""

import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

# Element kinds
BACKGROUND = 'background'
IMAGE = 'image'
TEXT = 'text'

BACKGROUND_Z_INDEX = -1000


class SlideElement:
    """
    One object to place on a slide.

    ``position`` holds x, y, width and height in inches from the slide's
    top-left corner. ``content`` is the plain text of a text box or the
    encoded bytes of a picture.
    """

    def __init__(self, kind: str, position: Dict[str, float], content: Any,
                 style: Optional[Dict[str, Any]] = None, z_index: int = 0):
        self.type = kind
        self.position = position
        self.content = content
        self.style = style or {}
        self.z_index = z_index

    @property
    def is_picture(self) -> bool:
        return self.type in (BACKGROUND, IMAGE)

    def to_dict(self) -> Dict[str, Any]:
        # Picture bytes are summarized
        content = f"<{len(self.content)} bytes>" if self.is_picture else self.content
        return {
            'type': self.type,
            'position': dict(self.position),
            'content': content,
            'style': self.style,
            'z_index': self.z_index
        }

    def __repr__(self) -> str:
        pos = self.position
        return (f"SlideElement({self.type}, x={pos['x']:.2f}, y={pos['y']:.2f}, "
                f"w={pos['width']:.2f}, h={pos['height']:.2f})")


class SlideModel:
    """
    Everything one PDF page contributes to its slide.

    Elements are drawn in ascending z-index; ties keep insertion order.
    """

    def __init__(self, slide_number: int, width: float = 10.0, height: float = 7.5):
        """
        Args:
            slide_number: 0-indexed page number the slide comes from
            width: Slide width in inches
            height: Slide height in inches
        """
        self.slide_number = slide_number
        self.width = width
        self.height = height
        self.elements: List[SlideElement] = []
        self.background_color: Optional[str] = None

    def add_element(self, element: SlideElement) -> SlideElement:
        self.elements.append(element)
        return element

    def add_text(self, text: str, position: Dict[str, float],
                 style: Dict[str, Any], z_index: int = 0) -> SlideElement:
        """
        Add a single-line text box.

        Args:
            text: Concatenated text of the box's runs
            position: Box position in inches
            style: 'rich_text_runs' (text + run style each) and 'fill_color'
            z_index: Stacking order

        Returns:
            The new element
        """
        return self.add_element(SlideElement(TEXT, position, text, style, z_index))

    def add_image(self, image_data: bytes, position: Dict[str, float],
                  image_format: str = 'PNG', z_index: int = 0) -> SlideElement:
        """Add a picture cropped from the page."""
        return self.add_element(
            SlideElement(IMAGE, position, image_data, {'format': image_format}, z_index))

    def add_background_image(self, image_data: bytes, image_format: str = 'JPEG') -> SlideElement:
        """Add a picture covering the whole slide, beneath every other element."""
        position = {'x': 0.0, 'y': 0.0, 'width': self.width, 'height': self.height}
        return self.add_element(
            SlideElement(BACKGROUND, position, image_data, {'format': image_format},
                         BACKGROUND_Z_INDEX))

    def set_background(self, color: Optional[str]):
        """Fill the slide background with a solid RRGGBB colour."""
        if color:
            self.background_color = color

    def sort_elements(self):
        self.elements.sort(key=lambda e: e.z_index)

    def get_elements(self, kind: str) -> List[SlideElement]:
        return [e for e in self.elements if e.type == kind]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'slide_number': self.slide_number,
            'size': (self.width, self.height),
            'background_color': self.background_color,
            'elements': [element.to_dict() for element in self.elements]
        }

    def __repr__(self) -> str:
        return f"SlideModel(page={self.slide_number + 1}, {self.width:.2f}x{self.height:.2f}in, " \
               f"elements={len(self.elements)})"
