"""
Image Region Locator - Crops painted image placements out of a page raster
"""

import logging
import math
from typing import Any, Callable, Dict, List, Optional, Tuple

from .models import ImageRect, ImageRegion, PageRaster, encode_pixels

logger = logging.getLogger(__name__)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class ImageRegionLocator:
    """
    Converts walker image rectangles to top-origin regions and crops their pixels.

    Overlapping paints at nearly the same spot (stacked masks, soft masks,
    duplicated XObjects) are emitted once.
    """

    def __init__(self, config: Dict[str, Any] = None):
        """
        Initialize Image Region Locator.

        Args:
            config: Parser configuration dictionary
        """
        config = config or {}
        self.dedup_grid = config.get('dedup_grid', 4)
        self.min_crop_pixels = config.get('min_crop_pixels', 8)
        self.image_format = config.get('image_format', 'PNG')

    def to_top_origin(self, rects: List[ImageRect], page_height: float) -> List[Tuple[float, float, float, float]]:
        """
        Convert bottom-origin rectangles to top-origin (x, y, width, height).

        Args:
            rects: Rectangles from the graphics state walker
            page_height: Page height in points

        Returns:
            List of (x, y_top, width, height)
        """
        return [(rect.x, page_height - (rect.y + rect.height), rect.width, rect.height)
                for rect in rects]

    def deduplicate(self, boxes: List[Tuple[float, float, float, float]]) -> List[Tuple[float, float, float, float]]:
        """
        Drop boxes whose grid-rounded key was already seen.

        Args:
            boxes: Top-origin (x, y, width, height) boxes

        Returns:
            Boxes in original order, first occurrence of each key kept
        """
        seen = set()
        unique = []
        for box in boxes:
            key = tuple(_round_half_up(v / self.dedup_grid) for v in box)
            if key in seen:
                logger.debug(f"Duplicate image placement at {box} skipped")
                continue
            seen.add(key)
            unique.append(box)
        return unique

    def locate(self, rects: List[ImageRect], page_height: float,
               raster: Optional[PageRaster] = None,
               render: Optional[Callable[[], PageRaster]] = None) -> List[ImageRegion]:
        """
        Locate and crop image regions for one page.

        The raster is rendered through ``render`` only when at least one
        placement survives deduplication.

        Args:
            rects: Rectangles from the graphics state walker
            page_height: Page height in points
            raster: Already rendered page raster
            render: Callable producing the page raster on demand

        Returns:
            List of ImageRegion
        """
        boxes = self.deduplicate(self.to_top_origin(rects, page_height))
        if not boxes:
            return []

        if raster is None:
            if render is None:
                logger.warning(f"{len(boxes)} image placement(s) found but no page raster available")
                return []
            try:
                raster = render()
            except Exception as e:
                logger.warning(f"Page render for image crops failed, {len(boxes)} image(s) dropped: {e}")
                return []

        regions = []
        for box in boxes:
            region = self._crop(box, raster)
            if region is not None:
                regions.append(region)

        logger.debug(f"Located {len(regions)} image region(s) from {len(rects)} placement(s)")
        return regions

    def _crop(self, box: Tuple[float, float, float, float], raster: PageRaster) -> Optional[ImageRegion]:
        x, y, width, height = box
        scale = raster.scale

        cx = _round_half_up(x * scale)
        cy = _round_half_up(y * scale)
        cw = _round_half_up(width * scale)
        ch = _round_half_up(height * scale)

        # Clamp to the raster
        x0 = max(cx, 0)
        y0 = max(cy, 0)
        x1 = min(cx + cw, raster.width)
        y1 = min(cy + ch, raster.height)

        crop_w = x1 - x0
        crop_h = y1 - y0
        if crop_w < self.min_crop_pixels or crop_h < self.min_crop_pixels:
            logger.debug(f"Image crop {crop_w}x{crop_h}px too small; skipped")
            return None

        pixels = raster.crop(x0, y0, x1, y1)
        image_data = encode_pixels(pixels, self.image_format)

        return ImageRegion(
            x=x, y=y, width=width, height=height,
            image_data=image_data,
            width_px=crop_w, height_px=crop_h,
            image_format=self.image_format
        )
