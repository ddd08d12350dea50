"""Transparent border removal."""
from __future__ import annotations

from ..models import RgbaImage


def crop_transparent_borders(image: RgbaImage) -> RgbaImage:
    """Crop ``image`` to the bounding box of its non-transparent pixels.

    Icons may have visible pixels separated by transparent gaps, so each side
    is searched independently: rows from the top and from the bottom, then
    columns from the left and from the right limited to the rows found.
    Every scan stops at its first hit. An image without visible pixels
    yields a 1x1 transparent image.
    """
    width, height = image.width, image.height
    data = image.data
    stride = width * 4

    def row_visible(y: int) -> bool:
        return any(data[y * stride + 3 : (y + 1) * stride : 4])

    top = next((y for y in range(height) if row_visible(y)), None)
    if top is None:
        return RgbaImage.transparent()
    bottom = next(y for y in range(height - 1, top - 1, -1) if row_visible(y))

    def column_visible(x: int) -> bool:
        return any(data[y * stride + x * 4 + 3] for y in range(top, bottom + 1))

    left = next(x for x in range(width) if column_visible(x))
    right = next(x for x in range(width - 1, left - 1, -1) if column_visible(x))

    if (left, top, right, bottom) == (0, 0, width - 1, height - 1):
        return image
    return image.crop(left, top, right - left + 1, bottom - top + 1)
