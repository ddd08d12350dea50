"""Normalization of raw platform bitmaps into stored icon images."""
from __future__ import annotations

from typing import Optional

from ..errors import FormatError
from ..models import RawIconImage, RgbaImage
from .crop import crop_transparent_borders
from .pixels import ChannelSwapper, bgra_to_rgba
from .utils import decode_png, find_png_blob, is_valid_png_file, save_png


def normalize_raw_image(
    raw: RawIconImage, swapper: Optional[ChannelSwapper] = None
) -> RgbaImage:
    """Convert a raw BGRA bitmap to RGBA and crop its transparent borders."""
    if raw.bit_count != 32:
        raise FormatError(f"Icon is not 32 bit (got {raw.bit_count})")
    if raw.width <= 0 or raw.height <= 0 or len(raw.data) != raw.width * raw.height * 4:
        raise FormatError(
            f"Icon buffer of {len(raw.data)} bytes does not match {raw.width}x{raw.height}"
        )
    buffer = raw.data if isinstance(raw.data, bytearray) else bytearray(raw.data)
    bgra_to_rgba(buffer, swapper)
    return crop_transparent_borders(RgbaImage(raw.width, raw.height, bytes(buffer)))


__all__ = [
    "crop_transparent_borders",
    "bgra_to_rgba",
    "decode_png",
    "find_png_blob",
    "is_valid_png_file",
    "normalize_raw_image",
    "save_png",
]
