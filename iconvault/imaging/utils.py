"""PNG helpers for stored icon assets."""
from __future__ import annotations

import zlib
from pathlib import Path
from typing import Optional

from PySide6.QtGui import QImage

from ..errors import FormatError, IoError
from ..models import RawIconImage, RgbaImage

_PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def _png_end(data: bytes, start: int) -> Optional[int]:
    """Return the offset just past IEND for a PNG starting at ``start``.

    Walks chunk headers, checks bounds and CRCs. Returns None when the blob
    is truncated or corrupt.
    """
    pos = start + len(_PNG_SIGNATURE)
    while pos + 12 <= len(data):
        length = int.from_bytes(data[pos : pos + 4], "big")
        pos += 4
        chunk_type = data[pos : pos + 4]
        pos += 4
        if pos + length + 4 > len(data):
            return None
        chunk_data = data[pos : pos + length]
        pos += length
        expected_crc = int.from_bytes(data[pos : pos + 4], "big")
        pos += 4
        if zlib.crc32(chunk_type + chunk_data) & 0xFFFFFFFF != expected_crc:
            return None
        if chunk_type == b"IEND":
            return pos
    return None


def find_png_blob(data: bytes) -> Optional[bytes]:
    """Extract the first structurally valid PNG blob from arbitrary bytes."""
    search_from = 0
    while True:
        start = data.find(_PNG_SIGNATURE, search_from)
        if start < 0:
            return None
        end = _png_end(data, start)
        if end is not None:
            return data[start:end]
        search_from = start + len(_PNG_SIGNATURE)


def is_valid_png_file(filepath: str | Path) -> bool:
    """Fast structural PNG check (signature + chunk bounds + CRC + IEND)."""
    try:
        with open(filepath, "rb") as handle:
            data = handle.read()
    except OSError:
        return False
    if not data.startswith(_PNG_SIGNATURE):
        return False
    return _png_end(data, 0) is not None


def decode_png(blob: bytes) -> RawIconImage:
    """Decode PNG bytes into a 32-bit BGRA buffer."""
    image = QImage.fromData(blob, "PNG")
    if image.isNull():
        raise FormatError("Embedded icon is not a readable PNG")
    image = image.convertToFormat(QImage.Format.Format_RGBA8888).rgbSwapped()
    data = bytearray(image.constBits())[: image.width() * image.height() * 4]
    return RawIconImage(data, image.width(), image.height())


def save_png(image: RgbaImage, path: str | Path) -> None:
    qimage = QImage(
        image.data, image.width, image.height, image.width * 4, QImage.Format.Format_RGBA8888
    )
    # QImage does not own ``image.data``; detach before encoding.
    if not qimage.copy().save(str(path), "PNG"):
        raise IoError(f"Failed to save icon to {path}")
