"""In-place BGRA to RGBA conversion for raw icon bitmaps."""
from __future__ import annotations

from typing import Optional, Protocol

WINDOW_SIZE = 16


class ChannelSwapper(Protocol):
    """Swaps bytes 0 and 2 of every 4-byte pixel from ``start`` to the end."""

    name: str

    def swap(self, buffer: bytearray, start: int = 0) -> None:
        ...


class ScalarSwapper:
    name = "scalar"

    def swap(self, buffer: bytearray, start: int = 0) -> None:
        for index in range(start, len(buffer) - 3, 4):
            buffer[index], buffer[index + 2] = buffer[index + 2], buffer[index]


class BlockSwapper:
    """Converts every whole 16-byte window in one strided pass.

    Extended slice assignment on a ``bytearray`` runs in C, so the aligned
    prefix is handled as a block; the remaining pixels go through ``tail``.
    """

    name = "block"

    def __init__(self, tail: Optional[ChannelSwapper] = None):
        self._tail = tail or ScalarSwapper()

    def swap(self, buffer: bytearray, start: int = 0) -> None:
        end = start + (len(buffer) - start) // WINDOW_SIZE * WINDOW_SIZE
        if end > start:
            blue = buffer[start:end:4]
            buffer[start:end:4] = buffer[start + 2 : end : 4]
            buffer[start + 2 : end : 4] = blue
        self._tail.swap(buffer, end)


def available_swappers() -> list[ChannelSwapper]:
    """Strategies usable on this interpreter, fastest first."""
    return [BlockSwapper(), ScalarSwapper()]


def best_swapper() -> ChannelSwapper:
    return available_swappers()[0]


def bgra_to_rgba(buffer: bytearray, swapper: Optional[ChannelSwapper] = None) -> None:
    """Rewrite ``buffer`` from BGRA to RGBA order in place.

    The length must be a multiple of 4; alpha and green are left untouched.
    """
    (swapper or best_swapper()).swap(buffer)
