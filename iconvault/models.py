"""Value types shared by the cache, the imaging pipeline and the orchestrator."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, Union

PATH = "path"
PACKAGED_APP = "packaged_app"
PROPERTY_STORE = "property_store"

_KINDS = {PATH, PACKAGED_APP, PROPERTY_STORE}


@dataclass(frozen=True, slots=True)
class SourceKey:
    """Identity under which an icon is requested and cached."""

    kind: str
    value: str

    def __post_init__(self) -> None:
        if self.kind not in _KINDS:
            raise ValueError(f"Unknown source kind: {self.kind!r}")
        if not self.value:
            raise ValueError("Source key value must not be empty")

    @classmethod
    def for_path(cls, path: Union[str, os.PathLike]) -> "SourceKey":
        return cls(PATH, os.path.abspath(os.fspath(path)))

    @classmethod
    def packaged_app(cls, app_id: str) -> "SourceKey":
        return cls(PACKAGED_APP, app_id)

    @classmethod
    def property_store(cls, app_id: str) -> "SourceKey":
        return cls(PROPERTY_STORE, app_id)

    @property
    def is_path(self) -> bool:
        return self.kind == PATH

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class StaticIcon:
    filename: str


@dataclass(frozen=True, slots=True)
class DynamicIcon:
    light: str
    dark: str
    mask: Optional[str] = None


IconDescriptor = Union[StaticIcon, DynamicIcon]


def descriptor_to_payload(descriptor: IconDescriptor) -> Union[str, dict]:
    """Serialize a descriptor for the icon pack document."""
    if isinstance(descriptor, StaticIcon):
        return descriptor.filename
    return {"light": descriptor.light, "dark": descriptor.dark, "mask": descriptor.mask}


def descriptor_from_payload(payload: Union[str, dict]) -> IconDescriptor:
    if isinstance(payload, str):
        return StaticIcon(payload)
    if isinstance(payload, dict) and payload.get("light") and payload.get("dark"):
        return DynamicIcon(payload["light"], payload["dark"], payload.get("mask"))
    raise ValueError(f"Malformed icon descriptor: {payload!r}")


def descriptor_filenames(descriptor: IconDescriptor) -> list[str]:
    if isinstance(descriptor, StaticIcon):
        return [descriptor.filename]
    return [name for name in (descriptor.light, descriptor.dark, descriptor.mask) if name]


@dataclass(slots=True)
class RawIconImage:
    """BGRA pixels as returned by a platform icon provider."""

    data: bytearray
    width: int
    height: int
    bit_count: int = 32


@dataclass(frozen=True, slots=True)
class RgbaImage:
    """Normalized RGBA pixels, rows top to bottom without padding."""

    width: int
    height: int
    data: bytes

    @classmethod
    def transparent(cls, width: int = 1, height: int = 1) -> "RgbaImage":
        return cls(width, height, bytes(width * height * 4))

    def pixel(self, x: int, y: int) -> tuple[int, int, int, int]:
        offset = (y * self.width + x) * 4
        return tuple(self.data[offset : offset + 4])

    def crop(self, left: int, top: int, width: int, height: int) -> "RgbaImage":
        stride = self.width * 4
        rows = [
            self.data[row * stride + left * 4 : row * stride + (left + width) * 4]
            for row in range(top, top + height)
        ]
        return RgbaImage(width, height, b"".join(rows))
