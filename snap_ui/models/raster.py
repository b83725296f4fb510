"""Decoded image and comparison result value types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RasterImage:
    """RGBA bitmap, 8 bits per channel, rows top to bottom."""

    width: int
    height: int
    data: bytes

    def __post_init__(self) -> None:
        expected = self.width * self.height * 4
        if len(self.data) != expected:
            raise ValueError(
                f"RGBA buffer holds {len(self.data)} bytes, expected {expected} "
                f"for {self.width}x{self.height}"
            )

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)


@dataclass
class DiffResult:
    diff_pixel_count: int
    width: int
    height: int
    composited_image: Optional[RasterImage] = None
    mask: Optional[RasterImage] = None

    @property
    def passed(self) -> bool:
        return self.diff_pixel_count == 0
