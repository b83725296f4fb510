"""Diff engine: decode captures, compare pixels and build a visual diff composite."""

from __future__ import annotations

import io
import logging

import numpy as np
from PIL import Image

from snap_ui.diff.pixel_compare import compare_pixels
from snap_ui.errors import DimensionMismatchError
from snap_ui.models.raster import DiffResult, RasterImage

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.1
DEFAULT_BLEND_ALPHA = 0.2


def decode_png(data: bytes) -> RasterImage:
    """Decode encoded image bytes into an RGBA raster."""
    with Image.open(io.BytesIO(data)) as img:
        rgba = img.convert("RGBA")
        return RasterImage(width=rgba.width, height=rgba.height, data=rgba.tobytes())


def encode_png(image: RasterImage) -> bytes:
    buf = io.BytesIO()
    _to_pil(image).save(buf, format="PNG")
    return buf.getvalue()


def _to_pil(image: RasterImage) -> Image.Image:
    return Image.frombytes("RGBA", image.size, image.data)


def _to_array(image: RasterImage) -> np.ndarray:
    return np.frombuffer(image.data, dtype=np.uint8).reshape(image.height, image.width, 4)


def build_composite(
    baseline: RasterImage,
    actual: RasterImage,
    mask: RasterImage,
    blend_alpha: float = DEFAULT_BLEND_ALPHA,
) -> RasterImage:
    """Faint blend of both captures with the diff mask drawn over it at full opacity."""
    composite = Image.blend(_to_pil(baseline), _to_pil(actual), blend_alpha)
    composite.alpha_composite(_to_pil(mask))
    return RasterImage(width=composite.width, height=composite.height, data=composite.tobytes())


def compare_images(
    baseline: bytes | RasterImage,
    actual: bytes | RasterImage,
    threshold: float = DEFAULT_THRESHOLD,
    include_aa: bool = False,
    blend_alpha: float = DEFAULT_BLEND_ALPHA,
) -> DiffResult:
    """Compare a baseline against an actual capture.

    Raises DimensionMismatchError without comparing any pixels when the sizes
    differ. The composite is only built when at least one pixel differs.
    """
    if isinstance(baseline, bytes):
        baseline = decode_png(baseline)
    if isinstance(actual, bytes):
        actual = decode_png(actual)

    if baseline.size != actual.size:
        raise DimensionMismatchError(baseline.size, actual.size)

    count, mask_array = compare_pixels(
        _to_array(baseline), _to_array(actual), threshold=threshold, include_aa=include_aa,
    )
    result = DiffResult(diff_pixel_count=count, width=baseline.width, height=baseline.height)
    logger.debug(
        "Compared %dx%d images: %d differing pixels (threshold %.2f)",
        baseline.width, baseline.height, count, threshold,
    )

    if count > 0:
        mask = RasterImage(width=baseline.width, height=baseline.height, data=mask_array.tobytes())
        result.mask = mask
        result.composited_image = build_composite(baseline, actual, mask, blend_alpha)
    return result
