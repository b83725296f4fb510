"""Per-pixel perceptual comparison with pixelmatch semantics, vectorised with numpy.

Colours are compared in YIQ space after blending alpha over white. A pixel
differs when its weighted YIQ delta exceeds ``MAX_YIQ_DELTA * threshold**2``.
Unless ``include_aa`` is set, differing pixels that look like anti-aliasing
in either image are left out of the count and the mask.
"""

from __future__ import annotations

import numpy as np

# Largest possible YIQ delta between two colours
MAX_YIQ_DELTA = 35215.0

DIFF_COLOR = (255, 0, 0, 255)

# (dx, dy) in the scan order of the reference algorithm: x outer, y inner
_NEIGHBOURS = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1), (0, 1),
    (1, -1), (1, 0), (1, 1),
)


def _blend_white(rgba: np.ndarray) -> np.ndarray:
    rgb = rgba[..., :3].astype(np.float64)
    alpha = rgba[..., 3:4].astype(np.float64) / 255.0
    return 255.0 + (rgb - 255.0) * alpha


def _brightness(rgb: np.ndarray) -> np.ndarray:
    return rgb[..., 0] * 0.29889531 + rgb[..., 1] * 0.58662247 + rgb[..., 2] * 0.11448223


def color_delta(img1: np.ndarray, img2: np.ndarray) -> np.ndarray:
    """Squared YIQ distance per pixel for two HxWx4 uint8 arrays."""
    a = _blend_white(img1)
    b = _blend_white(img2)
    y = _brightness(a) - _brightness(b)
    i = (
        (a[..., 0] - b[..., 0]) * 0.59597799
        - (a[..., 1] - b[..., 1]) * 0.27417610
        - (a[..., 2] - b[..., 2]) * 0.32180189
    )
    q = (
        (a[..., 0] - b[..., 0]) * 0.21147017
        - (a[..., 1] - b[..., 1]) * 0.52261711
        + (a[..., 2] - b[..., 2]) * 0.31114694
    )
    delta = 0.5053 * y * y + 0.299 * i * i + 0.1957 * q * q
    delta[np.all(img1 == img2, axis=-1)] = 0.0
    return delta


def _on_border(ys: np.ndarray, xs: np.ndarray, height: int, width: int) -> np.ndarray:
    return (xs == 0) | (xs == width - 1) | (ys == 0) | (ys == height - 1)


def _neighbour(ys, xs, dx, dy, height, width):
    ny = ys + dy
    nx = xs + dx
    valid = (ny >= 0) & (ny < height) & (nx >= 0) & (nx < width)
    return np.clip(ny, 0, height - 1), np.clip(nx, 0, width - 1), valid


def _has_many_siblings(img: np.ndarray, ys: np.ndarray, xs: np.ndarray) -> np.ndarray:
    """True where more than two neighbours (border counts as one) share the exact RGBA value."""
    height, width = img.shape[:2]
    zeroes = _on_border(ys, xs, height, width).astype(np.int32)
    centre = img[ys, xs]
    for dx, dy in _NEIGHBOURS:
        ny, nx, valid = _neighbour(ys, xs, dx, dy, height, width)
        same = np.all(img[ny, nx] == centre, axis=-1)
        zeroes += valid & same
    return zeroes > 2


def _antialiased(
    img: np.ndarray, brightness: np.ndarray, other: np.ndarray, ys: np.ndarray, xs: np.ndarray
) -> np.ndarray:
    """Anti-aliasing classification for the pixels at (ys, xs) of ``img``."""
    height, width = brightness.shape
    count = len(ys)
    zeroes = _on_border(ys, xs, height, width).astype(np.int32)
    centre = brightness[ys, xs]

    lowest = np.zeros(count)
    highest = np.zeros(count)
    low_y, low_x = ys.copy(), xs.copy()
    high_y, high_x = ys.copy(), xs.copy()

    for dx, dy in _NEIGHBOURS:
        ny, nx, valid = _neighbour(ys, xs, dx, dy, height, width)
        delta = centre - brightness[ny, nx]
        zeroes += valid & (delta == 0)

        darker = valid & (delta < lowest)
        lowest = np.where(darker, delta, lowest)
        low_y = np.where(darker, ny, low_y)
        low_x = np.where(darker, nx, low_x)

        brighter = valid & (delta > highest)
        highest = np.where(brighter, delta, highest)
        high_y = np.where(brighter, ny, high_y)
        high_x = np.where(brighter, nx, high_x)

    result = np.zeros(count, dtype=bool)
    # Needs both a darker and a brighter neighbour and at most two equal ones
    candidates = np.nonzero((zeroes <= 2) & (lowest != 0) & (highest != 0))[0]
    if candidates.size == 0:
        return result

    ly, lx = low_y[candidates], low_x[candidates]
    hy, hx = high_y[candidates], high_x[candidates]
    result[candidates] = (
        _has_many_siblings(img, ly, lx) & _has_many_siblings(other, ly, lx)
    ) | (
        _has_many_siblings(img, hy, hx) & _has_many_siblings(other, hy, hx)
    )
    return result


def compare_pixels(
    img1: np.ndarray,
    img2: np.ndarray,
    threshold: float = 0.1,
    include_aa: bool = False,
) -> tuple[int, np.ndarray]:
    """Compare two same-shaped HxWx4 uint8 arrays.

    Returns the number of differing pixels and an HxWx4 uint8 mask that is
    ``DIFF_COLOR`` at differing pixels and fully transparent elsewhere.
    """
    if img1.shape != img2.shape:
        raise ValueError(f"Shape mismatch: {img1.shape} vs {img2.shape}")

    height, width = img1.shape[:2]
    mask = np.zeros((height, width, 4), dtype=np.uint8)
    if np.array_equal(img1, img2):
        return 0, mask

    max_delta = MAX_YIQ_DELTA * threshold * threshold
    differing = color_delta(img1, img2) > max_delta

    if not include_aa and differing.any():
        ys, xs = np.nonzero(differing)
        bright1 = _brightness(_blend_white(img1))
        bright2 = _brightness(_blend_white(img2))
        aa = _antialiased(img1, bright1, img2, ys, xs) | _antialiased(img2, bright2, img1, ys, xs)
        differing[ys[aa], xs[aa]] = False

    mask[differing] = DIFF_COLOR
    return int(differing.sum()), mask
