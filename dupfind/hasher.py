"""Perceptual image hashes (dHash and pHash) and image loading."""

from __future__ import annotations

import os
from typing import Optional

import numpy as np
from PIL import Image, ImageOps
from scipy.fft import dctn

DHASH_SIZE = 8
PHASH_SIZE = 32
_UINT64_MASK = (1 << 64) - 1


def _is_empty(image: Optional[Image.Image]) -> bool:
    return image is None or image.width == 0 or image.height == 0


def _gray(image: Image.Image) -> np.ndarray:
    return np.asarray(image.convert("L"), dtype=np.float64)


def _linear_coords(src_size: int, dst_size: int) -> tuple[np.ndarray, np.ndarray]:
    scale = src_size / dst_size
    pos = (np.arange(dst_size) + 0.5) * scale - 0.5
    index = np.floor(pos).astype(np.int64)
    frac = pos - index
    low = index < 0
    index[low] = 0
    frac[low] = 0.0
    high = index >= src_size - 1
    index[high] = src_size - 1
    frac[high] = 0.0
    return index, frac


def _resize_linear(src: np.ndarray, width: int, height: int) -> np.ndarray:
    """Bilinear resize with pixel-centre alignment, rounded to 8-bit levels."""
    src_h, src_w = src.shape
    xs, xw = _linear_coords(src_w, width)
    ys, yw = _linear_coords(src_h, height)
    xs1 = np.minimum(xs + 1, src_w - 1)
    ys1 = np.minimum(ys + 1, src_h - 1)
    top = src[ys][:, xs] * (1 - xw) + src[ys][:, xs1] * xw
    bottom = src[ys1][:, xs] * (1 - xw) + src[ys1][:, xs1] * xw
    out = top * (1 - yw)[:, None] + bottom * yw[:, None]
    return np.clip(np.rint(out), 0, 255)


def _pack_bits(bits: np.ndarray) -> int:
    return sum(1 << int(i) for i in np.flatnonzero(bits.ravel()))


def calculate_dhash(image: Optional[Image.Image]) -> int:
    """Difference hash: one bit per pair of horizontally adjacent pixels."""
    if _is_empty(image):
        return 0
    small = _resize_linear(_gray(image), DHASH_SIZE + 1, DHASH_SIZE)
    return _pack_bits(small[:, :-1] < small[:, 1:])


def calculate_phash(image: Optional[Image.Image]) -> int:
    """Perceptual hash from the low-frequency DCT coefficients."""
    if _is_empty(image):
        return 0
    small = _resize_linear(_gray(image), PHASH_SIZE, PHASH_SIZE).astype(np.float32)
    coeffs = dctn(small, type=2, norm="ortho")[:8, :8].astype(np.float64)
    without_dc = np.ones((8, 8), dtype=bool)
    without_dc[0, 0] = False
    average = coeffs[without_dc].sum() / 63.0
    return _pack_bits((coeffs > average) & without_dc)


def hamming_distance(h1: int, h2: int) -> int:
    """Number of differing bits between two 64-bit hashes."""
    return ((h1 ^ h2) & _UINT64_MASK).bit_count()


def load_image(path, target_size: int = 512) -> Image.Image:
    """Load an image as RGB, shrinking it so neither side exceeds target_size.

    Raises OSError if the file cannot be read as an image.
    """
    with Image.open(os.fspath(path)) as opened:
        img = ImageOps.exif_transpose(opened).convert("RGB")
    if img.width > target_size or img.height > target_size:
        scale = target_size / max(img.width, img.height)
        size = (max(1, round(img.width * scale)), max(1, round(img.height * scale)))
        img = img.resize(size, Image.Resampling.BILINEAR)
    return img