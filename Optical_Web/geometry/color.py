from __future__ import annotations

"""Color conversion into the linear RGBA space consumed by the renderer."""

from typing import Sequence, Tuple

import numpy as np

RGBA = Tuple[float, float, float, float]

# OKLab -> non-linear LMS and LMS -> linear sRGB (Björn Ottosson, 2020)
_OKLAB_TO_LMS = np.array(
    [
        [1.0, 0.3963377774, 0.2158037573],
        [1.0, -0.1055613458, -0.0638541728],
        [1.0, -0.0894841775, -1.2914855480],
    ]
)
_LMS_TO_LINEAR_SRGB = np.array(
    [
        [4.0767416621, -3.3077115913, 0.2309699292],
        [-1.2684380046, 2.6097574011, -0.3413193965],
        [-0.0041960863, -0.7034186147, 1.7076147010],
    ]
)


def oklch_to_linear(
    lightness: float, chroma: float, hue: float, alpha: float = 1.0
) -> RGBA:
    """Convert an OKLCH color with ``hue`` in degrees to linear RGBA.

    Channels falling outside the sRGB gamut are clipped to ``[0, 1]``.
    """

    h = np.radians(hue % 360.0)
    lab = np.array([lightness, chroma * np.cos(h), chroma * np.sin(h)])
    lms = (_OKLAB_TO_LMS @ lab) ** 3
    rgb = np.clip(_LMS_TO_LINEAR_SRGB @ lms, 0.0, 1.0)
    return float(rgb[0]), float(rgb[1]), float(rgb[2]), float(alpha)


def srgb_u8_to_linear(rgb: Sequence[int], alpha: float = 1.0) -> RGBA:
    """Convert 8-bit sRGB components to linear RGBA."""

    c = np.asarray(rgb, dtype=float)[:3] / 255.0
    lin = np.where(c <= 0.04045, c / 12.92, ((c + 0.055) / 1.055) ** 2.4)
    return float(lin[0]), float(lin[1]), float(lin[2]), float(alpha)


def linear_to_srgb_u8(color: Sequence[float]) -> Tuple[int, int, int, int]:
    """Encode a linear RGBA color as 8-bit sRGB with 8-bit alpha."""

    c = np.clip(np.asarray(color, dtype=float)[:3], 0.0, 1.0)
    enc = np.where(c <= 0.0031308, c * 12.92, 1.055 * c ** (1 / 2.4) - 0.055)
    alpha = float(color[3]) if len(color) > 3 else 1.0
    r, g, b = (int(round(v * 255)) for v in enc)
    return r, g, b, int(round(min(max(alpha, 0.0), 1.0) * 255))


def wavelength_hue(index: int, max_wavelengths: int, span: float, offset: float) -> float:
    """Map a channel index to its hue in degrees."""
    return (index + 0.5) / max_wavelengths * span + offset


__all__ = [
    "RGBA",
    "linear_to_srgb_u8",
    "oklch_to_linear",
    "srgb_u8_to_linear",
    "wavelength_hue",
]
