"""Photo adjustments on 8-bit RGB images held as numpy arrays.

Images are ``(height, width, 3)`` arrays of ``uint8`` in RGB channel order.
Every operation returns a new array and saturates results to 0..255, with
halves rounded to even.
"""

from __future__ import annotations

from dataclasses import dataclass, fields

import numpy as np

_SHARPEN_KERNEL = np.array(
    [[0.0, -1.0, 0.0], [-1.0, 5.0, -1.0], [0.0, -1.0, 0.0]], dtype=np.float64
)
CLARITY_SIGMA = 1.0


@dataclass
class Adjustments:
    """Slider values of the preview editor; zero means "unchanged"."""

    brightness: int = 0
    contrast: int = 0
    saturation: int = 0
    exposure: int = 0
    clarity: int = 0
    temperature: int = 0
    sharpen: int = 0

    def is_identity(self) -> bool:
        """True when every adjustment is zero."""
        return all(getattr(self, f.name) == 0 for f in fields(self))


def _check(image: np.ndarray) -> np.ndarray:
    if not isinstance(image, np.ndarray):
        raise TypeError("image must be a numpy array")
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"expected an (H, W, 3) image, got shape {image.shape}")
    if image.dtype != np.uint8:
        raise ValueError(f"expected uint8 image, got {image.dtype}")
    return image


def _saturate(values: np.ndarray) -> np.ndarray:
    return np.clip(np.rint(values), 0, 255).astype(np.uint8)


def rgb_to_hsv(image: np.ndarray) -> np.ndarray:
    """Convert RGB to 8-bit HSV: hue 0..179 in half degrees, S and V 0..255."""
    rgb = _check(image).astype(np.float64)
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    v = rgb.max(axis=2)
    diff = v - rgb.min(axis=2)
    safe_v = np.where(v > 0, v, 1.0)
    s = np.where(v > 0, diff * 255.0 / safe_v, 0.0)
    safe_diff = np.where(diff > 0, diff, 1.0)
    h = np.select(
        [v == r, v == g],
        [60.0 * (g - b) / safe_diff, 120.0 + 60.0 * (b - r) / safe_diff],
        default=240.0 + 60.0 * (r - g) / safe_diff,
    )
    h = np.where(diff > 0, h, 0.0)
    h = np.where(h < 0, h + 360.0, h)
    hue = np.rint(h / 2.0) % 180
    return np.stack([hue, np.rint(s), v], axis=2).astype(np.uint8)


def hsv_to_rgb(hsv: np.ndarray) -> np.ndarray:
    """Convert 8-bit HSV (hue in half degrees) back to RGB."""
    data = _check(hsv).astype(np.float64)
    h = data[..., 0] * 2.0 / 60.0
    s = data[..., 1] / 255.0
    v = data[..., 2] / 255.0
    sector = np.floor(h)
    frac = h - sector
    sector = sector.astype(np.int64) % 6
    p = v * (1.0 - s)
    q = v * (1.0 - s * frac)
    t = v * (1.0 - s * (1.0 - frac))
    sectors = [sector == k for k in range(6)]
    r = np.select(sectors, [v, q, p, p, t, v])
    g = np.select(sectors, [t, v, v, q, p, p])
    b = np.select(sectors, [p, p, t, v, v, q])
    return _saturate(np.stack([r, g, b], axis=2) * 255.0)


def _gaussian_kernel(sigma: float) -> np.ndarray:
    size = int(round(sigma * 3 * 2 + 1)) | 1
    offsets = np.arange(size, dtype=np.float64) - (size - 1) / 2.0
    kernel = np.exp(-(offsets**2) / (2.0 * sigma * sigma))
    return kernel / kernel.sum()


def _convolve_axis(data: np.ndarray, kernel: np.ndarray, axis: int) -> np.ndarray:
    radius = len(kernel) // 2
    pad = [(0, 0)] * data.ndim
    pad[axis] = (radius, radius)
    padded = np.pad(data, pad, mode="reflect")
    length = data.shape[axis]
    result = np.zeros_like(data)
    for offset, weight in enumerate(kernel):
        window = np.take(padded, np.arange(offset, offset + length), axis=axis)
        result += weight * window
    return result


def gaussian_blur(image: np.ndarray, sigma: float) -> np.ndarray:
    """Blur with a Gaussian of the given sigma, mirroring pixels at the border."""
    if sigma <= 0:
        raise ValueError("sigma must be positive")
    data = _check(image).astype(np.float64)
    kernel = _gaussian_kernel(sigma)
    blurred = _convolve_axis(_convolve_axis(data, kernel, 1), kernel, 0)
    return _saturate(blurred)


def adjust_brightness_contrast(
    image: np.ndarray, brightness: int, contrast: int
) -> np.ndarray:
    """Scale by ``1 + contrast/100`` and add ``brightness``."""
    alpha = 1.0 + contrast / 100.0
    return _saturate(_check(image).astype(np.float64) * alpha + brightness)


def adjust_exposure(image: np.ndarray, exposure: int) -> np.ndarray:
    """Multiply every channel by ``1 + exposure/100``."""
    _check(image)
    if exposure == 0:
        return image.copy()
    factor = 1.0 + exposure / 100.0
    return _saturate(image.astype(np.float64) * factor)


def adjust_saturation(image: np.ndarray, saturation: int) -> np.ndarray:
    """Scale the HSV saturation channel by ``1 + saturation/100``."""
    _check(image)
    if saturation == 0:
        return image.copy()
    hsv = rgb_to_hsv(image)
    scale = 1.0 + saturation / 100.0
    hsv[..., 1] = _saturate(hsv[..., 1].astype(np.float64) * scale)
    return hsv_to_rgb(hsv)


def adjust_temperature(image: np.ndarray, temperature: int) -> np.ndarray:
    """Warm (positive) or cool (negative): shift red up and blue down."""
    _check(image)
    if temperature == 0:
        return image.copy()
    data = image.astype(np.int64)
    data[..., 0] += temperature
    data[..., 2] -= temperature
    return np.clip(data, 0, 255).astype(np.uint8)


def adjust_clarity(image: np.ndarray, clarity: int) -> np.ndarray:
    """Boost detail by subtracting a weighted Gaussian blur."""
    _check(image)
    if clarity == 0:
        return image.copy()
    blurred = gaussian_blur(image, CLARITY_SIGMA).astype(np.float64)
    weight = clarity / 100.0
    return _saturate(image.astype(np.float64) * (1.0 + weight) - blurred * weight)


def sharpen(image: np.ndarray) -> np.ndarray:
    """Apply the 3x3 Laplacian sharpening kernel."""
    data = _check(image).astype(np.float64)
    padded = np.pad(data, ((1, 1), (1, 1), (0, 0)), mode="reflect")
    height, width = data.shape[:2]
    result = np.zeros_like(data)
    for (dy, dx), weight in np.ndenumerate(_SHARPEN_KERNEL):
        if weight:
            result += weight * padded[dy : dy + height, dx : dx + width]
    return _saturate(result)


def apply_adjustments(
    image: np.ndarray, adjustments: Adjustments, saturation_first: bool = False
) -> np.ndarray:
    """Run the whole adjustment pipeline.

    Brightness/contrast always comes first. With ``saturation_first`` the
    saturation step runs before exposure (the on-screen preview order);
    otherwise exposure runs first (the order used when saving).
    """
    result = adjust_brightness_contrast(
        image, adjustments.brightness, adjustments.contrast
    )
    if saturation_first:
        result = adjust_saturation(result, adjustments.saturation)
        result = adjust_exposure(result, adjustments.exposure)
    else:
        result = adjust_exposure(result, adjustments.exposure)
        result = adjust_saturation(result, adjustments.saturation)
    result = adjust_temperature(result, adjustments.temperature)
    result = adjust_clarity(result, adjustments.clarity)
    if adjustments.sharpen != 0:
        result = sharpen(result)
    return result