"""Editing session behind the image preview window."""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass, fields
from pathlib import Path

import numpy as np
from PIL import Image

from imagealbum.adjust import Adjustments, apply_adjustments

ADJUSTMENT_NAMES = tuple(f.name for f in fields(Adjustments))


class PreviewError(Exception):
    """Raised when an image cannot be loaded, saved or deleted."""


@dataclass(frozen=True)
class Rect:
    """Window geometry: position and size."""

    x: int
    y: int
    width: int
    height: int


class GeometryTracker:
    """Remembers the smallest normal-state geometry to restore after maximizing."""

    def __init__(self, initial: Rect) -> None:
        self.normal_geometry = initial
        self.restoring = False

    def on_resize(self, geometry: Rect, normal_state: bool = True) -> bool:
        """Record ``geometry`` if it should become the restore target.

        Returns True when the stored geometry changed.
        """
        if not normal_state or self.restoring:
            return False
        stored = self.normal_geometry
        if stored.width == 0 or stored.height == 0:
            self.normal_geometry = geometry
            return True
        if geometry.width <= stored.width and geometry.height <= stored.height:
            self.normal_geometry = geometry
            return True
        return False

    def on_state_change(self, was_maximized: bool, is_maximized: bool) -> Rect | None:
        """Handle a window-state change.

        When leaving the maximized state, a restore begins and the geometry
        to restore is returned; otherwise None.
        """
        if was_maximized and not is_maximized:
            self.restoring = True
            return self.normal_geometry
        return None

    def finish_restore(self) -> Rect:
        """End a restore and return the geometry that was applied."""
        self.restoring = False
        return self.normal_geometry


def _fit_within(size: tuple[int, int], box: tuple[int, int]) -> tuple[int, int]:
    width, height = size
    box_w, box_h = box
    scaled_w = box_h * width // height
    if scaled_w <= box_w:
        return max(scaled_w, 1), box_h
    return box_w, max(box_w * height // width, 1)


class PreviewSession:
    """An image opened for adjustment, saving and deletion."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)
        self.adjustments = Adjustments()
        self._lock = threading.Lock()
        self.image: np.ndarray | None
        try:
            with Image.open(self.path) as picture:
                self.image = np.array(picture.convert("RGB"), dtype=np.uint8)
        except (OSError, ValueError, Image.DecompressionBombError):
            self.image = None

    def _require_image(self) -> np.ndarray:
        if self.image is None or self.image.size == 0:
            raise PreviewError("image data is empty")
        return self.image

    def set_adjustment(self, name: str, value: int) -> None:
        """Set one slider value, e.g. ``set_adjustment("brightness", 20)``."""
        if name not in ADJUSTMENT_NAMES:
            raise ValueError(f"unknown adjustment: {name!r}")
        setattr(self.adjustments, name, int(value))

    def render(self) -> np.ndarray:
        """The adjusted image in the order used when saving."""
        with self._lock:
            image = self._require_image()
            return apply_adjustments(image, self.adjustments, saturation_first=False)

    def preview(self, size: tuple[int, int]) -> Image.Image:
        """The adjusted image scaled to fit ``size``, keeping its aspect ratio."""
        box_w, box_h = size
        if box_w <= 0 or box_h <= 0:
            raise ValueError("preview size must be positive")
        with self._lock:
            image = self._require_image()
            adjusted = apply_adjustments(image, self.adjustments, saturation_first=True)
        picture = Image.fromarray(adjusted, "RGB")
        return picture.resize(
            _fit_within(picture.size, (box_w, box_h)), Image.Resampling.BILINEAR
        )

    def _write(self, target: Path) -> Path:
        picture = Image.fromarray(self.render(), "RGB")
        try:
            picture.save(target)
        except (OSError, ValueError, KeyError) as exc:
            raise PreviewError(f"cannot save image to {target}: {exc}") from exc
        return target

    def save(self) -> Path:
        """Overwrite the original file with the adjusted image."""
        return self._write(self.path)

    def save_as(self, path: str | os.PathLike[str]) -> Path:
        """Write the adjusted image to a new file."""
        target = Path(path)
        if not os.fspath(path):
            raise ValueError("no file name given")
        return self._write(target)

    def delete(self) -> Path:
        """Remove the image file from disk."""
        try:
            self.path.unlink()
        except OSError as exc:
            raise PreviewError(f"cannot delete {self.path}: {exc}") from exc
        return self.path