"""Walk a directory tree looking for images large enough to show."""

from __future__ import annotations

import fnmatch
import os
import threading
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

from PIL import Image

MAX_DEPTH = 4
THUMBNAIL_SIZE = 100
MIN_IMAGE_SIDE = 400
PROGRESS_STEP = 10
SYSTEM_DIRS = (
    "C:/Windows",
    "C:/Program Files",
    "C:/Program Files (x86)",
    "C:/System Volume Information",
    "C:/$Recycle.Bin",
)


def image_name_patterns() -> list[str]:
    """Glob patterns (lower and upper case) for every readable image format."""
    readable = set(Image.OPEN) if Image.OPEN else set()
    if not readable:
        Image.init()
        readable = set(Image.OPEN)
    extensions = sorted(
        {
            ext.lstrip(".").lower()
            for ext, fmt in Image.registered_extensions().items()
            if fmt in readable
        }
    )
    patterns: list[str] = []
    for ext in extensions:
        patterns.extend((f"*.{ext}", f"*.{ext.upper()}"))
    return patterns


def _as_text(path: str | os.PathLike[str]) -> str:
    return os.fspath(path).replace("\\", "/")


def is_system_dir(
    path: str | os.PathLike[str], system_dirs: Iterable[str] = SYSTEM_DIRS
) -> bool:
    """True if ``path`` starts with one of ``system_dirs``, ignoring case."""
    text = _as_text(path).casefold()
    return any(text.startswith(_as_text(d).casefold()) for d in system_dirs)


def validate_image_size(
    path: str | os.PathLike[str], min_side: int = MIN_IMAGE_SIDE
) -> bool:
    """True if the image header reports both sides at least ``min_side``."""
    try:
        with Image.open(path) as image:
            width, height = image.size
    except (OSError, ValueError, Image.DecompressionBombError):
        return False
    return width >= min_side and height >= min_side


def _fit(width: int, height: int, box_w: int, box_h: int) -> tuple[int, int]:
    scaled_w = box_h * width // height
    if scaled_w <= box_w:
        return max(scaled_w, 1), box_h
    return box_w, max(box_w * height // width, 1)


def make_thumbnail(image: Image.Image, size: int = THUMBNAIL_SIZE) -> Image.Image:
    """Scale ``image`` to fit a ``size`` square, keeping its aspect ratio."""
    if size <= 0:
        raise ValueError("thumbnail size must be positive")
    width, height = image.size
    if width <= 0 or height <= 0:
        raise ValueError("image has no pixels")
    return image.resize(
        _fit(width, height, size, size), Image.Resampling.BILINEAR
    )


@dataclass(frozen=True)
class FoundImage:
    """An image that passed the size check, with its thumbnail."""

    path: Path
    thumbnail: Image.Image


@dataclass(frozen=True)
class ScanBatch:
    """What one step of a scan produced."""

    directory: Path
    images: tuple[FoundImage, ...] = ()
    failed: tuple[str, ...] = ()
    progress: int | None = None


@dataclass
class _Listing:
    dirs: list[Path] = field(default_factory=list)
    files: list[Path] = field(default_factory=list)


class ImageScanner:
    """Two-pass scan: count entries first, then load thumbnails batch by batch."""

    def __init__(
        self,
        root: str | os.PathLike[str],
        max_depth: int = MAX_DEPTH,
        thumbnail_size: int = THUMBNAIL_SIZE,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self.root = Path(root).absolute()
        self.max_depth = max_depth
        self.thumbnail_size = thumbnail_size
        self.cancel_event = cancel_event or threading.Event()
        self.patterns = image_name_patterns()
        self.total_items = 0
        self.processed_items = 0
        self.valid_count = 0
        self.failed_files: list[str] = []

    def _skip(self, path: Path, depth: int) -> bool:
        return (
            depth > self.max_depth
            or self.cancel_event.is_set()
            or is_system_dir(path.as_posix())
            or not path.is_dir()
        )

    def _matches(self, name: str) -> bool:
        return any(fnmatch.fnmatchcase(name, pattern) for pattern in self.patterns)

    def _list(self, path: Path) -> _Listing:
        listing = _Listing()
        try:
            entries = sorted(os.scandir(path), key=lambda e: e.name.casefold())
        except OSError:
            return listing
        for entry in entries:
            if entry.name.startswith("."):
                continue
            try:
                if entry.is_dir():
                    listing.dirs.append(Path(entry.path))
                elif entry.is_file() and self._matches(entry.name):
                    listing.files.append(Path(entry.path))
            except OSError:
                continue
        return listing

    def count(self) -> int:
        """Count subdirectories and image files within the depth limit."""

        def walk(path: Path, depth: int) -> int:
            if self._skip(path, depth):
                return 0
            listing = self._list(path)
            total = sum(1 + walk(sub, depth + 1) for sub in listing.dirs)
            return total + len(listing.files)

        self.total_items = walk(self.root, 0)
        return self.total_items

    def _progress(self) -> int | None:
        if self.total_items > 0 and self.processed_items % PROGRESS_STEP == 0:
            return int(self.processed_items / self.total_items * 100.0)
        return None

    def _load(self, path: Path) -> FoundImage | None:
        try:
            with Image.open(path) as image:
                image.load()
                return FoundImage(path, make_thumbnail(image, self.thumbnail_size))
        except (OSError, ValueError, Image.DecompressionBombError):
            return None

    def _process(self, path: Path, depth: int) -> Iterator[ScanBatch]:
        if self._skip(path, depth):
            return
        listing = self._list(path)
        found: list[FoundImage] = []
        failed: list[str] = []
        progress: int | None = None
        for file_path in listing.files:
            self.processed_items += 1
            if validate_image_size(file_path):
                item = self._load(file_path)
                if item is None:
                    failed.append(file_path.name)
                else:
                    found.append(item)
                    self.valid_count += 1
            step = self._progress()
            if step is not None:
                progress = step
        self.failed_files.extend(failed)
        if found or failed or progress is not None:
            yield ScanBatch(path, tuple(found), tuple(failed), progress)
        for sub in listing.dirs:
            self.processed_items += 1
            yield from self._process(sub, depth + 1)
            step = self._progress()
            if step is not None:
                yield ScanBatch(path, progress=step)

    def scan(self) -> Iterator[ScanBatch]:
        """Yield batches of found images and progress, ending at 100%."""
        self.processed_items = 0
        self.valid_count = 0
        self.failed_files = []
        self.count()
        yield from self._process(self.root, 0)
        yield ScanBatch(self.root, progress=100)