"""The thumbnail grid model and the helpers around it."""

from __future__ import annotations

import os
import string
import sys
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from PIL import Image

from imagealbum.scanner import FoundImage

NO_IMAGES_MESSAGE = "未找到宽高大于400的图片"
FAILED_PREFIX = "以下文件加载失败："
NOT_SELECTED = "未选择图片"


@dataclass
class GalleryItem:
    """One cell of the grid: an image with its thumbnail."""

    path: Path
    label: str
    thumbnail: Image.Image | None = None


class Gallery:
    """Ordered thumbnail items with a path lookup and a thumbnail cache."""

    def __init__(self) -> None:
        self.items: list[GalleryItem] = []
        self.thumbnail_cache: dict[Path, Image.Image] = {}

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def add_images(self, images: Iterable[FoundImage]) -> list[GalleryItem]:
        """Append an item for each found image and return the new items."""
        added = []
        for found in images:
            path = Path(found.path)
            self.thumbnail_cache[path] = found.thumbnail
            item = GalleryItem(path, path.name, found.thumbnail)
            self.items.append(item)
            added.append(item)
        return added

    def item_for_path(self, path: str | os.PathLike[str]) -> GalleryItem | None:
        """The first item showing ``path``, or None."""
        target = Path(path)
        return next((item for item in self.items if item.path == target), None)

    def remove_path(self, path: str | os.PathLike[str]) -> bool:
        """Drop the item for ``path``; True if one was removed."""
        item = self.item_for_path(path)
        if item is None:
            return False
        self.items.remove(item)
        return True

    def update_thumbnail(
        self, path: str | os.PathLike[str], thumbnail: Image.Image
    ) -> bool:
        """Replace the thumbnail for ``path``; True if the item exists."""
        item = self.item_for_path(path)
        if item is None:
            return False
        item.thumbnail = thumbnail
        self.thumbnail_cache[item.path] = thumbnail
        return True

    def clear(self) -> None:
        """Forget all items and cached thumbnails."""
        self.items.clear()
        self.thumbnail_cache.clear()

    def summary_messages(self, failed_files: Sequence[str]) -> list[str]:
        """Messages to show once a scan has finished."""
        messages = []
        if not self.items:
            messages.append(NO_IMAGES_MESSAGE)
        if failed_files:
            messages.append(FAILED_PREFIX + ", ".join(failed_files))
        return messages


def _birth_time(path: Path) -> float:
    info = path.stat()
    return getattr(info, "st_birthtime", info.st_ctime)


def describe_selection(
    path: str | os.PathLike[str] | None,
) -> tuple[str, str, str]:
    """Path, creation time and size lines for the selected image."""
    if path is None:
        return (
            f"路径: {NOT_SELECTED}",
            f"创建时间: {NOT_SELECTED}",
            f"尺寸: {NOT_SELECTED}",
        )
    target = Path(path)
    try:
        created = time.strftime(
            "%Y-%m-%d %H:%M:%S", time.localtime(_birth_time(target))
        )
    except OSError:
        created = ""
    try:
        with Image.open(target) as picture:
            width, height = picture.size
    except (OSError, ValueError, Image.DecompressionBombError):
        width, height = -1, -1
    return (
        f"路径: {target.as_posix()}",
        f"创建时间: {created}",
        f"尺寸: {width} x {height}",
    )


def list_drives() -> list[str]:
    """Root paths of the mounted drives."""
    if sys.platform.startswith("win"):
        return [
            f"{letter}:/"
            for letter in string.ascii_uppercase
            if os.path.exists(f"{letter}:/")
        ]
    return ["/"]


def pick_default_drive(paths: Sequence[str]) -> str | None:
    """Prefer drive C:, otherwise the first drive, or None when there are none."""
    for path in paths:
        if path.casefold() in ("c:/", "c:\\"):
            return path
    return paths[0] if paths else None