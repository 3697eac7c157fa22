"""List model of duplicate groups: header rows, image rows, checks and thumbnails."""

from __future__ import annotations

import os
import threading
from collections.abc import Callable, Iterable, Mapping
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from PIL import Image, ImageOps

from dupfind.database import ImageData
from dupfind.hasher import load_image
from dupfind.similarity import DuplicateGroup

IMAGES_PER_ROW = 4
THUMBNAIL_SIZE = 150
_PREVIEW_SIZE = 300
_THUMBNAIL_WORKERS = 4

RowsChanged = Callable[[int, int], None]


class RowType(Enum):
    HEADER = "header"
    IMAGE_ROW = "image_row"


@dataclass
class ResultListItem:
    """One row of the result list: a group header or up to four images."""

    type: RowType
    group_id: int
    header_text: str = ""
    images: list[ImageData] = field(default_factory=list)


def _fit(image: Image.Image, box: int) -> Image.Image:
    scale = box / max(image.width, image.height)
    size = (max(1, round(image.width * scale)), max(1, round(image.height * scale)))
    return image.resize(size, Image.Resampling.LANCZOS)


def _load_thumbnail(path: str) -> Optional[Image.Image]:
    try:
        with Image.open(path) as opened:
            opened.draft("RGB", (_PREVIEW_SIZE, _PREVIEW_SIZE))
            image = ImageOps.exif_transpose(opened).convert("RGB")
    except (OSError, ValueError, Image.DecompressionBombError):
        try:
            image = load_image(path, _PREVIEW_SIZE)
        except (OSError, ValueError, Image.DecompressionBombError):
            return None
    if image.width == 0 or image.height == 0:
        return None
    return _fit(image, THUMBNAIL_SIZE)


class ResultListModel:
    """Rows for displaying duplicate groups, with per-path deletion checks.

    ``on_rows_changed(first, last)`` is called when the data shown in an
    inclusive range of rows changes (a check toggled, a thumbnail loaded).
    Thumbnail completions call it from a worker thread.
    """

    def __init__(self, on_rows_changed: Optional[RowsChanged] = None):
        self.on_rows_changed = on_rows_changed
        self._items: list[ResultListItem] = []
        self._checks: dict[str, bool] = {}
        self._thumbnails: dict[str, Optional[Image.Image]] = {}
        self._loading: set[str] = set()
        self._pending: set[Future] = set()
        self._lock = threading.Lock()
        self._executor: Optional[ThreadPoolExecutor] = None

    def __len__(self) -> int:
        return len(self._items)

    def item(self, row: int) -> ResultListItem:
        if not 0 <= row < len(self._items):
            raise IndexError(f"row {row} out of range")
        return self._items[row]

    def set_groups(self, groups: Iterable[DuplicateGroup], preserve_state: bool = False) -> None:
        """Rebuild the rows; the largest file of each group starts unchecked."""
        old = self._checks if preserve_state else {}
        checks: dict[str, bool] = {}
        items: list[ResultListItem] = []
        group_id = 0
        for group in groups:
            images = group.images
            if not images:
                continue
            best = max(range(len(images)), key=lambda k: images[k].file_size)
            for k, img in enumerate(images):
                if preserve_state and img.path in old:
                    checks[img.path] = old[img.path]
                else:
                    checks[img.path] = k != best

            items.append(
                ResultListItem(
                    RowType.HEADER,
                    group_id,
                    header_text=f"Duplicate Group - {len(images)} images",
                )
            )
            for start in range(0, len(images), IMAGES_PER_ROW):
                items.append(
                    ResultListItem(
                        RowType.IMAGE_ROW,
                        group_id,
                        images=list(images[start:start + IMAGES_PER_ROW]),
                    )
                )
            group_id += 1
        self._checks = checks
        self._items = items

    def is_checked(self, path: str) -> bool:
        return self._checks.get(path, False)

    def set_checked(self, path: str, state: bool) -> None:
        current = self._checks.setdefault(path, False)
        if current != state:
            self._checks[path] = state
            self._emit_for_path(path)

    def clear_all_checks(self) -> None:
        for path in self._checks:
            self._checks[path] = False
        if self._items:
            self._emit(0, len(self._items) - 1)

    def clear(self) -> None:
        """Drop all rows, checks and cached thumbnails."""
        self._items = []
        self._checks = {}
        with self._lock:
            self._thumbnails.clear()
            self._loading.clear()

    def check_states(self) -> Mapping[str, bool]:
        return dict(self._checks)

    def thumbnail(self, path: str) -> Optional[Image.Image]:
        """Return the cached thumbnail, or None while it is (re)loading or failed.

        A path not yet cached starts loading in the background.
        """
        with self._lock:
            if path in self._thumbnails:
                return self._thumbnails[path]
        self._request_thumbnail(path)
        return None

    def wait_for_thumbnails(self) -> None:
        """Block until every requested thumbnail has finished loading."""
        while True:
            with self._lock:
                pending = [f for f in self._pending if not f.done()]
                self._pending = set(pending)
            if not pending:
                return
            wait(pending)

    def row_for_path(self, path: str) -> Optional[int]:
        for row, item in enumerate(self._items):
            if item.type is RowType.IMAGE_ROW and any(img.path == path for img in item.images):
                return row
        return None

    def _request_thumbnail(self, path: str) -> None:
        with self._lock:
            if path in self._loading:
                return
            self._loading.add(path)
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=_THUMBNAIL_WORKERS, thread_name_prefix="thumbnail"
                )
            self._pending = {f for f in self._pending if not f.done()}
            self._pending.add(self._executor.submit(self._load_and_store, path))

    def _load_and_store(self, path: str) -> None:
        image = _load_thumbnail(os.fspath(path))
        with self._lock:
            self._loading.discard(path)
            self._thumbnails[path] = image
        self._emit_for_path(path)

    def _emit_for_path(self, path: str) -> None:
        row = self.row_for_path(path)
        if row is not None:
            self._emit(row, row)

    def _emit(self, first: int, last: int) -> None:
        if self.on_rows_changed is not None:
            self.on_rows_changed(first, last)