"""Finding image files under directories and hashing them into the database."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Optional

from PIL import Image

from dupfind.database import DatabaseError, DatabaseManager, ImageData
from dupfind.hasher import calculate_dhash, calculate_phash, load_image

IMAGE_EXTENSIONS = (".jpg", ".png", ".jpeg", ".bmp", ".webp", ".tiff", ".heic", ".heif")
CHECK_INTERVAL = 10


def _walk(directory: str) -> Iterator[str]:
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except OSError:
        return
    base = directory if directory.endswith(("/", "\\")) else directory + "/"
    for entry in entries:
        if entry.name.startswith("."):
            continue
        try:
            if entry.is_symlink():
                continue
            is_dir = entry.is_dir(follow_symlinks=False)
            is_file = entry.is_file(follow_symlinks=False)
        except OSError:
            continue
        path = base + entry.name
        if is_dir:
            yield from _walk(path)
        elif is_file and entry.name.lower().endswith(IMAGE_EXTENSIONS):
            yield path


def iter_image_files(dirs: Iterable) -> Iterator[str]:
    """Yield image files under each directory, recursively, skipping links and hidden entries."""
    for directory in dirs:
        yield from _walk(os.fspath(directory))


def hash_file(path, cache: Optional[Mapping[str, ImageData]] = None) -> Optional[ImageData]:
    """Hash the file, or return None if it is unchanged from the cache or unreadable."""
    path = os.fspath(path)
    try:
        stat = os.stat(path)
    except OSError:
        return None
    size, mtime = stat.st_size, int(stat.st_mtime)
    cached = cache.get(path) if cache else None
    if cached is not None and cached.file_size == size and cached.timestamp == mtime:
        return None
    try:
        image = load_image(path)
    except (OSError, ValueError, Image.DecompressionBombError):
        return None
    return ImageData(
        path=path,
        dhash=calculate_dhash(image),
        phash=calculate_phash(image),
        timestamp=mtime,
        file_size=size,
        is_searched=False,
    )


def scan_directories(
    db: DatabaseManager,
    dirs: Iterable,
    should_stop: Optional[Callable[[], bool]] = None,
) -> list[ImageData]:
    """Hash new or changed images under the directories into the database.

    ``should_stop`` is polled every CHECK_INTERVAL files; the scan ends as soon
    as it returns True. Returns the images written.
    """
    cache = {img.path: img for img in db.get_all_images()}
    added: list[ImageData] = []
    for count, path in enumerate(iter_image_files(dirs)):
        if count % CHECK_INTERVAL == 0 and should_stop is not None and should_stop():
            break
        data = hash_file(path, cache)
        if data is None:
            continue
        try:
            db.add_image(data)
        except DatabaseError:
            continue
        added.append(data)
    return added