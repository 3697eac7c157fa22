"""Command-line interface: manage scanned directories, settings, and search."""

from __future__ import annotations

import os
import re
import sys
from pathlib import Path
from typing import Optional

from PIL import Image

from dupfind.database import DatabaseError, DatabaseManager, ImageData
from dupfind.hasher import calculate_dhash, calculate_phash, load_image
from dupfind.instance import INSTANCE_LOCK_NAME, InstanceFlag
from dupfind.scanner import scan_directories
from dupfind.settings import Settings, database_path, settings_path
from dupfind.similarity import is_similar

MAX_THRESHOLD = 32

USAGE = (
    "Usage: dupfind add <dir1> <dir2> ...\n"
    "       dupfind remove <dir1> <dir2> ...\n"
    "       dupfind rescan\n"
    "       dupfind th <N>\n"
    "       dupfind search <image_file>\n"
    "       dupfind strict [on|off]\n"
)

_INT_RE = re.compile(r"[+-]?\d+")


def _config(config_path) -> Path:
    return Path(config_path) if config_path is not None else settings_path()


def _database(db_path) -> Path:
    return Path(db_path) if db_path is not None else database_path()


def _scan(dirs: list[str], db_path) -> list[ImageData]:
    if not dirs:
        print("No directories to scan.")
        return []
    db_file = _database(db_path)
    db_file.parent.mkdir(parents=True, exist_ok=True)
    print("Started scan.")
    gui = InstanceFlag(db_file.with_name(INSTANCE_LOCK_NAME))
    try:
        with DatabaseManager(db_file) as db:
            added = scan_directories(db, dirs, gui.is_running)
    except DatabaseError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return []
    print(f"Hashed {len(added)} images.")
    return added


def cmd_add(dirs, config_path=None, db_path=None) -> list[ImageData]:
    """Add directories to the settings and hash the images under them."""
    dirs = [os.fspath(d) for d in dirs]
    config = _config(config_path)
    settings = Settings.load(config)
    if settings.add_directories(dirs):
        settings.save(config)
    return _scan(dirs, db_path)


def cmd_remove(dirs, config_path=None, db_path=None) -> bool:
    """Drop directories from the settings and mark their images as not searched."""
    dirs = [os.fspath(d) for d in dirs]
    config = _config(config_path)
    settings = Settings.load(config)
    changed = settings.remove_directories(dirs)
    if changed:
        settings.save(config)
        print("Successfully removed directories from config.")
    try:
        with DatabaseManager(_database(db_path)) as db:
            for directory in dirs:
                db.set_directory_searched_status(directory, False)
    except DatabaseError:
        pass
    return changed


def cmd_rescan(config_path=None, db_path=None) -> list[ImageData]:
    """Hash new or changed images in every configured directory."""
    settings = Settings.load(_config(config_path))
    if not settings.directories:
        print("No directories configured in settings.ini to rescan.")
        return []
    return _scan(settings.directories, db_path)


def cmd_th(value: int, config_path=None) -> None:
    """Store the similarity threshold, which must lie between 0 and 32."""
    if not 0 <= value <= MAX_THRESHOLD:
        raise ValueError("N must be an integer between 0 and 32.")
    config = _config(config_path)
    settings = Settings.load(config)
    settings.threshold = value
    settings.save(config)
    print(f"Successfully updated threshold to {value}.")


def cmd_strict(strict: bool, config_path=None) -> None:
    config = _config(config_path)
    settings = Settings.load(config)
    settings.strict_mode = strict
    settings.save(config)
    print(f"Successfully updated strict mode to {'on' if strict else 'off'}.")


def cmd_search(image_file, config_path=None, db_path=None) -> list[str]:
    """Print and return the paths of database images similar to the given file."""
    path = os.fspath(image_file)
    if not os.path.exists(path):
        return []
    try:
        image = load_image(path)
    except (OSError, ValueError, Image.DecompressionBombError):
        return []
    probe = ImageData(path=path, dhash=calculate_dhash(image), phash=calculate_phash(image))
    settings = Settings.load(_config(config_path))
    db_file = _database(db_path)
    db_file.parent.mkdir(parents=True, exist_ok=True)
    try:
        with DatabaseManager(db_file) as db:
            images = db.get_all_images()
    except DatabaseError:
        return []
    matches = [
        img.path
        for img in images
        if is_similar(probe, img, settings.threshold, settings.strict_mode)
    ]
    for match in matches:
        print(match)
    return matches


def _fail(message: str) -> int:
    print(message, file=sys.stderr)
    return 1


def main(argv: Optional[list[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        sys.stderr.write(USAGE)
        return 1
    command, rest = args[0], args[1:]

    if command == "--worker-add":
        _scan(rest, None)
    elif command == "add":
        if not rest:
            return _fail("Error: 'add' Requires at least one directory.")
        cmd_add(rest)
    elif command == "remove":
        if not rest:
            return _fail("Error: 'remove' Requires at least one directory.")
        cmd_remove(rest)
    elif command == "rescan":
        cmd_rescan()
    elif command == "th":
        if len(rest) != 1:
            return _fail("Error: 'th' Requires exactly one integer.")
        if not _INT_RE.fullmatch(rest[0]) or not 0 <= int(rest[0]) <= MAX_THRESHOLD:
            return _fail("Error: N must be an integer between 0 and 32.")
        cmd_th(int(rest[0]))
    elif command == "search":
        if len(rest) != 1:
            return _fail("Error: 'search' Requires exactly one image file.")
        cmd_search(rest[0])
    elif command == "strict":
        if len(rest) != 1:
            return _fail("Error: 'strict' Requires exactly one argument.")
        cmd_strict(rest[0] == "on")
    else:
        return _fail(f"Unknown command: {command}")
    return 0


if __name__ == "__main__":
    sys.exit(main())