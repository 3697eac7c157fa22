"""Application state behind the graphical front end: directories, scanning, search and deletion."""

from __future__ import annotations

import os
import shutil
import sys
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional
from urllib.parse import quote

from dupfind.database import DatabaseManager, ImageData
from dupfind.filtering import ResultFilter
from dupfind.results import ResultListModel
from dupfind.scanner import hash_file, iter_image_files
from dupfind.settings import Settings
from dupfind.similarity import DuplicateGroup, find_duplicates

MAX_THRESHOLD = 32

Trash = Callable[[str], bool]


@dataclass
class DeletionPlan:
    """Checked paths in the visible groups, and the groups checked in full."""

    paths: list[str] = field(default_factory=list)
    fully_checked_groups: list[int] = field(default_factory=list)

    @property
    def needs_warning(self) -> bool:
        """True when deleting would remove every image of some group."""
        return bool(self.fully_checked_groups)

    def __len__(self) -> int:
        return len(self.paths)


def _unique_name(directory: Path, name: str) -> str:
    candidate = name
    stem, suffix = os.path.splitext(name)
    counter = 1
    while (directory / candidate).exists() or (directory.parent / "info" / f"{candidate}.trashinfo").exists():
        candidate = f"{stem}.{counter}{suffix}"
        counter += 1
    return candidate


def _move_to_trash(path: str) -> bool:
    """Move a file to the user's trash; return whether it was moved."""
    source = Path(path).absolute()
    if not source.exists():
        return False
    if sys.platform == "darwin":
        trash = Path.home() / ".Trash"
        trash.mkdir(parents=True, exist_ok=True)
        shutil.move(str(source), str(trash / _unique_name(trash, source.name)))
        return True
    if os.name == "nt":
        return False
    base = Path(os.environ.get("XDG_DATA_HOME") or Path.home() / ".local" / "share") / "Trash"
    files, info = base / "files", base / "info"
    files.mkdir(parents=True, exist_ok=True)
    info.mkdir(parents=True, exist_ok=True)
    name = _unique_name(files, source.name)
    info_file = info / f"{name}.trashinfo"
    info_file.write_text(
        "[Trash Info]\n"
        f"Path={quote(str(source))}\n"
        f"DeletionDate={datetime.now().strftime('%Y-%m-%dT%H:%M:%S')}\n",
        encoding="utf-8",
    )
    try:
        shutil.move(str(source), str(files / name))
    except OSError:
        info_file.unlink(missing_ok=True)
        raise
    return True


class DupFindSession:
    """Directories to search, the current duplicate groups and the result rows.

    When ``settings_file`` is set, directory and threshold changes are saved
    to it straight away.
    """

    def __init__(self, db: DatabaseManager, settings: Optional[Settings] = None):
        settings = settings if settings is not None else Settings()
        self.db = db
        self.directories: list[str] = list(settings.directories)
        self.threshold: int = settings.threshold
        self.strict_mode: bool = settings.strict_mode
        self.settings_file: Optional[Path] = None
        self.model = ResultListModel()
        self.filter = ResultFilter(self.model)
        self.current_groups: list[DuplicateGroup] = []
        self.ignored_paths: set[str] = set()
        self._last_scanned: list[ImageData] = []

    @property
    def last_scanned_images(self) -> list[ImageData]:
        return list(self._last_scanned)

    def _autosave(self) -> None:
        if self.settings_file is not None:
            self.save_settings(self.settings_file)

    def add_directory(self, directory) -> None:
        directory = os.fspath(directory)
        if directory:
            self.directories.append(directory)
            self._autosave()

    def remove_directory(self, directory) -> bool:
        """Stop searching the directory and mark its images as not searched."""
        directory = os.fspath(directory)
        if directory not in self.directories:
            return False
        self.db.set_directory_searched_status(directory, False)
        self.directories.remove(directory)
        self._last_scanned = self.filtered_images()
        self._autosave()
        return True

    def _in_directories(self, path: str) -> bool:
        for directory in self.directories:
            prefix = directory if not directory or directory.endswith(("/", "\\")) else directory + "/"
            if path.startswith(prefix) or path == directory:
                return True
        return False

    def filtered_images(self) -> list[ImageData]:
        """Database images under the listed directories, minus ignored paths."""
        if not self.directories:
            return []
        return [
            img
            for img in self.db.get_all_images()
            if self._in_directories(img.path) and img.path not in self.ignored_paths
        ]

    def scan(self) -> list[DuplicateGroup]:
        """Hash new or changed images, drop stale entries, then search again."""
        if not self.directories:
            raise ValueError("Please add at least one directory to scan.")
        cache = {img.path: img for img in self.db.get_all_images()}
        files = list(iter_image_files(self.directories))
        with ThreadPoolExecutor() as pool:
            hashed = [data for data in pool.map(lambda p: hash_file(p, cache), files) if data is not None]
        self.db.cleanup_stale_entries()
        with self.db.transaction():
            for data in hashed:
                self.db.add_image(data)
        self._last_scanned = self.filtered_images()
        return self.search()

    def search(self) -> list[DuplicateGroup]:
        """Group the cached images and show the groups; mark the directories searched."""
        if not self._last_scanned:
            self._last_scanned = self.filtered_images()
        if not self._last_scanned:
            return []
        groups = find_duplicates(self._last_scanned, self.threshold, self.strict_mode)
        self.current_groups = groups
        self.model.set_groups(groups)
        self.filter.set_search_text("")
        for directory in self.directories:
            self.db.set_directory_searched_status(directory, True)
        self._last_scanned = self.filtered_images()
        return groups

    def _reset_filter(self) -> None:
        self.filter.set_search_text("")

    def set_threshold(self, value: int) -> list[DuplicateGroup]:
        """Change the Hamming distance threshold (0 to 32) and search again."""
        if not 0 <= value <= MAX_THRESHOLD:
            raise ValueError(f"threshold must be between 0 and {MAX_THRESHOLD}")
        self.threshold = value
        self._reset_filter()
        self._autosave()
        return self.search()

    def set_strict(self, strict: bool) -> list[DuplicateGroup]:
        """Require both hashes to match (or either) and search again."""
        self.strict_mode = bool(strict)
        self._reset_filter()
        return self.search()

    def remove_group(self, group_id: int) -> bool:
        """Hide a group for the rest of the session, keeping other checks."""
        if not 0 <= group_id < len(self.current_groups):
            return False
        for img in self.current_groups[group_id].images:
            self.ignored_paths.add(img.path)
        self._last_scanned = self.filtered_images()
        del self.current_groups[group_id]
        self.model.set_groups(self.current_groups, preserve_state=True)
        self.filter.set_search_text(self.filter.search_text)
        return True

    def clear_results(self) -> None:
        self.model.clear()

    def plan_deletion(self, visible_group_ids: Optional[Iterable[int]] = None) -> DeletionPlan:
        """Collect checked paths in the visible groups (by default those passing the filter)."""
        visible = set(visible_group_ids) if visible_group_ids is not None else self.filter.visible_group_ids()
        checks = self.model.check_states()
        plan = DeletionPlan()
        for group_id, group in enumerate(self.current_groups):
            if group_id not in visible:
                continue
            checked = [img.path for img in group.images if checks.get(img.path, False)]
            plan.paths.extend(checked)
            if group.images and len(checked) == len(group.images):
                plan.fully_checked_groups.append(group_id)
        return plan

    def delete(self, plan: DeletionPlan, trash: Optional[Trash] = None) -> list[str]:
        """Move the planned files to the trash and regroup; return paths that failed."""
        if not plan.paths:
            return []
        mover = trash if trash is not None else _move_to_trash
        failures: list[str] = []
        for path in plan.paths:
            try:
                moved = mover(path)
            except OSError:
                moved = False
            if moved:
                self.db.remove_image(path)
            else:
                failures.append(path)
        images = self.filtered_images()
        self.current_groups = find_duplicates(images, self.threshold, self.strict_mode)
        self.model.set_groups(self.current_groups)
        self.filter.set_search_text("")
        return failures

    def save_settings(self, path=None) -> None:
        """Write threshold, strict mode and directories to the settings file."""
        settings = Settings(
            threshold=self.threshold,
            strict_mode=self.strict_mode,
            directories=list(self.directories),
        )
        target = path if path is not None else self.settings_file
        settings.save(target)