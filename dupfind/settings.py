"""User settings stored in an INI file, and the application's standard paths."""

from __future__ import annotations

import configparser
import csv
import os
import re
from dataclasses import dataclass, field
from pathlib import Path

import platformdirs

APP_NAME = "DupFind"
SETTINGS_FILE = "settings.ini"
DATABASE_FILE = "dupfind_cache.db"
DEFAULT_THRESHOLD = 5

_SECTION = "General"
_INVALID_LIST = "@Invalid()"
_INT_RE = re.compile(r"\s*[+-]?\d+\s*")


def config_dir() -> Path:
    return Path(platformdirs.user_config_dir(APP_NAME, appauthor=False))


def data_dir() -> Path:
    return Path(platformdirs.user_data_dir(APP_NAME, appauthor=False))


def settings_path() -> Path:
    return config_dir() / SETTINGS_FILE


def database_path() -> Path:
    return data_dir() / DATABASE_FILE


def _new_parser() -> configparser.ConfigParser:
    parser = configparser.ConfigParser(interpolation=None)
    parser.optionxform = str
    return parser


def _read_parser(path: Path) -> configparser.ConfigParser:
    parser = _new_parser()
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return parser
    try:
        parser.read_string(text)
    except configparser.MissingSectionHeaderError:
        parser = _new_parser()
        parser.read_string(f"[{_SECTION}]\n{text}")
    return parser


def _to_int(text: str, default: int) -> int:
    return int(text) if _INT_RE.fullmatch(text) else default


def _to_bool(text: str) -> bool:
    return text.strip().lower() not in ("", "0", "false")


def _parse_list(text: str) -> list[str]:
    text = text.strip()
    if not text or text == _INVALID_LIST:
        return []
    return next(csv.reader([text], skipinitialspace=True))


def _quote(item: str) -> str:
    if any(ch in item for ch in ',"') or item != item.strip():
        return '"' + item.replace('"', '""') + '"'
    return item


def _format_list(items: list[str]) -> str:
    return ", ".join(_quote(item) for item in items)


@dataclass
class Settings:
    """Similarity threshold, strict mode and the directories to scan."""

    threshold: int = DEFAULT_THRESHOLD
    strict_mode: bool = False
    directories: list[str] = field(default_factory=list)

    @classmethod
    def load(cls, path=None) -> "Settings":
        """Read settings from the INI file; missing values take their defaults."""
        path = Path(path) if path is not None else settings_path()
        parser = _read_parser(path)
        if not parser.has_section(_SECTION):
            return cls()
        section = parser[_SECTION]
        return cls(
            threshold=_to_int(section.get("threshold", ""), DEFAULT_THRESHOLD),
            strict_mode=_to_bool(section.get("strict_mode", "false")),
            directories=_parse_list(section.get("directories", "")),
        )

    def save(self, path=None) -> None:
        """Write the settings, keeping any other entries already in the file."""
        path = Path(path) if path is not None else settings_path()
        parser = _read_parser(path)
        if not parser.has_section(_SECTION):
            parser.add_section(_SECTION)
        section = parser[_SECTION]
        section["threshold"] = str(self.threshold)
        section["strict_mode"] = "true" if self.strict_mode else "false"
        if self.directories:
            section["directories"] = _format_list(self.directories)
        else:
            parser.remove_option(_SECTION, "directories")
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(os.fspath(path), "w", encoding="utf-8") as handle:
            parser.write(handle, space_around_delimiters=False)

    def add_directories(self, dirs) -> bool:
        """Append directories not already listed (ignoring case); return whether any were."""
        changed = False
        for directory in dirs:
            if not any(d.casefold() == directory.casefold() for d in self.directories):
                self.directories.append(directory)
                changed = True
        return changed

    def remove_directories(self, dirs) -> bool:
        """Remove listed directories (ignoring case); return whether any were."""
        changed = False
        for directory in dirs:
            for existing in self.directories:
                if existing.casefold() == directory.casefold():
                    self.directories.remove(existing)
                    changed = True
                    break
        return changed