"""Find duplicate and near-duplicate images with perceptual hashes, a SQLite cache and a command-line tool."""

__version__ = "0.1.0"
__all__ = [
    "cli",
    "database",
    "filtering",
    "hasher",
    "instance",
    "layout",
    "results",
    "scanner",
    "session",
    "settings",
    "similarity",
]