# dupfind

Find duplicate and visually similar images across your photo folders.

Each image gets two 64-bit perceptual hashes:

- a difference hash (dHash);
- a DCT-based hash (pHash).

The hashes go into a SQLite cache together with the file's size and
modification time. A file is hashed again only when its size or modification
time changes.

Two images count as similar when the Hamming distance between their hashes is
at or below a threshold. By default one hash within the threshold is enough.
In strict mode both hashes must be within it. Similar images are merged into
groups, and the merging is transitive.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Command line

```
dupfind add <dir1> <dir2> ...     # remember directories and hash their images
dupfind remove <dir1> <dir2> ...  # forget directories and mark their images unsearched
dupfind rescan                    # hash new or changed files in all remembered directories
dupfind th <N>                    # set the similarity threshold (0-32, default 5)
dupfind strict on|off             # require both hashes to match; any word but "on" means off
dupfind search <image_file>       # print cached images similar to the given file
```

Directory names are compared without regard to case when they are added or
removed.

The files are stored in per-user directories:

- settings are in `settings.ini` in the configuration directory;
- the hash cache is `dupfind_cache.db` in the data directory.

`add` and `rescan` hash files in the foreground and then print how many images
were hashed. Every ten files the scan checks the lock file
`DupFind_GUI_Instance.lock` next to the database. If another process holds
that lock, the scan stops early.

`search` uses the stored threshold and strict setting. It prints nothing if the
file does not exist or cannot be read as an image.

The recognised extensions are `.jpg`, `.jpeg`, `.png`, `.bmp`, `.webp`,
`.tiff`, `.heic` and `.heif`, in any case. Hidden entries and symbolic links
are skipped.

## Library use

```python
from dupfind.database import DatabaseManager
from dupfind.scanner import scan_directories
from dupfind.similarity import find_duplicates

with DatabaseManager("cache.db") as db:
    scan_directories(db, ["/photos"])
    groups = find_duplicates(db.get_all_images(), threshold=5, strict=False)

for group in groups:
    for image in group.images:
        print(image.path)
    print()
```

The modules:

- `dupfind.hasher` has `calculate_dhash`, `calculate_phash`,
  `hamming_distance` and `load_image`. They work on Pillow images.
- `dupfind.database.DatabaseManager` stores `ImageData` records. It supports
  transactions, through `transaction()` or explicit begin, commit and rollback
  calls. It also removes entries whose files are gone (`cleanup_stale_entries`).
- `dupfind.settings.Settings` loads and saves the INI file. `config_dir`,
  `data_dir`, `settings_path` and `database_path` give the default locations.
- `dupfind.instance.InstanceFlag` is the lock file that makes scans stand aside.
- `dupfind.results.ResultListModel` turns groups into header rows and rows of
  up to four images. It keeps each image's deletion check. Within a group,
  every image except the largest file starts checked. The model loads
  thumbnails in background threads.
- `dupfind.filtering.ResultFilter` shows only the groups that have an image
  path containing a search text, compared without regard to case.
- `dupfind.layout` computes the geometry of the image cards, thumbnails,
  checkboxes and text areas. It also does the hit testing for those rows.
- `dupfind.session.DupFindSession` provides the review workflow:
  - scan the listed directories in a thread pool;
  - search for duplicate groups and re-search when the threshold or strict
    mode changes;
  - hide groups for the rest of the session;
  - build a `DeletionPlan` of checked files, with `needs_warning` set when
    every image of some group is checked;
  - move the planned files to the trash and regroup.

## Limitations

- There is no graphical window. `DupFindSession`, `ResultListModel`,
  `ResultFilter` and `dupfind.layout` hold the state and geometry that a front
  end would draw from, but none is included.
- Scans started from the command line run in the current process. They are not
  detached into the background.
- Moving files to the trash is supported on Linux, using the freedesktop trash
  directory, and on macOS, using `~/.Trash`. On Windows no file is moved unless
  you pass your own `trash` callable to `DupFindSession.delete`.