[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dupfind"
version = "0.1.0"
description = "Find duplicate and near-duplicate images with perceptual hashes and a SQLite cache"
requires-python = ">=3.10"
keywords = ["duplicate", "images", "dhash", "phash", "perceptual hash", "deduplication"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics",
    "Topic :: Utilities",
]
dependencies = [
    "filelock",
    "numpy",
    "pillow",
    "platformdirs",
    "scipy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
dupfind = "dupfind.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["dupfind"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
