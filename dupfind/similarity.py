"""Grouping of images whose hashes lie within a Hamming distance threshold."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np

from dupfind.database import ImageData
from dupfind.hasher import hamming_distance

_UINT64_MASK = (1 << 64) - 1
_POPCOUNT = np.array([bin(i).count("1") for i in range(256)], dtype=np.int64)


@dataclass
class DuplicateGroup:
    """Images judged to be duplicates of one another."""

    images: list[ImageData] = field(default_factory=list)


class DisjointSet:
    """Union-find over the integers 0..n-1 with path compression."""

    def __init__(self, n: int):
        self._parent = list(range(n))

    def find(self, i: int) -> int:
        parent = self._parent
        root = i
        while parent[root] != root:
            root = parent[root]
        while parent[i] != root:
            next_i = parent[i]
            parent[i] = root
            i = next_i
        return root

    def union(self, i: int, j: int) -> bool:
        """Merge the sets holding i and j; return False if already joined."""
        root_i, root_j = self.find(i), self.find(j)
        if root_i == root_j:
            return False
        self._parent[root_i] = root_j
        return True


def is_similar(a: ImageData, b: ImageData, threshold: int = 5, strict: bool = False) -> bool:
    """Strict needs both hashes within threshold; otherwise either one suffices."""
    close_d = hamming_distance(a.dhash, b.dhash) <= threshold
    close_p = hamming_distance(a.phash, b.phash) <= threshold
    return (close_d and close_p) if strict else (close_d or close_p)


def _hash_array(values) -> np.ndarray:
    return np.array([v & _UINT64_MASK for v in values], dtype=np.uint64)


def _distances_from(hashes: np.ndarray, i: int) -> np.ndarray:
    diff = np.ascontiguousarray(hashes[i + 1:] ^ hashes[i])
    return _POPCOUNT[diff.view(np.uint8)].reshape(-1, 8).sum(axis=1)


def find_duplicates(
    images: Sequence[ImageData], threshold: int = 5, strict: bool = False
) -> list[DuplicateGroup]:
    """Cluster images transitively by similarity; return groups of two or more."""
    n = len(images)
    if n == 0:
        return []
    dhashes = _hash_array(img.dhash for img in images)
    phashes = _hash_array(img.phash for img in images)
    sets = DisjointSet(n)
    for i in range(n - 1):
        close_d = _distances_from(dhashes, i) <= threshold
        close_p = _distances_from(phashes, i) <= threshold
        similar = (close_d & close_p) if strict else (close_d | close_p)
        for offset in np.flatnonzero(similar):
            sets.union(i, i + 1 + int(offset))

    groups: dict[int, DuplicateGroup] = {}
    for i, img in enumerate(images):
        groups.setdefault(sets.find(i), DuplicateGroup()).images.append(img)
    return [groups[root] for root in sorted(groups) if len(groups[root].images) > 1]