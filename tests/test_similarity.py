from dupfind.database import ImageData
from dupfind.similarity import DisjointSet, DuplicateGroup, find_duplicates, is_similar

MASK = (1 << 64) - 1


def img(path, dhash=0, phash=0):
    return ImageData(path=path, dhash=dhash, phash=phash)


def paths(groups):
    return [[i.path for i in g.images] for g in groups]


def test_disjoint_set_union_and_find():
    sets = DisjointSet(5)
    assert sets.union(0, 1) is True
    assert sets.union(1, 2) is True
    assert sets.union(0, 2) is False
    assert sets.find(0) == sets.find(2)
    assert sets.find(3) == 3
    assert sets.find(3) != sets.find(0)


def test_disjoint_set_long_chain():
    sets = DisjointSet(1000)
    for i in range(999):
        sets.union(i, i + 1)
    roots = {sets.find(i) for i in range(1000)}
    assert len(roots) == 1


def test_is_similar_modes():
    a = img("a", dhash=0, phash=0)
    b = img("b", dhash=0b1, phash=MASK)
    assert is_similar(a, b, 5, False) is True
    assert is_similar(a, b, 5, True) is False


def test_empty_input():
    assert find_duplicates([]) == []


def test_identical_hashes_group():
    groups = find_duplicates([img("a", 5, 9), img("b", 5, 9)])
    assert groups == [DuplicateGroup([img("a", 5, 9), img("b", 5, 9)])]


def test_non_strict_needs_one_hash():
    images = [img("a", 0, 0), img("b", 0b1, MASK)]
    assert paths(find_duplicates(images, 5, False)) == [["a", "b"]]
    assert find_duplicates(images, 5, True) == []


def test_threshold_is_inclusive():
    images = [img("a", 0, 0), img("b", 0b11111, 0b11111)]
    assert paths(find_duplicates(images, 5)) == [["a", "b"]]
    assert find_duplicates(images, 4) == []


def test_transitive_chaining_and_singletons():
    a = img("a", 0, 0)
    b = img("b", 0b111, MASK)
    c = img("c", 0b111111, 0xFFFFFFFF)
    d = img("d", MASK, 0x5555555555555555)
    groups = find_duplicates([a, b, c, d], 5)
    assert paths(groups) == [["a", "b", "c"]]


def test_separate_groups_preserve_image_order():
    images = [
        img("a1", 0, 0),
        img("b1", MASK, MASK),
        img("a2", 0b1, 0),
        img("b2", MASK ^ 0b1, MASK),
        img("lonely", 0xFFFFFFFF, 0xFFFFFFFF),
    ]
    groups = find_duplicates(images, 3)
    assert sorted(paths(groups)) == [["a1", "a2"], ["b1", "b2"]]
    assert sum(len(g.images) for g in groups) == 4


def test_every_group_member_has_a_similar_partner():
    images = [img(f"p{i}", dhash=(1 << i) - 1, phash=MASK >> i) for i in range(20)]
    for group in find_duplicates(images, 2):
        assert len(group.images) > 1
        for member in group.images:
            assert any(is_similar(member, other, 2) for other in group.images if other is not member)