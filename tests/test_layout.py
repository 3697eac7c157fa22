from dupfind.database import ImageData
from dupfind.layout import (
    Rect,
    card_at,
    card_rect,
    checkbox_at,
    checkbox_rect,
    info_rect,
    info_text,
    row_height,
    thumbnail_rect,
    tooltip_text,
)
from dupfind.results import ResultListItem, RowType

OPTION = Rect(0, 0, 800, 220)


def image_row(count):
    return ResultListItem(
        RowType.IMAGE_ROW, 0, images=[ImageData(f"/p/img{k}.jpg", file_size=k) for k in range(count)]
    )


def test_rect_edges_are_inclusive():
    r = Rect(10, 20, 5, 4)
    assert r.right() == 14
    assert r.bottom() == 23
    assert r.contains(14, 23)
    assert not r.contains(15, 23)
    assert not r.contains(9, 20)


def test_row_heights():
    assert row_height(ResultListItem(RowType.HEADER, 0)) == 40
    assert row_height(image_row(1)) == 220


def test_cards_split_row_in_quarters():
    cards = [card_rect(OPTION, k) for k in range(4)]
    assert {c.width for c in cards} == {OPTION.width // 4}
    assert all(a.right() + 1 == b.x for a, b in zip(cards, cards[1:]))


def test_thumbnail_is_centred_in_card():
    card = card_rect(OPTION, 1)
    thumb = thumbnail_rect(card)
    assert thumb.width == thumb.height == 150
    assert thumb.x - card.x == card.right() - thumb.right()
    assert thumb.y == card.y + 5


def test_checkbox_and_info_stack_below_thumbnail():
    card = card_rect(OPTION, 2)
    cb = checkbox_rect(card)
    info = info_rect(card)
    assert cb.y == thumbnail_rect(card).bottom() + 5
    assert info.y == cb.bottom() + 2
    assert info.bottom() == card.bottom() - 1


def test_card_at_finds_image_and_ignores_headers():
    row = image_row(3)
    x = card_rect(OPTION, 2).x + 1
    index, image = card_at(row, OPTION, x, 10)
    assert index == 2
    assert image.path == "/p/img2.jpg"
    assert card_at(row, OPTION, card_rect(OPTION, 3).x + 1, 10) is None
    assert card_at(ResultListItem(RowType.HEADER, 0), OPTION, 1, 1) is None


def test_checkbox_at_only_inside_checkbox():
    row = image_row(2)
    cb = checkbox_rect(card_rect(OPTION, 1))
    hit = checkbox_at(row, OPTION, cb.x + 1, cb.y + 1)
    assert hit.path == "/p/img1.jpg"
    assert checkbox_at(row, OPTION, cb.x + 1, 10) is None


def test_info_and_tooltip_text():
    image = ImageData("/photos/trip/beach.jpg", file_size=2048)
    assert info_text(image) == "2 KB\n/photos/trip/beach.jpg"
    assert tooltip_text(image) == "beach.jpg"