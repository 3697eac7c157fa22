"""Geometry and text of result rows: cards, thumbnails, checkboxes and hit testing."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dupfind.database import ImageData
from dupfind.results import IMAGES_PER_ROW, THUMBNAIL_SIZE, ResultListItem, RowType

HEADER_HEIGHT = 40
IMAGE_ROW_HEIGHT = 220
CHECKBOX_HEIGHT = 20
CHECKBOX_LABEL = "Delete candidate"


def _trunc_div(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    return quotient if (a >= 0) == (b > 0) else -quotient


@dataclass(frozen=True)
class Rect:
    """Integer rectangle whose right and bottom edges are inclusive."""

    x: int
    y: int
    width: int
    height: int

    def right(self) -> int:
        return self.x + self.width - 1

    def bottom(self) -> int:
        return self.y + self.height - 1

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x <= self.right() and self.y <= y <= self.bottom()


def row_height(item: ResultListItem) -> int:
    return HEADER_HEIGHT if item.type is RowType.HEADER else IMAGE_ROW_HEIGHT


def card_rect(option_rect: Rect, index: int) -> Rect:
    width = _trunc_div(option_rect.width, IMAGES_PER_ROW)
    return Rect(option_rect.x + index * width, option_rect.y, width, option_rect.height)


def thumbnail_rect(card: Rect) -> Rect:
    return Rect(
        card.x + _trunc_div(card.width - THUMBNAIL_SIZE, 2),
        card.y + 5,
        THUMBNAIL_SIZE,
        THUMBNAIL_SIZE,
    )


def checkbox_rect(card: Rect) -> Rect:
    return Rect(card.x + 5, thumbnail_rect(card).bottom() + 5, card.width - 10, CHECKBOX_HEIGHT)


def info_rect(card: Rect) -> Rect:
    checkbox = checkbox_rect(card)
    return Rect(
        card.x + 5,
        checkbox.bottom() + 2,
        card.width - 10,
        card.bottom() - checkbox.bottom() - 2,
    )


def card_at(
    item: ResultListItem, option_rect: Rect, x: int, y: int
) -> Optional[tuple[int, ImageData]]:
    """Return the index and image of the card under the point, if any."""
    if item.type is not RowType.IMAGE_ROW:
        return None
    for index, image in enumerate(item.images):
        if card_rect(option_rect, index).contains(x, y):
            return index, image
    return None


def checkbox_at(item: ResultListItem, option_rect: Rect, x: int, y: int) -> Optional[ImageData]:
    """Return the image whose deletion checkbox lies under the point, if any."""
    hit = card_at(item, option_rect, x, y)
    if hit is None:
        return None
    index, image = hit
    if checkbox_rect(card_rect(option_rect, index)).contains(x, y):
        return image
    return None


def info_text(image: ImageData) -> str:
    return f"{_trunc_div(image.file_size, 1024)} KB\n{image.path}"


def tooltip_text(image: ImageData) -> str:
    return os.path.basename(image.path)