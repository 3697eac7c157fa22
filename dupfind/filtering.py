"""Filtering of result rows by a case-insensitive path search."""

from __future__ import annotations

from dupfind.results import ResultListModel, RowType


class ResultFilter:
    """Shows only groups with at least one image path containing the search text."""

    def __init__(self, model: ResultListModel):
        self.model = model
        self._search_text = ""
        self._visible_groups: set[int] = set()

    @property
    def search_text(self) -> str:
        return self._search_text

    def set_search_text(self, text: str) -> None:
        if text != self._search_text:
            self._search_text = text
            self._update_visible_groups()

    def _update_visible_groups(self) -> None:
        self._visible_groups = set()
        if not self._search_text:
            return
        needle = self._search_text.casefold()
        for row in range(len(self.model)):
            item = self.model.item(row)
            if item.type is not RowType.IMAGE_ROW or item.group_id in self._visible_groups:
                continue
            if any(needle in img.path.casefold() for img in item.images):
                self._visible_groups.add(item.group_id)

    def accepts_row(self, row: int) -> bool:
        if not self._search_text:
            return True
        return self.model.item(row).group_id in self._visible_groups

    def visible_rows(self) -> list[int]:
        return [row for row in range(len(self.model)) if self.accepts_row(row)]

    def visible_group_ids(self) -> set[int]:
        """Ids of the groups whose header row passes the filter."""
        return {
            self.model.item(row).group_id
            for row in self.visible_rows()
            if self.model.item(row).type is RowType.HEADER
        }