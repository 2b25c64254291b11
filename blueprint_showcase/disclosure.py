"""Collapse product grids to a number of rows with a More/Show less toggle."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from bs4 import Tag

from .page import Page, add_class, remove_class
from .templates import render_template

LOGGER = logging.getLogger(__name__)

_REPEAT = re.compile(r"repeat\((\d+),")

EXPANDED_ATTR = "data-more-expanded"
CLICK_BOUND_ATTR = "data-more-bound"
RESIZE_BOUND_ATTR = "data-more-resize-bound"


def column_count(template: str | None) -> int:
    """Number of tracks in a computed ``grid-template-columns`` value.

    >>> column_count("repeat(4, 1fr)")
    4
    >>> column_count("320px 320px 320px")
    3
    """

    template = (template or "").strip()
    if not template or template == "none":
        return 1
    match = _REPEAT.search(template)
    if match:
        count = int(match.group(1))
        return count if count > 0 else 1
    return max(1, len(template.split()))


def toggle_id(grid_id: str) -> str:
    return f"{grid_id}-more-toggle"


@dataclass(slots=True)
class _Clamp:
    page: Page
    grid_id: str
    rows: int
    more_label: str
    less_label: str

    def visible_slots(self, grid: Tag) -> int:
        columns = column_count(self.page.layout.grid_template_columns(grid))
        return max(1, columns * self.rows)

    def __call__(self) -> None:
        grid = self.page.get_element_by_id(self.grid_id)
        wrapper = self.page.get_element_by_id(toggle_id(self.grid_id))
        if grid is None or wrapper is None:
            return
        button = wrapper.find("button")
        if button is None:
            return

        items = self.page.element_children(grid)
        visible = self.visible_slots(grid)

        if len(items) <= visible:
            for item in items:
                remove_class(item, "hidden")
            add_class(wrapper, "hidden")
            return

        remove_class(wrapper, "hidden")

        if grid.get(EXPANDED_ATTR) == "1":
            for item in items:
                remove_class(item, "hidden")
            button.string = self.less_label
            button["aria-expanded"] = "true"
            return

        for position, item in enumerate(items):
            if position < visible:
                remove_class(item, "hidden")
            else:
                add_class(item, "hidden")
        button.string = self.more_label
        button["aria-expanded"] = "false"


class _Toggle:
    def __init__(self, clamp: _Clamp) -> None:
        self._clamp = clamp

    def __call__(self) -> None:
        grid = self._clamp.page.get_element_by_id(self._clamp.grid_id)
        if grid is None:
            return
        grid[EXPANDED_ATTR] = "0" if grid.get(EXPANDED_ATTR) == "1" else "1"
        self._clamp()


class _ResizeHandler:
    """Re-applies the clamp at most once per frame, and only while collapsed."""

    def __init__(self, clamp: _Clamp) -> None:
        self._clamp = clamp
        self._frame = 0

    def __call__(self) -> None:
        page = self._clamp.page
        grid = page.get_element_by_id(self._clamp.grid_id)
        if grid is None or grid.get(EXPANDED_ATTR) == "1":
            return
        if self._frame:
            page.cancel_animation_frame(self._frame)
        self._frame = page.request_animation_frame(self._run)

    def _run(self) -> None:
        self._frame = 0
        self._clamp()


def ensure_more_toggle(
    page: Page,
    grid: Tag | None,
    *,
    rows: int = 1,
    more_label: str = "More",
    less_label: str = "Show less",
) -> None:
    """Show ``rows`` rows of ``grid`` and add a toggle for the remainder.

    Safe to call after every render: the click and resize listeners are bound
    once per grid, and an expanded grid stays expanded.
    """

    if grid is None or not grid.get("id"):
        return

    grid_id = str(grid["id"])
    clamp = _Clamp(page, grid_id, max(1, int(rows)), more_label, less_label)
    items = page.element_children(grid)
    wrapper = page.get_element_by_id(toggle_id(grid_id))

    if len(items) <= clamp.visible_slots(grid):
        for item in items:
            remove_class(item, "hidden")
        if wrapper is not None:
            add_class(wrapper, "hidden")
        return

    if wrapper is None:
        html = render_template("more_toggle.html", wrapper_id=toggle_id(grid_id), grid_id=grid_id, label=more_label)
        wrapper = page.fragment(html)[0]
        grid.insert_after(wrapper)
        LOGGER.debug("Inserted toggle after #%s", grid_id)

    button = wrapper.find("button")
    if button is None:
        return

    if EXPANDED_ATTR not in grid.attrs:
        grid[EXPANDED_ATTR] = "0"

    if not button.get(CLICK_BOUND_ATTR):
        button[CLICK_BOUND_ATTR] = "1"
        page.add_click_listener(button, _Toggle(clamp))

    if not grid.get(RESIZE_BOUND_ATTR):
        grid[RESIZE_BOUND_ATTR] = "1"
        page.add_resize_listener(_ResizeHandler(clamp))

    clamp()


__all__ = ["column_count", "ensure_more_toggle", "toggle_id"]
