"""In-memory page runtime: HTML tree, listeners, layout and frame scheduling."""

from __future__ import annotations

import logging
import re
from typing import Callable, Protocol

from bs4 import BeautifulSoup, Tag

LOGGER = logging.getLogger(__name__)

BREAKPOINTS = {"sm": 640, "md": 768, "lg": 1024, "xl": 1280, "2xl": 1536}

_GRID_COLS = re.compile(r"grid-cols-(\d+|none)")
_TEMPLATE_STYLE = re.compile(r"grid-template-columns\s*:\s*([^;]+)")


def classes_of(tag: Tag) -> list[str]:
    value = tag.get("class") or []
    if isinstance(value, str):
        value = value.split()
    return list(value)


def has_class(tag: Tag, name: str) -> bool:
    return name in classes_of(tag)


def add_class(tag: Tag, name: str) -> None:
    classes = classes_of(tag)
    if name not in classes:
        classes.append(name)
    tag["class"] = classes


def remove_class(tag: Tag, name: str) -> None:
    classes = [value for value in classes_of(tag) if value != name]
    if classes:
        tag["class"] = classes
    elif "class" in tag.attrs:
        del tag["class"]


def toggle_class(tag: Tag, name: str, force: bool) -> None:
    if force:
        add_class(tag, name)
    else:
        remove_class(tag, name)


class Layout(Protocol):
    """Answers what the browser's computed ``grid-template-columns`` would be."""

    def grid_template_columns(self, grid: Tag) -> str: ...


class TailwindLayout:
    """Resolves responsive ``grid-cols-N`` utilities for a viewport width.

    An inline ``grid-template-columns`` style wins over utility classes.
    Tracks are reported in pixels, the way a computed style would be.
    """

    def __init__(self, width: int = 1280) -> None:
        self.width = width

    def grid_template_columns(self, grid: Tag) -> str:
        style = grid.get("style") or ""
        if isinstance(style, str):
            match = _TEMPLATE_STYLE.search(style)
            if match:
                return match.group(1).strip()

        columns: str | None = None
        best = -1
        for name in classes_of(grid):
            prefix, _, utility = name.rpartition(":")
            match = _GRID_COLS.fullmatch(utility)
            if not match:
                continue
            min_width = BREAKPOINTS.get(prefix) if prefix else 0
            if min_width is None or min_width > self.width or min_width < best:
                continue
            best = min_width
            columns = match.group(1)

        if columns is None or columns == "none":
            return "none"
        count = int(columns)
        if count <= 0:
            return "none"
        track = self.width / count
        return " ".join(f"{track:.0f}px" for _ in range(count))


class FrameScheduler:
    """Collects animation-frame callbacks until :meth:`run_frame` is called."""

    def __init__(self) -> None:
        self._next_handle = 1
        self._pending: dict[int, Callable[[], None]] = {}

    def request(self, callback: Callable[[], None]) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._pending[handle] = callback
        return handle

    def cancel(self, handle: int) -> None:
        self._pending.pop(handle, None)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def run_frame(self) -> int:
        """Run every callback queued before this frame; returns how many ran."""

        callbacks = list(self._pending.values())
        self._pending.clear()
        for callback in callbacks:
            callback()
        return len(callbacks)


class Page:
    """A parsed HTML document plus the browser facilities the renderers need."""

    def __init__(
        self,
        html: str,
        *,
        layout: Layout | None = None,
        frames: FrameScheduler | None = None,
    ) -> None:
        self.soup = BeautifulSoup(html, "html.parser")
        self.layout: Layout = layout or TailwindLayout()
        self.frames = frames or FrameScheduler()
        self._click_listeners: list[tuple[Tag, Callable[[], None]]] = []
        self._resize_listeners: list[Callable[[], None]] = []

    def get_element_by_id(self, element_id: str) -> Tag | None:
        found = self.soup.find(id=element_id)
        return found if isinstance(found, Tag) else None

    def select(self, selector: str) -> list[Tag]:
        return list(self.soup.select(selector))

    @staticmethod
    def element_children(tag: Tag) -> list[Tag]:
        return [child for child in tag.children if isinstance(child, Tag)]

    def fragment(self, html: str) -> list[Tag]:
        """Parse ``html`` and return its top-level elements, detached."""

        parsed = BeautifulSoup(html, "html.parser")
        return [node.extract() for node in list(parsed.contents) if isinstance(node, Tag)]

    def set_inner_html(self, tag: Tag, html: str) -> None:
        tag.clear()
        for node in self.fragment(html):
            tag.append(node)

    def append_html(self, tag: Tag, html: str) -> None:
        for node in self.fragment(html):
            tag.append(node)

    def set_text(self, element_id: str, text: str) -> None:
        tag = self.get_element_by_id(element_id)
        if tag is not None:
            tag.string = text

    def add_click_listener(self, tag: Tag, callback: Callable[[], None]) -> None:
        self._click_listeners.append((tag, callback))

    def click(self, tag: Tag) -> None:
        for target, callback in list(self._click_listeners):
            if target is tag:
                callback()

    def add_resize_listener(self, callback: Callable[[], None]) -> None:
        self._resize_listeners.append(callback)

    def resize(self, width: int | None = None) -> None:
        """Change the viewport width (when the layout has one) and fire listeners."""

        if width is not None and hasattr(self.layout, "width"):
            self.layout.width = width  # type: ignore[attr-defined]
        for callback in list(self._resize_listeners):
            callback()

    def click_listener_count(self, tag: Tag) -> int:
        return sum(1 for target, _ in self._click_listeners if target is tag)

    @property
    def resize_listener_count(self) -> int:
        return len(self._resize_listeners)

    def request_animation_frame(self, callback: Callable[[], None]) -> int:
        return self.frames.request(callback)

    def cancel_animation_frame(self, handle: int) -> None:
        self.frames.cancel(handle)

    def to_html(self) -> str:
        return str(self.soup)


__all__ = [
    "FrameScheduler",
    "Layout",
    "Page",
    "TailwindLayout",
    "add_class",
    "classes_of",
    "has_class",
    "remove_class",
    "toggle_class",
]
