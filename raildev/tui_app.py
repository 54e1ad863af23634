"""State and key handling of the develop dashboard."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from raildev.code_runner import Color, LogLine
from raildev.log_store import LogStore, StoredLogLine

_PAGE_SIZE = 20
_DEFAULT_VISIBLE_HEIGHT = 20

SCROLL_DOWN = "scroll_down"
SCROLL_UP = "scroll_up"


class TabKind(Enum):
    LOCAL = "local"
    IMAGE = "image"
    SERVICE = "service"


@dataclass(frozen=True)
class Tab:
    kind: TabKind
    index: int = 0


@dataclass
class ServiceInfo:
    name: str
    is_docker: bool
    color: Color
    var_count: int
    private_url: Optional[str] = None
    public_url: Optional[str] = None
    command: Optional[str] = None
    image: Optional[str] = None


def _saturating_sub(a: int, b: int) -> int:
    return max(0, a - b)


class TuiApp:
    """Tabs, scrolling and follow mode over the collected logs."""

    def __init__(self, services: Sequence[ServiceInfo]) -> None:
        self.services = list(services)
        self.current_tab = Tab(TabKind.LOCAL)
        self.scroll_offset = 0
        self.follow_mode = True
        self.log_store = LogStore(len(self.services))
        self._service_name_to_idx = {s.name: i for i, s in enumerate(self.services)}
        self._visible_height = _DEFAULT_VISIBLE_HEIGHT

    def set_visible_height(self, height: int) -> None:
        self._visible_height = height

    def push_log(self, log: LogLine, is_docker: bool) -> None:
        """Store a log line under its service; unknown names go to the first."""
        idx = self._service_name_to_idx.get(log.service_name, 0)
        self.log_store.push(idx, StoredLogLine(log.message, log.color), is_docker)
        if self.follow_mode:
            self._scroll_to_bottom()

    def handle_key(self, key: str, ctrl: bool = False, shift: bool = False) -> bool:
        """Handle a key press; return True when the dashboard should quit.

        Keys are single characters or one of "esc", "tab", "backtab", "up",
        "down", "pageup" and "pagedown".
        """
        if key in ("q", "esc"):
            return True
        if key == "c" and ctrl:
            return True
        if len(key) == 1 and key in "123456789":
            self._select_tab(int(key) - 1)
        elif key == "tab":
            if shift:
                self._prev_tab()
            else:
                self._next_tab()
        elif key == "backtab":
            self._prev_tab()
        elif key in ("j", "down"):
            self._exit_follow_mode()
            self._scroll_down(1)
        elif key in ("k", "up"):
            self._exit_follow_mode()
            self._scroll_up(1)
        elif key == "pagedown":
            self._exit_follow_mode()
            self._scroll_down(_PAGE_SIZE)
        elif key == "pageup":
            self._exit_follow_mode()
            self._scroll_up(_PAGE_SIZE)
        elif key == "g":
            self.scroll_offset = 0
            self.follow_mode = False
        elif key == "G":
            self._scroll_to_bottom()
            self.follow_mode = True
        elif key == "f":
            self.follow_mode = not self.follow_mode
            if self.follow_mode:
                self._scroll_to_bottom()
        return False

    def handle_mouse(self, kind: str) -> None:
        """Handle a mouse wheel event: "scroll_down" or "scroll_up"."""
        if kind == SCROLL_DOWN:
            self._exit_follow_mode()
            self._scroll_down(1)
        elif kind == SCROLL_UP:
            self._exit_follow_mode()
            self._scroll_up(1)

    def tab_index(self) -> int:
        if self.current_tab.kind is TabKind.LOCAL:
            return 0
        if self.current_tab.kind is TabKind.IMAGE:
            return 1
        return 2 + self.current_tab.index

    def current_log_count(self) -> int:
        if self.current_tab.kind is TabKind.LOCAL:
            return self.log_store.local_len()
        if self.current_tab.kind is TabKind.IMAGE:
            return self.log_store.image_len()
        return self.log_store.service_len(self.current_tab.index)

    def _exit_follow_mode(self) -> None:
        if self.follow_mode:
            self.scroll_offset = _saturating_sub(
                self.current_log_count(), self._visible_height
            )
            self.follow_mode = False

    def _select_tab(self, idx: int) -> None:
        if idx == 0:
            tab = Tab(TabKind.LOCAL)
        elif idx == 1:
            tab = Tab(TabKind.IMAGE)
        else:
            service_idx = idx - 2
            if service_idx >= len(self.services):
                return
            tab = Tab(TabKind.SERVICE, service_idx)
        self.current_tab = tab
        self.scroll_offset = 0
        if self.follow_mode:
            self._scroll_to_bottom()

    def _next_tab(self) -> None:
        total = 2 + len(self.services)
        self._select_tab((self.tab_index() + 1) % total)

    def _prev_tab(self) -> None:
        total = 2 + len(self.services)
        current = self.tab_index()
        self._select_tab(total - 1 if current == 0 else current - 1)

    def _scroll_down(self, amount: int) -> None:
        max_scroll = _saturating_sub(self.current_log_count(), 1)
        self.scroll_offset = min(self.scroll_offset + amount, max_scroll)

    def _scroll_up(self, amount: int) -> None:
        self.scroll_offset = _saturating_sub(self.scroll_offset, amount)

    def _scroll_to_bottom(self) -> None:
        self.scroll_offset = _saturating_sub(self.current_log_count(), 1)