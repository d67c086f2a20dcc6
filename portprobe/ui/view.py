"""
Paging model for the result view.

The view shows three columns of `page_size` rows each. Everything here is a
pure function of the result collection and a ViewState, so the pager can be
driven and tested without a terminal.
"""
from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import List, Optional, Sequence, Tuple

from ..models import PortResult

COLUMNS = 3

Row = Tuple[Optional[PortResult], ...]


class ViewAction(Enum):
    """Navigation commands the pager understands."""
    LINE_DOWN = auto()
    LINE_UP = auto()
    PAGE_DOWN = auto()
    PAGE_UP = auto()
    TOGGLE_FILTER = auto()
    EXPORT = auto()
    EXIT = auto()


@dataclass(frozen=True)
class ViewState:
    current_line: int = 0
    show_all: bool = False
    page_size: int = 20

    def __post_init__(self):
        if self.page_size < 1:
            raise ValueError("page_size must be >= 1")
        if self.current_line < 0:
            raise ValueError("current_line must be >= 0")


def filter_results(results: Sequence[PortResult], show_all: bool) -> List[PortResult]:
    """Returns every result, or only those open on TCP or UDP."""
    if show_all:
        return list(results)
    return [r for r in results if r.is_open]


def visible_rows(results: Sequence[PortResult], state: ViewState) -> List[Row]:
    """Builds the rows on screen; a cell is None past the end of the list."""
    shown = filter_results(results, state.show_all)
    rows: List[Row] = []
    for i in range(state.page_size):
        cells = []
        for column in range(COLUMNS):
            index = state.current_line + i + column * state.page_size
            cells.append(shown[index] if index < len(shown) else None)
        rows.append(tuple(cells))
    return rows


def apply_action(results: Sequence[PortResult], state: ViewState, action: ViewAction) -> ViewState:
    """Returns the view state after a navigation command."""
    count = len(filter_results(results, state.show_all))
    line, size = state.current_line, state.page_size
    screen = COLUMNS * size

    if action is ViewAction.LINE_DOWN and line + size < count:
        return replace(state, current_line=line + 1)
    if action is ViewAction.LINE_UP and line > 0:
        return replace(state, current_line=line - 1)
    if action is ViewAction.PAGE_DOWN and line + screen < count:
        return replace(state, current_line=min(line + screen, count - screen))
    if action is ViewAction.PAGE_UP and line > 0:
        return replace(state, current_line=max(line - screen, 0))
    if action is ViewAction.TOGGLE_FILTER:
        return replace(state, show_all=not state.show_all, current_line=0)
    return state


def step(results: Sequence[PortResult], state: ViewState, action: ViewAction) -> Tuple[List[Row], ViewState]:
    """Applies an action and returns the rows to draw with the new state."""
    new_state = apply_action(results, state, action)
    return visible_rows(results, new_state), new_state
