from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, replace
from typing import TypeVar

T = TypeVar("T")

ELLIPSIS = -1
NEIGHBOUR_PAGES = 2


@dataclass(frozen=True)
class PaginationState:
    current_page: int = 1
    page_size: int = 25
    total_items: int = 0

    def __post_init__(self) -> None:
        if self.page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {self.page_size}")


def total_pages(state: PaginationState) -> int:
    return max(1, math.ceil(state.total_items / state.page_size))


def clamp_page(page: int, state: PaginationState) -> int:
    return min(max(1, page), total_pages(state))


def page_bounds(state: PaginationState) -> tuple[int, int]:
    start = (state.current_page - 1) * state.page_size
    return start, start + state.page_size


def apply_pagination(records: Sequence[T], state: PaginationState) -> list[T]:
    start, end = page_bounds(state)
    return list(records[start:end])


def item_range(state: PaginationState) -> tuple[int, int]:
    if state.total_items == 0:
        return 0, 0
    start, end = page_bounds(state)
    return start + 1, min(end, state.total_items)


def visible_page_numbers(current_page: int, pages: int) -> list[int]:
    """Page buttons to render; ``ELLIPSIS`` marks an elided gap."""
    window = list(range(max(2, current_page - NEIGHBOUR_PAGES), min(pages - 1, current_page + NEIGHBOUR_PAGES) + 1))
    numbers = [1]
    if window and window[0] > 2:
        numbers.append(ELLIPSIS)
    numbers.extend(window)
    if window and window[-1] < pages - 1:
        numbers.append(ELLIPSIS)
    if pages > 1:
        numbers.append(pages)
    return numbers


def with_total_items(state: PaginationState, total_items: int) -> PaginationState:
    resized = replace(state, total_items=max(0, total_items))
    return replace(resized, current_page=clamp_page(resized.current_page, resized))


def change_page_size(state: PaginationState, page_size: int) -> PaginationState:
    resized = replace(state, page_size=page_size)
    return replace(resized, current_page=clamp_page(state.current_page, resized))


def goto_page(state: PaginationState, page: int) -> PaginationState:
    return replace(state, current_page=clamp_page(page, state))


def can_go_previous(state: PaginationState) -> bool:
    return state.current_page > 1


def can_go_next(state: PaginationState) -> bool:
    return state.current_page < total_pages(state)


def first_page(state: PaginationState) -> PaginationState:
    if not can_go_previous(state):
        return state
    return replace(state, current_page=1)


def previous_page(state: PaginationState) -> PaginationState:
    if not can_go_previous(state):
        return state
    return replace(state, current_page=state.current_page - 1)


def next_page(state: PaginationState) -> PaginationState:
    if not can_go_next(state):
        return state
    return replace(state, current_page=state.current_page + 1)


def last_page(state: PaginationState) -> PaginationState:
    if not can_go_next(state):
        return state
    return replace(state, current_page=total_pages(state))
