from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Hashable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from .exceptions import ActionInFlightError, EmptySelectionError
from .logger import get_logger, log_event
from .models import StatusOption
from .results import Err, Ok, Result

logger = get_logger("portal_tables.selection")

RowId = Hashable
ConfirmFn = Callable[[str], Awaitable[bool]]
BulkHandler = Callable[[list[RowId], Optional[str]], Awaitable[Any]]


class SelectionStatus(str, Enum):
    NONE = "none"
    PARTIAL = "partial"
    ALL = "all"


@dataclass
class SelectionState:
    selected_ids: set[RowId] = field(default_factory=set)
    all_selected: bool = False


@dataclass(frozen=True)
class SelectionSummary:
    count: int
    status: SelectionStatus
    selected_ids: frozenset[RowId]


class SelectionRegistry:
    """Selection state of every table instance, keyed by instance id."""

    def __init__(self) -> None:
        self._states: dict[str, SelectionState] = {}

    def state(self, instance_id: str) -> SelectionState:
        if instance_id not in self._states:
            self._states[instance_id] = SelectionState()
        return self._states[instance_id]

    def selected_ids(self, instance_id: str) -> frozenset[RowId]:
        return frozenset(self.state(instance_id).selected_ids)

    def set_selected(self, instance_id: str, row_id: RowId, selected: bool) -> None:
        state = self.state(instance_id)
        if selected:
            state.selected_ids.add(row_id)
        else:
            state.selected_ids.discard(row_id)
            state.all_selected = False

    def toggle(self, instance_id: str, row_id: RowId) -> bool:
        selected = row_id not in self.state(instance_id).selected_ids
        self.set_selected(instance_id, row_id, selected)
        return selected

    def select_all(self, instance_id: str, row_ids: Iterable[RowId]) -> None:
        state = self.state(instance_id)
        state.selected_ids = set(row_ids)
        state.all_selected = bool(state.selected_ids)

    def toggle_all(self, instance_id: str, filtered_ids: Iterable[RowId]) -> SelectionStatus:
        ids = set(filtered_ids)
        if self._status(self.state(instance_id), ids) == SelectionStatus.ALL:
            self.clear(instance_id)
            return SelectionStatus.NONE
        self.select_all(instance_id, ids)
        return SelectionStatus.ALL if ids else SelectionStatus.NONE

    def clear(self, instance_id: str) -> None:
        state = self.state(instance_id)
        state.selected_ids.clear()
        state.all_selected = False

    def prune(self, instance_id: str, present_ids: Iterable[RowId]) -> set[RowId]:
        state = self._states.get(instance_id)
        if state is None or not state.selected_ids:
            return set()
        removed = state.selected_ids - set(present_ids)
        if removed:
            state.selected_ids -= removed
            if not state.selected_ids:
                state.all_selected = False
        return removed

    def summary(self, instance_id: str, filtered_ids: Iterable[RowId]) -> SelectionSummary:
        state = self.state(instance_id)
        status = self._status(state, set(filtered_ids))
        state.all_selected = status == SelectionStatus.ALL
        return SelectionSummary(
            count=len(state.selected_ids),
            status=status,
            selected_ids=frozenset(state.selected_ids),
        )

    def drop(self, instance_id: str) -> None:
        self._states.pop(instance_id, None)

    @staticmethod
    def _status(state: SelectionState, filtered_ids: set[RowId]) -> SelectionStatus:
        if not state.selected_ids:
            return SelectionStatus.NONE
        if filtered_ids and filtered_ids <= state.selected_ids:
            return SelectionStatus.ALL
        return SelectionStatus.PARTIAL


class ActionVariant(str, Enum):
    DEFAULT = "default"
    DANGER = "danger"
    WARNING = "warning"


@dataclass(frozen=True)
class BulkAction:
    id: str
    label: str
    handler: BulkHandler
    confirm_message: str | None = None
    variant: ActionVariant = ActionVariant.DEFAULT
    dropdown_options: tuple[StatusOption, ...] = ()
    on_success: Callable[[], Any] | None = None

    def confirmation_text(self, count: int) -> str | None:
        if not self.confirm_message:
            return None
        return self.confirm_message.replace("{count}", str(count))


class BulkOutcomeStatus(str, Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class BulkActionOutcome:
    action_id: str
    status: BulkOutcomeStatus
    ids: tuple[RowId, ...]
    value: str | None = None


class BulkActionRunner:
    """Confirm, execute and settle bulk actions against one selection registry."""

    def __init__(self, registry: SelectionRegistry) -> None:
        self.registry = registry
        self._in_flight: set[tuple[str, str]] = set()

    def is_in_flight(self, instance_id: str, action_id: str) -> bool:
        return (instance_id, action_id) in self._in_flight

    async def run(
        self,
        instance_id: str,
        action: BulkAction,
        confirm: ConfirmFn | None = None,
        value: str | None = None,
    ) -> Result[BulkActionOutcome, Exception]:
        ids = _ordered(self.registry.selected_ids(instance_id))
        if not ids:
            return Err(EmptySelectionError(action.id, "No rows selected"))

        flight_key = (instance_id, action.id)
        if flight_key in self._in_flight:
            return Err(ActionInFlightError(action.id, f"Action {action.id} is already running"))
        self._in_flight.add(flight_key)
        try:
            message = action.confirmation_text(len(ids))
            if message and confirm is not None and not await confirm(message):
                log_event(logger, "selection", action.id, "cancelled", instance_id=instance_id, count=len(ids))
                return Ok(BulkActionOutcome(action.id, BulkOutcomeStatus.CANCELLED, ids, value))

            try:
                await action.handler(list(ids), value)
            except Exception as exc:
                log_event(
                    logger,
                    "selection",
                    action.id,
                    "error",
                    level=logging.ERROR,
                    instance_id=instance_id,
                    count=len(ids),
                    error=str(exc),
                )
                return Err(exc)

            self.registry.clear(instance_id)
            if action.on_success is not None:
                action.on_success()
            log_event(logger, "selection", action.id, "success", instance_id=instance_id, count=len(ids))
            return Ok(BulkActionOutcome(action.id, BulkOutcomeStatus.COMPLETED, ids, value))
        finally:
            self._in_flight.discard(flight_key)


def _ordered(ids: Iterable[RowId]) -> tuple[RowId, ...]:
    items = list(ids)
    try:
        return tuple(sorted(items))
    except TypeError:
        return tuple(items)
