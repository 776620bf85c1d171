from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SelectionState(Enum):
    """Progress of a tracing session."""

    NO_SELECTION = "no-selection"
    SELECTING = "selecting"
    SELECTED = "selected"
    PROCESSING = "processing"

    def capabilities(self) -> "Capabilities":
        return capabilities(self)

    def is_empty(self) -> bool:
        return capabilities(self).is_empty

    def is_finished(self) -> bool:
        return capabilities(self).is_finished

    def can_undo(self) -> bool:
        return capabilities(self).can_undo

    def can_add_point(self) -> bool:
        return capabilities(self).can_add_point

    def can_finish(self) -> bool:
        return capabilities(self).can_finish

    def can_edit(self) -> bool:
        return capabilities(self).can_edit

    def is_processing(self) -> bool:
        return capabilities(self).is_processing

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Capabilities:
    is_empty: bool
    is_finished: bool
    can_undo: bool
    can_add_point: bool
    can_finish: bool
    can_edit: bool
    is_processing: bool


_CAPABILITIES: dict[SelectionState, Capabilities] = {
    SelectionState.NO_SELECTION: Capabilities(
        is_empty=True,
        is_finished=False,
        can_undo=False,
        can_add_point=True,
        can_finish=False,
        can_edit=False,
        is_processing=False,
    ),
    SelectionState.SELECTING: Capabilities(
        is_empty=False,
        is_finished=False,
        can_undo=True,
        can_add_point=True,
        can_finish=True,
        can_edit=False,
        is_processing=False,
    ),
    SelectionState.SELECTED: Capabilities(
        is_empty=False,
        is_finished=True,
        can_undo=True,
        can_add_point=False,
        can_finish=False,
        can_edit=True,
        is_processing=False,
    ),
    # Undo stays available so a running search can be abandoned.
    SelectionState.PROCESSING: Capabilities(
        is_empty=False,
        is_finished=False,
        can_undo=True,
        can_add_point=False,
        can_finish=False,
        can_edit=False,
        is_processing=True,
    ),
}


def capabilities(state: SelectionState) -> Capabilities:
    """Map a selection state to the operations it permits."""

    return _CAPABILITIES[state]
