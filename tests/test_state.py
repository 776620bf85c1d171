from region_selector.state import SelectionState, capabilities


def test_empty_state_only_allows_adding_points() -> None:
    state = SelectionState.NO_SELECTION

    assert state.is_empty() is True
    assert state.can_add_point() is True
    assert state.can_undo() is False
    assert state.can_finish() is False
    assert state.can_edit() is False
    assert state.is_finished() is False
    assert state.is_processing() is False


def test_selecting_allows_add_undo_finish() -> None:
    state = SelectionState.SELECTING

    assert state.can_add_point() is True
    assert state.can_undo() is True
    assert state.can_finish() is True
    assert state.can_edit() is False


def test_selected_allows_edit_and_undo_only() -> None:
    state = SelectionState.SELECTED

    assert state.is_finished() is True
    assert state.can_edit() is True
    assert state.can_undo() is True
    assert state.can_add_point() is False
    assert state.can_finish() is False


def test_processing_allows_only_undo() -> None:
    caps = capabilities(SelectionState.PROCESSING)

    assert caps.is_processing is True
    assert caps.can_undo is True
    assert not any([caps.is_empty, caps.is_finished, caps.can_add_point, caps.can_finish, caps.can_edit])


def test_state_str_is_value() -> None:
    assert str(SelectionState.SELECTING) == "selecting"
    assert SelectionState.SELECTED.capabilities().is_finished is True
