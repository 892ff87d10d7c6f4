"""
Tests for the snapshot-based edit history.

The history is driven against a tiny in-memory "live state" whose apply
path records every edit back into the history, the same way the session
does, so re-entrancy suppression is exercised.
"""
import pytest

from src.domain.history import LIVE, EditHistory, HistoryState
from src.domain.models import Cell, ColumnDef, ColumnType, Snapshot


COLUMNS = [ColumnDef(id="k0", type=ColumnType.SKU, header="SKU")]


class LiveState:
    """Minimal owner of rows that routes restores through its edit path."""

    def __init__(self, max_depth=None):
        self.rows = [[Cell.text("initial")]]
        self.history = EditHistory(self.apply, self.capture, max_depth=max_depth)
        self.states_seen_while_applying = []

    def capture(self):
        return Snapshot.capture(self.rows, COLUMNS)

    def edit(self, text):
        pre_edit = self.capture()
        self.rows = [[Cell.text(text)]]
        return self.history.record_edit(pre_edit)

    def apply(self, snapshot):
        self.states_seen_while_applying.append(self.history.state)
        pre_edit = self.capture()
        self.rows = snapshot.rows
        # Same path as a live edit: must be ignored
        assert self.history.record_edit(pre_edit) is False

    @property
    def text(self):
        return self.rows[0][0].value


def texts(history):
    return [s.rows[0][0].value for s in history.snapshots]


@pytest.fixture
def live():
    return LiveState()


class TestWalkthrough:
    """edit A, edit B, undo, undo, redo, redo."""

    def test_full_walkthrough(self, live):
        live.edit("A")
        assert texts(live.history) == ["initial"]
        assert live.history.cursor == LIVE

        live.edit("B")
        assert texts(live.history) == ["initial", "A"]
        assert live.history.cursor == LIVE

        assert live.history.undo() is True
        assert live.text == "A"
        assert live.history.cursor == 1
        assert texts(live.history) == ["initial", "A", "B"]

        assert live.history.undo() is True
        assert live.text == "initial"
        assert live.history.cursor == 0

        assert live.history.redo() is True
        assert live.text == "A"
        assert live.history.cursor == 1

        assert live.history.redo() is True
        assert live.text == "B"
        assert live.history.cursor == LIVE
        assert texts(live.history) == ["initial", "A"]

    def test_undo_redo_undo_cycle_does_not_duplicate_live(self, live):
        live.edit("A")
        live.history.undo()
        live.history.redo()
        live.history.undo()
        assert texts(live.history) == ["initial", "A"]
        assert live.text == "initial"


class TestBoundaries:
    """No-op cases."""

    def test_empty_history(self, live):
        assert live.history.can_undo is False
        assert live.history.can_redo is False
        assert live.history.undo() is False
        assert live.history.redo() is False
        assert live.history.snapshots == []

    def test_undo_at_oldest(self, live):
        live.edit("A")
        live.history.undo()
        assert live.history.can_undo is False
        assert live.history.undo() is False
        assert live.text == "initial"

    def test_redo_when_live(self, live):
        live.edit("A")
        assert live.history.redo() is False


class TestBranching:
    """A new edit mid-history drops the redo tail."""

    def test_edit_after_undo(self, live):
        live.edit("A")
        live.edit("B")
        live.history.undo()
        live.history.undo()
        assert live.text == "initial"

        live.edit("C")

        assert live.history.cursor == LIVE
        assert texts(live.history) == ["initial"]
        assert live.history.can_redo is False
        live.history.undo()
        assert live.text == "initial"


class TestReentrancy:
    """Restores are never recorded."""

    def test_state_machine_during_apply(self, live):
        live.edit("A")
        live.history.undo()
        assert live.states_seen_while_applying == [HistoryState.APPLYING_HISTORY]
        assert live.history.state == HistoryState.IDLE

    def test_state_restored_after_failure(self):
        def failing_apply(snapshot):
            raise RuntimeError("boom")

        history = EditHistory(failing_apply, lambda: Snapshot.capture([], COLUMNS))
        history.record_edit(Snapshot.capture([[Cell.text("x")]], COLUMNS))

        with pytest.raises(RuntimeError):
            history.undo()
        assert history.state == HistoryState.IDLE


class TestDepthAndClear:

    def test_max_depth(self):
        live = LiveState(max_depth=2)
        for text in ["A", "B", "C", "D"]:
            live.edit(text)
        assert texts(live.history) == ["B", "C"]

    def test_identical_snapshot_not_appended_twice(self, live):
        snapshot = live.capture()
        live.history.record_edit(snapshot)
        live.history.record_edit(snapshot)
        assert len(live.history.snapshots) == 1

    def test_clear(self, live):
        live.edit("A")
        live.history.undo()
        live.history.clear()
        assert live.history.snapshots == []
        assert live.history.cursor == LIVE
