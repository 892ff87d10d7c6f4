"""
Snapshot-based undo/redo for a single sheet.

Model
-----
snapshots : ordered list of saved {rows, columns} pairs, oldest first
cursor    : index of the snapshot being viewed, or -1 for the live state

Restoring a snapshot runs through the same mutation path as a live edit.
While that happens the history sits in APPLYING_HISTORY and every
record_edit() call is ignored, so a restore is never recorded as an edit.
The state is entered and left around each apply, also when it raises.

Walkthrough (A, B = edits)
--------------------------
    edit A  -> [preA]                  cursor -1
    edit B  -> [preA, preB]            cursor -1
    undo    -> [preA, preB, live]      cursor  1  (viewing preB)
    undo    ->                         cursor  0  (viewing preA)
    redo    ->                         cursor  1  (viewing preB)
    redo    -> [preA, preB]            cursor -1  (live restored)
"""
import logging
from enum import Enum
from typing import Callable, List, Optional

from .models import Snapshot


logger = logging.getLogger(__name__)

LIVE = -1


class HistoryState(Enum):
    IDLE = "idle"
    APPLYING_HISTORY = "applying_history"


class EditHistory:
    """Undo/redo manager over Snapshot objects."""

    def __init__(
        self,
        apply_snapshot: Callable[[Snapshot], None],
        capture_live: Callable[[], Snapshot],
        max_depth: Optional[int] = None,
    ):
        """
        Args:
            apply_snapshot: Writes a snapshot back through the live edit path
            capture_live: Returns the current live state as a Snapshot
            max_depth: Oldest snapshots are dropped beyond this many (None = unbounded)
        """
        self._apply_snapshot = apply_snapshot
        self._capture_live = capture_live
        self._max_depth = max_depth
        self._snapshots: List[Snapshot] = []
        self._cursor = LIVE
        self._state = HistoryState.IDLE

    @property
    def snapshots(self) -> List[Snapshot]:
        return list(self._snapshots)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def state(self) -> HistoryState:
        return self._state

    @property
    def is_applying(self) -> bool:
        return self._state == HistoryState.APPLYING_HISTORY

    @property
    def can_undo(self) -> bool:
        if self._cursor == LIVE:
            return len(self._snapshots) > 0
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor != LIVE and self._cursor < len(self._snapshots) - 1

    def clear(self) -> None:
        self._snapshots.clear()
        self._cursor = LIVE

    def record_edit(self, pre_edit: Snapshot) -> bool:
        """
        Store the state preceding an edit that changed at least one row.

        Returns False when ignored (a snapshot is being applied).
        """
        if self.is_applying:
            return False

        if self._cursor != LIVE:
            # No branching: the redo tail (live copy included) is dropped
            del self._snapshots[self._cursor + 1:]

        if not self._snapshots or self._snapshots[-1] != pre_edit:
            self._snapshots.append(pre_edit)
        self._cursor = LIVE

        if self._max_depth is not None and len(self._snapshots) > self._max_depth:
            del self._snapshots[:len(self._snapshots) - self._max_depth]

        logger.debug(f"Recorded edit, history depth {len(self._snapshots)}")
        return True

    def undo(self) -> bool:
        """Step back one snapshot. Returns False when there is nothing to undo."""
        if self.is_applying:
            logger.warning("Undo requested while a snapshot is being applied; ignored")
            return False

        if self._cursor == LIVE:
            target = len(self._snapshots) - 1
        else:
            target = self._cursor - 1
        if target < 0 or target >= len(self._snapshots):
            return False

        if self._cursor == LIVE:
            # Keep the live state so redo can come back to it
            self._snapshots.append(self._capture_live())

        self._apply(self._snapshots[target])
        self._cursor = target
        logger.debug(f"Undo -> snapshot {target}")
        return True

    def redo(self) -> bool:
        """Step forward one snapshot. Returns False when there is nothing to redo."""
        if self.is_applying:
            logger.warning("Redo requested while a snapshot is being applied; ignored")
            return False
        if not self.can_redo:
            return False

        target = self._cursor + 1
        self._apply(self._snapshots[target])

        if target == len(self._snapshots) - 1:
            # Back on the live state; its stored copy is no longer needed
            self._snapshots.pop()
            self._cursor = LIVE
        else:
            self._cursor = target
        logger.debug(f"Redo -> {'live' if self._cursor == LIVE else self._cursor}")
        return True

    def _apply(self, snapshot: Snapshot) -> None:
        self._state = HistoryState.APPLYING_HISTORY
        try:
            self._apply_snapshot(Snapshot.capture(snapshot.rows, snapshot.columns))
        finally:
            self._state = HistoryState.IDLE
