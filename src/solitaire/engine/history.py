# history.py - bounded move log for undo
from collections import deque
from typing import Iterator, Optional

from solitaire.engine.moves import MoveRecord

DEFAULT_HISTORY_LIMIT = 100


class MoveHistory:
    """
    FIFO-evicting log of MoveRecords. The newest record is undone first;
    once `capacity` is exceeded the oldest record is dropped.
    """

    def __init__(self, capacity: int = DEFAULT_HISTORY_LIMIT):
        if capacity < 1:
            raise ValueError("history capacity must be at least 1")
        self._records = deque(maxlen=capacity)
        self._sequence = 0

    @property
    def capacity(self) -> int:
        return self._records.maxlen

    def __len__(self):
        return len(self._records)

    def __iter__(self) -> Iterator[MoveRecord]:
        return iter(self._records)

    @property
    def last_sequence(self) -> int:
        return self._sequence

    def next_sequence(self) -> int:
        self._sequence += 1
        return self._sequence

    def record(self, move: MoveRecord) -> None:
        self._records.append(move)

    def can_undo(self) -> bool:
        return len(self._records) > 0

    def peek(self) -> Optional[MoveRecord]:
        return self._records[-1] if self._records else None

    def undo_last(self) -> Optional[MoveRecord]:
        if not self._records:
            return None
        return self._records.pop()

    def clear(self) -> None:
        self._records.clear()
        self._sequence = 0
