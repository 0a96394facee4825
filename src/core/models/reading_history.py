"""
Bounded history of scored soil readings.

Fixed-capacity ring buffer: O(1) append, O(1) indexed access, oldest entry
overwritten once full. Entries are (timestamp, ScoredReading) tuples kept in
chronological order of insertion.
"""
from typing import List, Optional, Tuple

from core.models.soil_health import ScoredReading

HistoryEntry = Tuple[float, ScoredReading]


class ReadingHistory:
    """
    Ring buffer of scored readings.
    - append is O(1)
    - index 0 is the oldest entry, size() - 1 the newest
    """

    __slots__ = ('capacity', 'buffer', 'write_index', 'count')

    def __init__(self, capacity: int):
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.buffer: List[Optional[HistoryEntry]] = [None] * capacity
        self.write_index = 0  # Next slot to write
        self.count = 0

    def append(self, timestamp: float, item: ScoredReading) -> None:
        """Store an entry, overwriting the oldest one when full."""
        self.buffer[self.write_index] = (timestamp, item)
        self.write_index = (self.write_index + 1) % self.capacity
        if self.count < self.capacity:
            self.count += 1

    def _physical_index(self, index: int) -> int:
        return (self.write_index - self.count + index) % self.capacity

    def get(self, index: int) -> HistoryEntry:
        """Entry at logical index (0 = oldest)."""
        if index < 0 or index >= self.count:
            raise IndexError(f"Index {index} out of range [0, {self.count})")
        entry = self.buffer[self._physical_index(index)]
        assert entry is not None
        return entry

    def get_all(self) -> List[HistoryEntry]:
        """All entries, oldest first."""
        return [self.get(i) for i in range(self.count)]

    def get_latest(self, n: int) -> List[HistoryEntry]:
        """The newest `n` entries, oldest first."""
        if n <= 0:
            return []
        start = max(0, self.count - n)
        return [self.get(i) for i in range(start, self.count)]

    def latest(self) -> Optional[HistoryEntry]:
        if self.count == 0:
            return None
        return self.get(self.count - 1)

    def is_full(self) -> bool:
        return self.count == self.capacity

    def size(self) -> int:
        return self.count

    def clear(self) -> None:
        self.buffer = [None] * self.capacity
        self.write_index = 0
        self.count = 0
