"""Greatest-key-not-exceeding lookup over an ordered, read-only mapping.

Used both to place a glyph in the payoff/running-line column whose left edge
is closest at or before it, and to pick the checkpoint template registered
for the largest floor distance not exceeding a race distance.
"""

from bisect import bisect_right
from typing import Generic, Iterable, Optional, TypeVar

V = TypeVar("V")


class FloorMap(Generic[V]):
    """Immutable sorted map supporting floor lookups by numeric key."""

    def __init__(self, items: Iterable[tuple[float, V]] = ()):
        ordered = sorted(items, key=lambda item: item[0])
        self._keys = tuple(key for key, _ in ordered)
        self._values = tuple(value for _, value in ordered)

    def __len__(self) -> int:
        return len(self._keys)

    def __bool__(self) -> bool:
        return bool(self._keys)

    def keys(self) -> tuple:
        return self._keys

    def values(self) -> tuple:
        return self._values

    def floor_entry(self, key: float) -> Optional[tuple[float, V]]:
        """Return (floor_key, value) for the greatest key <= key, or None."""
        index = bisect_right(self._keys, key) - 1
        if index < 0:
            return None
        return self._keys[index], self._values[index]

    def floor(self, key: float) -> Optional[V]:
        entry = self.floor_entry(key)
        return entry[1] if entry is not None else None
