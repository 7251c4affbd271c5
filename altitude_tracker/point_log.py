"""
Point Log for Altitude Tracking

Ordered, append-only record of the fused points of one session. Points keep
arrival order and are never re-sorted by timestamp.
"""

from typing import Iterator, List, Set, Tuple
from .models import FusedPoint


class PointLog:
    """
    Insertion-ordered sequence of FusedPoint with unique ids.
    
    The log is not synchronized; TrackingSession appends and snapshots it
    under its own lock.
    """

    def __init__(self) -> None:
        self._points: List[FusedPoint] = []
        self._ids: Set[str] = set()

    def append(self, point: FusedPoint) -> None:
        """
        Append a point to the end of the log.
        
        Raises:
            ValueError: If a point with the same id was already appended.
        """
        if point.id in self._ids:
            raise ValueError(f"Point {point.id} is already in the log")
        self._points.append(point)
        self._ids.add(point.id)

    def snapshot(self) -> Tuple[FusedPoint, ...]:
        """Return an immutable copy of the log in insertion order."""
        return tuple(self._points)

    def clear(self) -> None:
        self._points = []
        self._ids = set()

    def last(self):
        return self._points[-1] if self._points else None

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[FusedPoint]:
        return iter(self.snapshot())
