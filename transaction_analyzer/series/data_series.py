"""
Chart data series with explicit "no data" markers.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from ..core.errors import InvalidInputError


@dataclass(frozen=True)
class Present:
    """A recorded value (zero included)."""
    value: float


@dataclass(frozen=True)
class Absent:
    """No sample at this timestamp; charts break the line here."""


ABSENT = Absent()

PointValue = Union[Present, Absent]


class DataSeries:
    """
    Named sequence of (timestamp, value) points.

    A None name marks the "other" series of the stacked timer chart. Points must be
    appended in strictly increasing timestamp order.
    """

    def __init__(self, name: Optional[str]):
        self.name = name
        self._points: List[Tuple[int, PointValue]] = []

    @property
    def points(self) -> List[Tuple[int, PointValue]]:
        return list(self._points)

    def add(self, timestamp: int, value: float) -> None:
        self._append(timestamp, Present(float(value)))

    def add_absent(self, timestamp: int) -> None:
        self._append(timestamp, ABSENT)

    def _append(self, timestamp: int, value: PointValue) -> None:
        if self._points and timestamp <= self._points[-1][0]:
            raise InvalidInputError(
                f"Series {self.name!r}: timestamp {timestamp} does not follow {self._points[-1][0]}")
        self._points.append((timestamp, value))

    def value_at(self, timestamp: int) -> Optional[PointValue]:
        for point_time, value in self._points:
            if point_time == timestamp:
                return value
        return None

    def to_dict(self) -> dict:
        """Serialize with ``null`` standing in for "no data"."""
        return {
            'name': self.name,
            'data': [
                [timestamp, value.value if isinstance(value, Present) else None]
                for timestamp, value in self._points
            ],
        }

    def __len__(self) -> int:
        return len(self._points)

    def __repr__(self) -> str:
        return f"DataSeries(name={self.name!r}, points={len(self._points)})"
