"""
Segment data models.

This module defines the values produced by segment detection: the index
range of the selected stretch, the circuit template used in loop mode, the
lap scan result and the materialized segment handed to the track writer.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, List, Dict, Any, Tuple
import numpy as np
import pandas as pd

from core.models.track import TrackSample, TrackSequence, track_coordinates
from core.validation import InvalidRangeError


@dataclass(frozen=True)
class IndexRange:
    """
    Inclusive [start, end] bounds into an ordered track.

    Construction enforces 0 <= start <= end. The upper bound depends on the
    track and is checked with validate_against().
    """
    start: int
    end: int

    def __post_init__(self):
        if self.start < 0 or self.start > self.end:
            raise InvalidRangeError(self.start, self.end)

    @classmethod
    def ordered(cls, first: int, second: int) -> 'IndexRange':
        """Build a range from two indices given in any order."""
        if first > second:
            first, second = second, first
        return cls(first, second)

    def validate_against(self, length: int) -> 'IndexRange':
        """Check that the range fits a track of the given length."""
        if self.end >= length:
            raise InvalidRangeError(self.start, self.end, length)
        return self

    def __len__(self) -> int:
        return self.end - self.start + 1

    def to_slice(self) -> slice:
        """Slice selecting the range from a sequence."""
        return slice(self.start, self.end + 1)


@dataclass(frozen=True)
class CircuitTemplate:
    """
    One representative lap of a circuit.

    The template is a geometric reference only: later laps are matched by
    proximity to its points, not by timing or point order.
    """
    anchor: Tuple[float, float]
    radius_m: float
    lap_range: IndexRange
    samples: TrackSequence

    @property
    def point_count(self) -> int:
        """Number of GPS points in the template."""
        return len(self.samples)

    @property
    def coordinates(self) -> Tuple[np.ndarray, np.ndarray]:
        """Template (latitudes, longitudes) as float arrays."""
        return track_coordinates(self.samples)


@dataclass(frozen=True)
class LapScan:
    """
    Result of walking a track against a circuit template.

    lap_entries holds every circuit entry seen after the first lap was
    completed; the range spans the first to the last of them.
    """
    lap_entries: Tuple[int, ...]
    index_range: IndexRange

    @property
    def lap_count(self) -> int:
        """Number of circuit entries after the first completed lap."""
        return len(self.lap_entries)


@dataclass(frozen=True)
class Segment:
    """
    A materialized stretch of track.

    Holds the cropped samples together with the running distance of every
    point and the session totals.
    """
    index_range: IndexRange
    samples: TrackSequence
    cumulative_distances: Tuple[float, ...]  # Meters, one per sample
    total_distance: float  # Meters
    elapsed_time: float  # Seconds

    @property
    def point_count(self) -> int:
        """Number of GPS points in this segment."""
        return len(self.samples)

    @property
    def start_time(self) -> Optional[datetime]:
        return self.samples[0].timestamp if self.samples else None

    @property
    def end_time(self) -> Optional[datetime]:
        return self.samples[-1].timestamp if self.samples else None

    @property
    def distance_km(self) -> float:
        """Distance in kilometers."""
        from core.calculations import meters_to_kilometers
        return meters_to_kilometers(self.total_distance)

    @property
    def avg_speed_ms(self) -> float:
        """Average speed in meters per second."""
        if self.elapsed_time <= 0:
            return 0.0
        return self.total_distance / self.elapsed_time

    def points(self) -> List[Tuple[TrackSample, float]]:
        """Pairs of (sample, cumulative distance) in track order."""
        return list(zip(self.samples, self.cumulative_distances))

    def to_dict(self) -> Dict[str, Any]:
        """Convert segment summary to dictionary."""
        return {
            'start_idx': self.index_range.start,
            'end_idx': self.index_range.end,
            'start_time': self.start_time,
            'end_time': self.end_time,
            'point_count': self.point_count,
            'total_distance': self.total_distance,
            'elapsed_time': self.elapsed_time,
            'avg_speed_ms': self.avg_speed_ms,
        }

    def to_dataframe(self) -> pd.DataFrame:
        """
        Convert the segment points to a pandas DataFrame.

        Returns:
            DataFrame with one row per point, including a 'distance' column
            holding the cumulative distance in meters
        """
        if not self.samples:
            return pd.DataFrame()

        data = []
        for sample, distance in self.points():
            row = sample.to_dict()
            row['distance'] = distance
            data.append(row)

        return pd.DataFrame(data)
