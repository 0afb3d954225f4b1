"""
Track data models.

This module defines the GPS samples segment detection works on. A track is
an ordered, immutable tuple of samples; detection never mutates it.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple, Dict, Any
import numpy as np
import pandas as pd


@dataclass(frozen=True)
class TrackSample:
    """
    A single GPS-tagged observation.

    Every sample has a position. The sensor measurements are independent of
    each other and are None when the recording did not contain them.
    """
    timestamp: datetime
    latitude: float   # Degrees
    longitude: float  # Degrees

    # Optional measurements
    heart_rate: Optional[int] = None  # Beats per minute
    speed: Optional[float] = None  # Meters per second
    cadence: Optional[int] = None  # Revolutions per minute
    altitude: Optional[float] = None  # Meters

    def measurements(self) -> Dict[str, Any]:
        """Return only the optional measurements that are present."""
        values = {
            'heart_rate': self.heart_rate,
            'speed': self.speed,
            'cadence': self.cadence,
            'altitude': self.altitude,
        }
        return {name: value for name, value in values.items() if value is not None}

    def to_dict(self) -> Dict[str, Any]:
        """Convert sample to dictionary for DataFrame creation."""
        return {
            'time': self.timestamp,
            'latitude': self.latitude,
            'longitude': self.longitude,
            'heart_rate': self.heart_rate,
            'speed': self.speed,
            'cadence': self.cadence,
            'altitude': self.altitude,
        }


TrackSequence = Tuple[TrackSample, ...]


def track_coordinates(track: TrackSequence) -> Tuple[np.ndarray, np.ndarray]:
    """
    Get latitude and longitude arrays for a track.

    Returns:
        tuple: (latitudes, longitudes) as float arrays
    """
    latitudes = np.fromiter((s.latitude for s in track), dtype=float, count=len(track))
    longitudes = np.fromiter((s.longitude for s in track), dtype=float, count=len(track))
    return latitudes, longitudes


def track_to_dataframe(track: TrackSequence) -> pd.DataFrame:
    """
    Convert a track to a pandas DataFrame.

    Args:
        track: Ordered track samples

    Returns:
        DataFrame with 'time', 'latitude', 'longitude' and measurement columns
    """
    if not track:
        return pd.DataFrame()

    return pd.DataFrame([sample.to_dict() for sample in track])


def _optional(value: Any, cast) -> Any:
    """Cast a DataFrame cell, mapping NaN/None to None."""
    if value is None or pd.isna(value):
        return None
    return cast(value)


def dataframe_to_track(df: pd.DataFrame) -> TrackSequence:
    """
    Convert a pandas DataFrame to a track.

    Rows without a position are dropped. Missing measurement columns are
    treated as absent measurements.

    Args:
        df: DataFrame with at least 'time', 'latitude', 'longitude' columns

    Returns:
        TrackSequence in row order
    """
    samples = []

    for _, row in df.iterrows():
        if pd.isna(row['latitude']) or pd.isna(row['longitude']):
            continue

        timestamp = row['time']
        if isinstance(timestamp, pd.Timestamp):
            timestamp = timestamp.to_pydatetime()

        samples.append(TrackSample(
            timestamp=timestamp,
            latitude=float(row['latitude']),
            longitude=float(row['longitude']),
            heart_rate=_optional(row.get('heart_rate'), int),
            speed=_optional(row.get('speed'), float),
            cadence=_optional(row.get('cadence'), int),
            altitude=_optional(row.get('altitude'), float),
        ))

    return tuple(samples)
