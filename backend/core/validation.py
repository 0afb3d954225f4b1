"""
Input validation utilities and the segment detection error taxonomy.

This module provides validation functions to ensure data integrity before
segment detection runs, and the typed failures detection raises when a
requested segment cannot be found.
"""

import logging
from typing import Any, Optional, Sequence, Tuple
from pathlib import Path

from geopy.point import Point

from core.constants import (
    MIN_TRACK_POINTS, MIN_LOOP_RADIUS_METERS, MAX_LOOP_RADIUS_METERS,
    MIN_LATITUDE_DEGREES, MAX_LATITUDE_DEGREES,
    MIN_LONGITUDE_DEGREES, MAX_LONGITUDE_DEGREES
)

logger = logging.getLogger(__name__)

Coordinate = Tuple[float, float]


class ValidationError(Exception):
    """Custom exception for validation errors."""
    pass


class SegmentDetectionError(ValidationError):
    """Base class for failures of the segment detection engine."""
    pass


class InsufficientDataError(SegmentDetectionError):
    """The track has fewer usable samples than detection needs."""

    def __init__(self, sample_count: int, required: int = MIN_TRACK_POINTS):
        self.sample_count = sample_count
        self.required = required
        super().__init__(
            f"Need at least {required} GPS points for segment detection, got {sample_count}"
        )


class LoopNotDetectedError(SegmentDetectionError):
    """The anchor coordinate is not passed twice, or the loop never closes."""

    def __init__(self, anchor: Coordinate, radius_m: float, sample_count: int,
                 pass_count: Optional[int] = None, reason: str = ""):
        self.anchor = anchor
        self.radius_m = radius_m
        self.sample_count = sample_count
        self.pass_count = pass_count
        message = reason or "Loop not detected"
        details = f"anchor=({anchor[0]:.6f}, {anchor[1]:.6f}), radius={radius_m}m, samples={sample_count}"
        if pass_count is not None:
            details += f", passes={pass_count}"
        super().__init__(f"{message} ({details})")


class NoCompleteLapsError(SegmentDetectionError):
    """A circuit template was built but no repeated lap follows it."""

    def __init__(self, anchor: Coordinate, radius_m: float, sample_count: int):
        self.anchor = anchor
        self.radius_m = radius_m
        self.sample_count = sample_count
        super().__init__(
            f"No complete laps detected after the first lap "
            f"(anchor=({anchor[0]:.6f}, {anchor[1]:.6f}), radius={radius_m}m, samples={sample_count})"
        )


class InvalidRangeError(SegmentDetectionError):
    """An index range violates 0 <= start <= end < length."""

    def __init__(self, start: int, end: int, length: Optional[int] = None):
        self.start = start
        self.end = end
        self.length = length
        bounds = f"[{start}, {end}]"
        if length is not None:
            bounds += f" for a track of {length} points"
        super().__init__(f"Invalid index range {bounds}")


def validate_track_samples(samples: Sequence[Any], context: str = "Track") -> Sequence[Any]:
    """
    Validate that a track has enough samples for segment detection.

    Args:
        samples: Ordered track samples
        context: Context description for error messages

    Returns:
        The same samples

    Raises:
        InsufficientDataError: If the track has fewer than MIN_TRACK_POINTS samples
    """
    if samples is None:
        raise InsufficientDataError(0)

    if len(samples) < MIN_TRACK_POINTS:
        logger.warning(f"{context}: only {len(samples)} GPS points available")
        raise InsufficientDataError(len(samples))

    logger.debug(f"{context}: Validation passed for {len(samples)} data points")
    return samples


def validate_coordinate(lat: float, lon: float, context: str = "Coordinate") -> Coordinate:
    """
    Validate a latitude/longitude pair.

    Args:
        lat: Latitude in degrees
        lon: Longitude in degrees
        context: Context description for error messages

    Returns:
        The coordinate as a (lat, lon) tuple of floats

    Raises:
        ValidationError: If either value is not a finite number in range
    """
    try:
        lat_f = float(lat)
        lon_f = float(lon)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"{context}: Cannot convert to float: ({lat}, {lon})") from e

    if not MIN_LATITUDE_DEGREES <= lat_f <= MAX_LATITUDE_DEGREES:
        raise ValidationError(f"{context}: Latitude must be -90 to 90, got {lat_f}")

    if not MIN_LONGITUDE_DEGREES <= lon_f <= MAX_LONGITUDE_DEGREES:
        raise ValidationError(f"{context}: Longitude must be -180 to 180, got {lon_f}")

    return lat_f, lon_f


def parse_coordinate(text: str, context: str = "Coordinate") -> Coordinate:
    """
    Parse a coordinate given as text, e.g. "41.3851,2.1734".

    Plain "lat,lon" decimal pairs are range-checked as given. Anything else
    is handed to geopy, so degree/minute/second notations are accepted as
    well.

    Raises:
        ValidationError: If the text cannot be parsed into a valid coordinate
    """
    if text is None or not str(text).strip():
        raise ValidationError(f"{context}: Value is empty")

    # Decimal pairs are range-checked here; geopy would wrap longitudes into [-180, 180]
    parts = str(text).split(',')
    if len(parts) == 2:
        try:
            lat, lon = float(parts[0]), float(parts[1])
        except ValueError:
            pass
        else:
            return validate_coordinate(lat, lon, context)

    try:
        point = Point(str(text))
    except ValueError as e:
        raise ValidationError(f"{context}: Cannot parse coordinate '{text}'") from e

    return validate_coordinate(point.latitude, point.longitude, context)


def validate_radius(radius_m: float, context: str = "Radius") -> float:
    """
    Validate the loop detection radius.

    Raises:
        ValidationError: If radius is not within [MIN_LOOP_RADIUS_METERS, MAX_LOOP_RADIUS_METERS]
    """
    try:
        radius = float(radius_m)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"{context}: Cannot convert to float: {radius_m}") from e

    if not MIN_LOOP_RADIUS_METERS <= radius <= MAX_LOOP_RADIUS_METERS:
        raise ValidationError(f"{context}: Must be {MIN_LOOP_RADIUS_METERS}-{MAX_LOOP_RADIUS_METERS}m, got {radius}")

    return radius


def validate_file_upload(uploaded_file: Any, max_size: int = 10 * 1024 * 1024) -> None:
    """
    Validate uploaded file before processing.

    Args:
        uploaded_file: File-like object, optionally with 'name' and 'size'
        max_size: Maximum accepted size in bytes

    Raises:
        ValidationError: If file validation fails
    """
    if uploaded_file is None:
        raise ValidationError("No file uploaded")

    if hasattr(uploaded_file, 'size') and uploaded_file.size > max_size:
        raise ValidationError(
            f"File too large: {uploaded_file.size / 1024 / 1024:.1f}MB (max {max_size / 1024 / 1024:.0f}MB)"
        )

    name = getattr(uploaded_file, 'name', None)
    if isinstance(name, str):
        file_path = Path(name)
        if file_path.suffix.lower() != '.gpx':
            raise ValidationError(f"Invalid file type: {file_path.suffix} (expected .gpx)")

    logger.debug(f"File validation passed: {getattr(uploaded_file, 'name', 'unknown')}")
