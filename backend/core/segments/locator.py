"""
Nearest-point and radius-pass search.

These functions answer "where does the track come closest to this point"
and "when is the track within this radius of a point". Both scan the whole
track; tracks of a single activity are small enough for a full numpy scan.
"""

import logging
from typing import List, Tuple

import numpy as np

from core.calculations import haversine_distances
from core.models.segment import IndexRange
from core.models.track import TrackSequence, track_coordinates
from core.validation import InsufficientDataError, LoopNotDetectedError

logger = logging.getLogger(__name__)


def distances_to_point(track: TrackSequence, lat: float, lon: float) -> np.ndarray:
    """Distance in meters from every sample of the track to (lat, lon)."""
    latitudes, longitudes = track_coordinates(track)
    return haversine_distances(latitudes, longitudes, lat, lon)


def nearest_index(track: TrackSequence, target_lat: float, target_lon: float) -> int:
    """
    Find the sample closest to a target coordinate.

    Args:
        track: Ordered track samples
        target_lat, target_lon: Target coordinate in degrees

    Returns:
        Index of the closest sample. When several samples share the minimum
        distance the earliest one wins.

    Raises:
        InsufficientDataError: If the track is empty
    """
    if len(track) == 0:
        raise InsufficientDataError(0)

    distances = distances_to_point(track, target_lat, target_lon)
    # argmin returns the first occurrence of the minimum
    idx = int(np.argmin(distances))

    logger.debug(f"Nearest point to ({target_lat:.6f}, {target_lon:.6f}) is #{idx} "
                 f"at {distances[idx]:.1f}m")
    return idx


def resolve_two_point_range(track: TrackSequence,
                            start: Tuple[float, float],
                            end: Tuple[float, float]) -> IndexRange:
    """
    Resolve the index range between the points closest to start and end.

    Start and end are located independently; if the end is reached before
    the start the two indices are swapped.

    Args:
        track: Ordered track samples
        start: (lat, lon) of the segment start
        end: (lat, lon) of the segment end

    Returns:
        Normalized IndexRange
    """
    start_idx = nearest_index(track, *start)
    end_idx = nearest_index(track, *end)

    if start_idx > end_idx:
        logger.info(f"End point precedes start point in track order, swapping {start_idx} <-> {end_idx}")

    return IndexRange.ordered(start_idx, end_idx)


def passes_within(track: TrackSequence, lat: float, lon: float, radius_m: float) -> List[int]:
    """
    Find every sample within a radius of a coordinate.

    Args:
        track: Ordered track samples
        lat, lon: Center coordinate in degrees
        radius_m: Radius in meters (inclusive)

    Returns:
        Indices of matching samples in ascending order
    """
    distances = distances_to_point(track, lat, lon)
    passes = np.flatnonzero(distances <= radius_m).tolist()

    logger.debug(f"{len(passes)} points within {radius_m}m of ({lat:.6f}, {lon:.6f})")
    return passes


def find_loop_closure(track: TrackSequence,
                      lat: float,
                      lon: float,
                      radius_m: float,
                      after_index: int) -> int:
    """
    Find where the track comes back into a radius after leaving it.

    The scan starts right after after_index. A sample only counts as the
    closure once the track has been outside the radius at least once since
    the scan started.

    Args:
        track: Ordered track samples
        lat, lon: Center coordinate in degrees
        radius_m: Radius in meters (inclusive)
        after_index: Index the loop starts at

    Returns:
        Index of the closure sample

    Raises:
        LoopNotDetectedError: If the track never returns into the radius
    """
    distances = distances_to_point(track, lat, lon)
    left_radius = False

    for idx in range(after_index + 1, len(track)):
        inside = distances[idx] <= radius_m
        if not inside:
            left_radius = True
        elif left_radius:
            logger.debug(f"Loop starting at #{after_index} closes at #{idx}")
            return idx

    raise LoopNotDetectedError(
        (lat, lon), radius_m, len(track),
        reason="Loop closure not detected" if left_radius else "Track never leaves the anchor radius"
    )
