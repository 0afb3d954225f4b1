"""
Shared calculations module.

This module contains the distance calculations used by segment detection
and segment materialization. Scalar functions work on a single pair of
coordinates, the array variants work on whole tracks at once.
"""

import math
import numpy as np
from typing import Sequence
import logging

from core.constants import EARTH_RADIUS_METERS, METERS_PER_KILOMETER

logger = logging.getLogger(__name__)


# =============================================================================
# BASIC GEOMETRIC CALCULATIONS
# =============================================================================

def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate the great-circle distance between two points in meters.

    Uses the haversine formula on a sphere with the mean Earth radius.
    The argument of the square root is clamped to [0, 1] so that rounding
    near antipodal or identical points never leaves the domain of asin.

    Args:
        lat1, lon1: First point in degrees
        lat2, lon2: Second point in degrees

    Returns:
        Distance in meters (always >= 0)
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    a = min(1.0, max(0.0, a))

    return 2 * EARTH_RADIUS_METERS * math.asin(math.sqrt(a))


def haversine_distances(latitudes: Sequence[float],
                        longitudes: Sequence[float],
                        lat: float,
                        lon: float) -> np.ndarray:
    """
    Calculate distances from every point of a track to a single target.

    Same formula and clamping as haversine_distance, vectorised with numpy.

    Args:
        latitudes: Track latitudes in degrees
        longitudes: Track longitudes in degrees
        lat, lon: Target point in degrees

    Returns:
        Array of distances in meters, one per track point
    """
    phi1 = np.radians(np.asarray(latitudes, dtype=float))
    lambda1 = np.radians(np.asarray(longitudes, dtype=float))
    phi2 = math.radians(lat)
    lambda2 = math.radians(lon)

    a = np.sin((phi2 - phi1) / 2) ** 2 + np.cos(phi1) * math.cos(phi2) * np.sin((lambda2 - lambda1) / 2) ** 2
    a = np.clip(a, 0.0, 1.0)

    return 2 * EARTH_RADIUS_METERS * np.arcsin(np.sqrt(a))


def cumulative_distances(latitudes: Sequence[float], longitudes: Sequence[float]) -> np.ndarray:
    """
    Calculate the running distance along a track.

    The first point has distance 0, every following point adds the haversine
    distance from its predecessor.

    Args:
        latitudes: Track latitudes in degrees
        longitudes: Track longitudes in degrees

    Returns:
        Array of cumulative distances in meters
    """
    count = len(latitudes)
    if count == 0:
        return np.zeros(0)

    steps = [0.0]
    for i in range(1, count):
        steps.append(haversine_distance(latitudes[i - 1], longitudes[i - 1],
                                        latitudes[i], longitudes[i]))

    return np.cumsum(steps)


# =============================================================================
# UNIT CONVERSIONS
# =============================================================================

def meters_to_kilometers(distance_m: float) -> float:
    """Convert meters to kilometers."""
    return distance_m / METERS_PER_KILOMETER
