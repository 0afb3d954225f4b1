"""
Shared pytest fixtures: synthetic GPS tracks.

Circuit tracks are built around a 200m-radius circle sampled every 10
degrees. The anchor is the circle's east-most point; approaches and
detours run radially east of it so they stay well away from the circle.
"""

import math
from datetime import datetime, timedelta, timezone

import pytest

from core.models.track import TrackSample

METERS_PER_DEGREE_LAT = 6_371_000.0 * math.pi / 180.0

CIRCUIT_CENTER = (45.0, 7.0)
CIRCUIT_RADIUS_M = 200.0
CIRCUIT_POINTS = 36
START_TIME = datetime(2024, 6, 1, 8, 0, 0, tzinfo=timezone.utc)


def offset(east_m, north_m, origin=CIRCUIT_CENTER):
    """Coordinate displaced from origin by meters east/north."""
    lat0, lon0 = origin
    lat = lat0 + north_m / METERS_PER_DEGREE_LAT
    lon = lon0 + east_m / (METERS_PER_DEGREE_LAT * math.cos(math.radians(lat0)))
    return lat, lon


def make_track(coordinates, step_seconds=1, start_time=START_TIME, **measurements):
    """Build a track from (lat, lon) pairs sampled every step_seconds."""
    return tuple(
        TrackSample(
            timestamp=start_time + timedelta(seconds=i * step_seconds),
            latitude=lat,
            longitude=lon,
            **measurements
        )
        for i, (lat, lon) in enumerate(coordinates)
    )


def circle_lap(noise_m=0.0):
    """One traversal of the circle from the anchor, without the closing point."""
    points = []
    for k in range(CIRCUIT_POINTS):
        theta = 2 * math.pi * k / CIRCUIT_POINTS
        jitter = noise_m if k % 2 else -noise_m
        points.append(offset(CIRCUIT_RADIUS_M * math.cos(theta) + jitter,
                             CIRCUIT_RADIUS_M * math.sin(theta) + jitter))
    return points


def radial(distances_m):
    """Points east of the anchor at the given distances outside the circle."""
    return [offset(CIRCUIT_RADIUS_M + d, 0.0) for d in distances_m]


def build_circuit_track(laps=3, noise_m=0.0):
    """
    Approach, then `laps` traversals of the circle separated by detours.

    Returns:
        tuple: (track, anchor, lap_starts) where lap_starts are the indices
        at which each traversal begins
    """
    coordinates = radial([500, 300, 100])
    lap_starts = []

    for lap in range(laps):
        if lap > 0:
            coordinates += radial([100, 300, 500, 300, 100])
        lap_starts.append(len(coordinates))
        # Every lap after the first gets the noise, the template stays clean
        coordinates += circle_lap(noise_m if lap > 0 else 0.0)
        coordinates.append(offset(CIRCUIT_RADIUS_M, 0.0))

    coordinates += radial([100, 300])

    anchor = offset(CIRCUIT_RADIUS_M, 0.0)
    return make_track(coordinates), anchor, lap_starts


@pytest.fixture
def track_builder():
    """Factory for straight synthetic tracks."""
    return make_track


@pytest.fixture
def circuit_builder():
    """Factory for circuit tracks with a configurable number of laps."""
    return build_circuit_track


@pytest.fixture
def three_lap_track():
    """Three identical laps of the circuit."""
    return build_circuit_track(laps=3)


@pytest.fixture
def offset_point():
    """Coordinate displaced from the circuit center by meters east/north."""
    return offset


@pytest.fixture
def straight_track():
    """Ten points heading north along the equator meridian, 0.001 deg apart."""
    return make_track([(i * 0.001, 0.0) for i in range(10)], step_seconds=5)


def track_to_gpx_xml(track, name="circuit"):
    """Serialize a whole track as GPX text."""
    from core.gpx import segment_to_gpx
    from core.models.segment import IndexRange
    from core.segments.materializer import materialize_segment

    segment = materialize_segment(track, IndexRange(0, len(track) - 1))
    return segment_to_gpx(segment, {'name': name}).to_xml()


@pytest.fixture
def gpx_writer():
    """Serialize a track as GPX text."""
    return track_to_gpx_xml


@pytest.fixture
def circuit_gpx_file(tmp_path):
    """Three-lap circuit written to a GPX file; returns (path, anchor, lap_starts)."""
    track, anchor, lap_starts = build_circuit_track(laps=3)
    path = tmp_path / "circuit.gpx"
    path.write_text(track_to_gpx_xml(track), encoding="utf-8")
    return path, anchor, lap_starts
