"""
Circuit detection for loop mode.

Loop mode works in two steps. First one full lap is cut out of the track,
starting at the first pass through the anchor radius and ending where the
track comes back into it. That lap becomes the circuit template. Then the
whole track is walked again, and every sample is classified as on or off
the circuit by its distance to the nearest template point.

GPS noise makes laps differ point by point, which is why laps are matched
against the template by proximity rather than by coordinates.

The first lap is consumed building the template and is not part of the
extracted range: the range starts at the first circuit entry after a lap
has been completed and ends at the last circuit entry of the track.
"""

import logging
from typing import Tuple

import numpy as np

from core.calculations import haversine_distances
from core.constants import MIN_ANCHOR_PASSES
from core.models.segment import CircuitTemplate, IndexRange, LapScan
from core.models.track import TrackSequence, track_coordinates
from core.segments.locator import passes_within, find_loop_closure
from core.validation import LoopNotDetectedError, NoCompleteLapsError

logger = logging.getLogger(__name__)


def build_circuit_template(track: TrackSequence,
                           anchor_lat: float,
                           anchor_lon: float,
                           radius_m: float) -> CircuitTemplate:
    """
    Cut the first full lap around an anchor coordinate out of the track.

    Args:
        track: Ordered track samples
        anchor_lat, anchor_lon: Anchor coordinate in degrees
        radius_m: Radius around the anchor in meters

    Returns:
        CircuitTemplate holding samples [first pass, loop closure]

    Raises:
        LoopNotDetectedError: If the anchor is passed fewer than twice or the
            loop never closes
    """
    passes = passes_within(track, anchor_lat, anchor_lon, radius_m)

    if len(passes) < MIN_ANCHOR_PASSES:
        raise LoopNotDetectedError(
            (anchor_lat, anchor_lon), radius_m, len(track),
            pass_count=len(passes),
            reason="Anchor point was not passed twice"
        )

    lap_start = passes[0]
    lap_end = find_loop_closure(track, anchor_lat, anchor_lon, radius_m, lap_start)
    lap_range = IndexRange(lap_start, lap_end)

    logger.info(f"Circuit template: points {lap_start}-{lap_end} ({len(lap_range)} points)")

    return CircuitTemplate(
        anchor=(anchor_lat, anchor_lon),
        radius_m=radius_m,
        lap_range=lap_range,
        samples=track[lap_range.to_slice()]
    )


def min_distances_to_circuit(track: TrackSequence, template: CircuitTemplate) -> np.ndarray:
    """
    Distance from every sample of the track to its nearest template point.

    Args:
        track: Ordered track samples
        template: Circuit template

    Returns:
        Array of distances in meters, one per track sample
    """
    latitudes, longitudes = track_coordinates(track)
    template_lats, template_lons = template.coordinates

    nearest = np.full(len(track), np.inf)
    for lat, lon in zip(template_lats, template_lons):
        np.minimum(nearest, haversine_distances(latitudes, longitudes, lat, lon), out=nearest)

    return nearest


def scan_laps(track: TrackSequence, template: CircuitTemplate, radius_m: float) -> LapScan:
    """
    Walk the track and collect circuit entries after the first completed lap.

    Each sample is on the circuit when it is within radius_m of any template
    point. Leaving the circuit marks a lap as completed; every later entry
    onto the circuit is recorded.

    Args:
        track: Ordered track samples
        template: Circuit template
        radius_m: Matching radius in meters

    Returns:
        LapScan with the recorded entries and the range they span

    Raises:
        NoCompleteLapsError: If fewer than two entries follow the first lap
    """
    distances = min_distances_to_circuit(track, template)

    on_circuit = False
    completed_lap = False
    entries = []

    for idx, distance in enumerate(distances):
        if not on_circuit and distance <= radius_m:
            on_circuit = True
            if completed_lap:
                entries.append(idx)
        elif on_circuit and distance > radius_m:
            on_circuit = False
            completed_lap = True

    if len(entries) < 2 or entries[-1] <= entries[0]:
        logger.warning(f"Only {len(entries)} circuit entries after the first lap")
        raise NoCompleteLapsError(template.anchor, radius_m, len(track))

    index_range = IndexRange(entries[0], entries[-1])
    logger.info(f"Detected {len(entries)} circuit entries after the first lap, "
                f"range {index_range.start}-{index_range.end}")

    return LapScan(lap_entries=tuple(entries), index_range=index_range)


def detect_loop_range(track: TrackSequence,
                      anchor: Tuple[float, float],
                      radius_m: float) -> IndexRange:
    """
    Resolve the loop mode index range for an anchor coordinate.

    Args:
        track: Ordered track samples
        anchor: (lat, lon) of the anchor
        radius_m: Radius in meters used for the anchor and the circuit

    Returns:
        IndexRange spanning the repeated laps
    """
    template = build_circuit_template(track, anchor[0], anchor[1], radius_m)
    return scan_laps(track, template, radius_m).index_range
