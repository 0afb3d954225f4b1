"""
Segment materialization.

Turns a resolved index range into the Segment handed to the track writer.
"""

import logging

from core.calculations import cumulative_distances
from core.models.segment import IndexRange, Segment
from core.models.track import TrackSequence, track_coordinates

logger = logging.getLogger(__name__)


def materialize_segment(track: TrackSequence, index_range: IndexRange) -> Segment:
    """
    Crop a track to an index range and compute its distance and time totals.

    Args:
        track: Ordered track samples
        index_range: Inclusive range to keep

    Returns:
        Segment with per-point cumulative distance, total distance in meters
        and elapsed time in seconds

    Raises:
        InvalidRangeError: If the range does not fit the track
    """
    index_range.validate_against(len(track))
    samples = track[index_range.to_slice()]

    latitudes, longitudes = track_coordinates(samples)
    running = cumulative_distances(latitudes, longitudes)

    total_distance = float(running[-1])
    elapsed_time = (samples[-1].timestamp - samples[0].timestamp).total_seconds()

    logger.debug(f"Materialized segment {index_range.start}-{index_range.end}: "
                 f"{len(samples)} points, {total_distance:.1f}m, {elapsed_time:.0f}s")

    return Segment(
        index_range=index_range,
        samples=samples,
        cumulative_distances=tuple(float(d) for d in running),
        total_distance=total_distance,
        elapsed_time=elapsed_time
    )
