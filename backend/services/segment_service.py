"""
Shared segment extraction service.

This module provides a unified extraction pipeline so that the command line
tool and the API produce identical segments for identical input.
"""

import logging
from typing import Dict, Any, Optional, Tuple, Union

from core.gpx import load_gpx_file, segment_to_gpx
from core.models.segment import Segment
from core.models.track import TrackSequence
from core.segments import TwoPointSelection, LoopSelection, extract_segment
from core.validation import ValidationError, parse_coordinate
from config.settings import DEFAULT_LOOP_RADIUS

logger = logging.getLogger(__name__)

CoordinateInput = Union[str, Tuple[float, float], None]


class SegmentExtractionResult:
    """Container for segment extraction results."""

    def __init__(self,
                 segment: Segment,
                 selection: Union[TwoPointSelection, LoopSelection],
                 metadata: Dict[str, Any],
                 source_point_count: int,
                 filename: str):
        self.segment = segment
        self.selection = selection
        self.metadata = metadata
        self.source_point_count = source_point_count
        self.filename = filename

    @property
    def index_range(self):
        return self.segment.index_range

    def summary(self) -> Dict[str, Any]:
        """Summary of the extraction for display and API responses."""
        summary = self.segment.to_dict()
        summary.update({
            'filename': self.filename,
            'source_point_count': self.source_point_count,
            'selection': self.selection.to_dict(),
            'distance_km': self.segment.distance_km,
        })
        return summary

    def to_gpx_xml(self) -> str:
        """Serialize the extracted segment as GPX."""
        return segment_to_gpx(self.segment, self.metadata).to_xml()


def _coordinate(value: CoordinateInput, context: str) -> Tuple[float, float]:
    if isinstance(value, str):
        return parse_coordinate(value, context)
    return float(value[0]), float(value[1])


def build_selection(start: CoordinateInput = None,
                    end: CoordinateInput = None,
                    loop: bool = False,
                    radius_m: float = DEFAULT_LOOP_RADIUS) -> Union[TwoPointSelection, LoopSelection]:
    """
    Build a selection from user input.

    Loop mode uses start as the anchor and ignores end. Coordinates may be
    given as (lat, lon) tuples or as text such as "41.38,2.17".

    Raises:
        ValidationError: If a required coordinate is missing or invalid
    """
    if start is None:
        raise ValidationError("A start coordinate is required")

    if loop:
        return LoopSelection(anchor=_coordinate(start, "Anchor coordinate"), radius_m=radius_m)

    if end is None:
        raise ValidationError("An end coordinate is required unless loop mode is used")

    return TwoPointSelection(
        start=_coordinate(start, "Start coordinate"),
        end=_coordinate(end, "End coordinate")
    )


def extract_segment_from_track(track: TrackSequence,
                               selection: Union[TwoPointSelection, LoopSelection],
                               filename: str = "current_track.gpx",
                               metadata: Optional[Dict[str, Any]] = None) -> SegmentExtractionResult:
    """
    Extract a segment from a track that's already loaded.

    Args:
        track: Ordered track samples
        selection: Two-point or loop selection
        filename: Name for the track (for display purposes)
        metadata: Optional metadata dict

    Returns:
        SegmentExtractionResult

    Raises:
        ValidationError: If the selection is invalid or no segment is found
    """
    if metadata is None:
        metadata = {}

    try:
        logger.info(f"Extracting segment from {filename} with {len(track)} points")
        segment = extract_segment(track, selection)

    except ValidationError as e:
        logger.error(f"Error extracting segment from {filename}: {e}")
        raise

    return SegmentExtractionResult(
        segment=segment,
        selection=selection,
        metadata=metadata,
        source_point_count=len(track),
        filename=filename
    )


def extract_segment_from_file(file,
                              selection: Union[TwoPointSelection, LoopSelection],
                              filename: Optional[str] = None) -> SegmentExtractionResult:
    """
    Load a GPX file and extract a segment from it.

    This function loads the file and delegates to extract_segment_from_track
    for consistent processing across all entry points.

    Args:
        file: File-like object containing GPX data
        selection: Two-point or loop selection
        filename: Display name, defaults to the file's name

    Returns:
        SegmentExtractionResult
    """
    if filename is None:
        filename = getattr(file, 'name', None) or 'uploaded.gpx'

    try:
        track, metadata = load_gpx_file(file)
        logger.info(f"Loaded {filename} with {len(track)} points")

    except ValidationError as e:
        logger.error(f"Error loading {filename}: {e}")
        raise

    return extract_segment_from_track(track, selection, filename=filename, metadata=metadata)
