"""
Segment selection factory and extraction pipeline.

This module provides a factory pattern for the ways a segment can be
selected from a track. Currently supports 'two_point' (start and end
coordinates) and 'loop' (a single anchor defining a repeated circuit).
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Type, Tuple, Union

from core.constants import (
    DEFAULT_LOOP_RADIUS_METERS,
    SELECTION_MODE_TWO_POINT,
    SELECTION_MODE_LOOP
)
from core.models.segment import IndexRange, Segment
from core.models.track import TrackSequence
from core.segments.circuit import detect_loop_range
from core.segments.locator import resolve_two_point_range
from core.segments.materializer import materialize_segment
from core.validation import (
    ValidationError, validate_track_samples, validate_coordinate, validate_radius
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TwoPointSelection:
    """Select the stretch between the points closest to start and end."""
    start: Tuple[float, float]
    end: Tuple[float, float]

    mode = SELECTION_MODE_TWO_POINT

    def to_dict(self) -> Dict[str, object]:
        return {'mode': self.mode, 'start': list(self.start), 'end': list(self.end)}


@dataclass(frozen=True)
class LoopSelection:
    """Select the repeated laps of a circuit passing through anchor."""
    anchor: Tuple[float, float]
    radius_m: float = DEFAULT_LOOP_RADIUS_METERS

    mode = SELECTION_MODE_LOOP

    def to_dict(self) -> Dict[str, object]:
        return {'mode': self.mode, 'anchor': list(self.anchor), 'radius_m': self.radius_m}


Selection = Union[TwoPointSelection, LoopSelection]


class SegmentSelector(ABC):
    """Abstract base class for segment selection modes."""

    @abstractmethod
    def resolve(self, track: TrackSequence, selection: Selection) -> IndexRange:
        """
        Resolve the index range a selection refers to.

        Args:
            track: Ordered track samples (at least two)
            selection: Selection parameters for this mode

        Returns:
            IndexRange with start <= end
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name of the mode."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Description of the mode."""
        pass


class TwoPointSelector(SegmentSelector):
    """Nearest-point selection between a start and an end coordinate."""

    def resolve(self, track: TrackSequence, selection: TwoPointSelection) -> IndexRange:
        start = validate_coordinate(*selection.start, context="Start coordinate")
        end = validate_coordinate(*selection.end, context="End coordinate")
        return resolve_two_point_range(track, start, end)

    @property
    def name(self) -> str:
        return "Two point"

    @property
    def description(self) -> str:
        return "Stretch between the track points closest to a start and an end coordinate"


class LoopSelector(SegmentSelector):
    """
    Circuit selection around an anchor coordinate.

    The first lap is used as the circuit template and is not part of the
    result; the range covers the laps that repeat it.
    """

    def resolve(self, track: TrackSequence, selection: LoopSelection) -> IndexRange:
        anchor = validate_coordinate(*selection.anchor, context="Anchor coordinate")
        radius_m = validate_radius(selection.radius_m)
        return detect_loop_range(track, anchor, radius_m)

    @property
    def name(self) -> str:
        return "Loop"

    @property
    def description(self) -> str:
        return "Repeated laps of the circuit through an anchor coordinate (first lap excluded)"


class SegmentSelectorFactory:
    """Factory for creating segment selectors."""

    _selectors: Dict[str, Type[SegmentSelector]] = {
        SELECTION_MODE_TWO_POINT: TwoPointSelector,
        SELECTION_MODE_LOOP: LoopSelector,
    }

    @classmethod
    def create_selector(cls, mode: str) -> SegmentSelector:
        """
        Create a selector for the specified mode.

        Args:
            mode: Selection mode ('two_point' or 'loop')

        Returns:
            SegmentSelector instance

        Raises:
            ValidationError: If mode is not supported
        """
        mode_lower = str(mode).lower()

        if mode_lower not in cls._selectors:
            raise ValidationError(
                f"Unknown selection mode '{mode}', expected one of {sorted(cls._selectors)}"
            )

        return cls._selectors[mode_lower]()

    @classmethod
    def get_available_modes(cls) -> Dict[str, str]:
        """Get available selection modes with descriptions."""
        result = {}
        for mode_name, selector_class in cls._selectors.items():
            selector = selector_class()
            result[mode_name] = f"{selector.name}: {selector.description}"
        return result


def resolve_segment_range(track: TrackSequence, selection: Selection) -> IndexRange:
    """
    Resolve the index range for any selection.

    Raises:
        InsufficientDataError: If the track has fewer than two samples
    """
    validate_track_samples(track, f"Segment detection ({selection.mode})")

    selector = SegmentSelectorFactory.create_selector(selection.mode)
    index_range = selector.resolve(track, selection)

    # Ranges are built normalized; a range past the track end is a bug upstream
    return index_range.validate_against(len(track))


def extract_segment(track: TrackSequence, selection: Selection) -> Segment:
    """
    Extract a segment from a track.

    This is the main entry point for segment detection. It resolves the
    index range with the selector for the selection's mode and crops the
    track to it.

    Args:
        track: Ordered track samples
        selection: TwoPointSelection or LoopSelection

    Returns:
        Materialized Segment
    """
    logger.info(f"Starting segment detection in {selection.mode} mode on {len(track)} points")

    index_range = resolve_segment_range(track, selection)
    segment = materialize_segment(track, index_range)

    logger.info(f"Extracted segment {index_range.start}-{index_range.end}: "
                f"{segment.point_count} points, {segment.total_distance:.1f}m, "
                f"{segment.elapsed_time:.0f}s")
    return segment
