"""
Tests for segment models, selection factory and the extraction pipeline.
"""

import math

import pytest

from core.constants import DEFAULT_LOOP_RADIUS_METERS, MIN_LOOP_RADIUS_METERS, MAX_LOOP_RADIUS_METERS
from core.models.segment import IndexRange
from core.models.track import track_to_dataframe, dataframe_to_track
from core.segments import (
    TwoPointSelection,
    LoopSelection,
    SegmentSelectorFactory,
    resolve_segment_range,
    extract_segment,
)
from core.validation import (
    ValidationError,
    SegmentDetectionError,
    InsufficientDataError,
    InvalidRangeError,
    LoopNotDetectedError,
    NoCompleteLapsError,
    validate_radius,
)


class TestIndexRange:
    """Tests for IndexRange invariants."""

    def test_start_after_end_raises(self):
        with pytest.raises(InvalidRangeError):
            IndexRange(3, 1)

    def test_negative_start_raises(self):
        with pytest.raises(InvalidRangeError):
            IndexRange(-1, 4)

    def test_ordered_swaps(self):
        assert IndexRange.ordered(7, 2) == IndexRange(2, 7)
        assert IndexRange.ordered(2, 7) == IndexRange(2, 7)

    def test_length_is_inclusive(self):
        assert len(IndexRange(2, 7)) == 6
        assert len(IndexRange(4, 4)) == 1

    def test_to_slice(self):
        assert list(range(10))[IndexRange(2, 4).to_slice()] == [2, 3, 4]

    def test_validate_against(self):
        assert IndexRange(0, 9).validate_against(10) == IndexRange(0, 9)
        with pytest.raises(InvalidRangeError):
            IndexRange(0, 10).validate_against(10)


class TestTrackSample:
    """Tests for TrackSample and DataFrame conversion."""

    def test_measurements_only_present(self, track_builder):
        sample = track_builder([(1.0, 2.0)], heart_rate=140)[0]
        assert sample.measurements() == {'heart_rate': 140}

    def test_measurements_empty(self, straight_track):
        assert straight_track[0].measurements() == {}

    def test_dataframe_conversion(self, track_builder):
        """Converting to a DataFrame and back keeps positions and measurements."""
        track = track_builder([(1.0, 2.0), (1.001, 2.0)], heart_rate=150, speed=3.5)

        df = track_to_dataframe(track)
        restored = dataframe_to_track(df)

        assert len(df) == 2
        assert restored == track

    def test_rows_without_position_dropped(self, straight_track):
        df = track_to_dataframe(straight_track)
        df.loc[3, 'latitude'] = math.nan

        restored = dataframe_to_track(df)

        assert len(restored) == len(straight_track) - 1

    def test_empty_track_dataframe(self):
        assert track_to_dataframe(()).empty


class TestSegmentSelectorFactory:
    """Tests for SegmentSelectorFactory."""

    def test_available_modes(self):
        modes = SegmentSelectorFactory.get_available_modes()
        assert set(modes) == {'two_point', 'loop'}

    def test_create_is_case_insensitive(self):
        selector = SegmentSelectorFactory.create_selector('LOOP')
        assert selector.name == 'Loop'

    def test_unknown_mode_raises(self):
        with pytest.raises(ValidationError, match="Unknown selection mode"):
            SegmentSelectorFactory.create_selector('spiral')


class TestSelections:
    """Tests for selection parameter objects."""

    def test_loop_default_radius(self):
        assert LoopSelection(anchor=(1.0, 2.0)).radius_m == DEFAULT_LOOP_RADIUS_METERS

    def test_to_dict(self):
        selection = TwoPointSelection(start=(1.0, 2.0), end=(3.0, 4.0))
        assert selection.to_dict() == {'mode': 'two_point', 'start': [1.0, 2.0], 'end': [3.0, 4.0]}


class TestExtractSegment:
    """Tests for the extraction pipeline."""

    def test_two_point(self, straight_track):
        selection = TwoPointSelection(start=(0.002, 0.0), end=(0.0062, 0.0))
        segment = extract_segment(straight_track, selection)

        assert segment.index_range == IndexRange(2, 6)
        assert segment.samples == straight_track[2:7]
        assert segment.elapsed_time == 20

    def test_two_point_reversed(self, straight_track):
        """Reversed start and end give the same segment."""
        forward = extract_segment(straight_track, TwoPointSelection((0.002, 0.0), (0.006, 0.0)))
        backward = extract_segment(straight_track, TwoPointSelection((0.006, 0.0), (0.002, 0.0)))
        assert forward == backward

    def test_loop(self, three_lap_track):
        track, anchor, lap_starts = three_lap_track
        segment = extract_segment(track, LoopSelection(anchor=anchor, radius_m=10.0))

        assert segment.index_range == IndexRange(lap_starts[1], lap_starts[2])
        assert segment.point_count == lap_starts[2] - lap_starts[1] + 1

    def test_deterministic(self, three_lap_track):
        """Extracting twice from the same input gives equal segments."""
        track, anchor, _ = three_lap_track
        selection = LoopSelection(anchor=anchor, radius_m=10.0)
        assert extract_segment(track, selection) == extract_segment(track, selection)

    def test_single_point_track_raises(self, track_builder):
        track = track_builder([(0.0, 0.0)])
        with pytest.raises(InsufficientDataError) as exc_info:
            extract_segment(track, TwoPointSelection((0.0, 0.0), (0.0, 0.0)))
        assert exc_info.value.sample_count == 1

    def test_empty_track_raises(self):
        with pytest.raises(InsufficientDataError):
            resolve_segment_range((), TwoPointSelection((0.0, 0.0), (0.0, 0.0)))

    def test_loop_without_repeats_raises(self, circuit_builder):
        track, anchor, _ = circuit_builder(laps=2)
        with pytest.raises(NoCompleteLapsError):
            extract_segment(track, LoopSelection(anchor=anchor, radius_m=10.0))

    def test_loop_on_straight_track_raises(self, straight_track):
        with pytest.raises(LoopNotDetectedError):
            extract_segment(straight_track, LoopSelection(anchor=(0.005, 0.0), radius_m=10.0))

    def test_detection_errors_are_validation_errors(self, straight_track):
        """Callers catching ValidationError also see detection failures."""
        with pytest.raises(ValidationError):
            extract_segment(straight_track, LoopSelection(anchor=(0.005, 0.0), radius_m=10.0))
        assert issubclass(SegmentDetectionError, ValidationError)

    @pytest.mark.parametrize("anchor", [(91.0, 0.0), (0.0, -181.0)])
    def test_invalid_anchor_raises(self, straight_track, anchor):
        with pytest.raises(ValidationError):
            extract_segment(straight_track, LoopSelection(anchor=anchor))

    @pytest.mark.parametrize("radius", [0, 0.5, -5, 10_000])
    def test_invalid_radius_raises(self, straight_track, radius):
        with pytest.raises(ValidationError, match="Radius"):
            extract_segment(straight_track, LoopSelection(anchor=(0.005, 0.0), radius_m=radius))

    @pytest.mark.parametrize("radius", [MIN_LOOP_RADIUS_METERS, MAX_LOOP_RADIUS_METERS])
    def test_radius_bounds_accepted(self, radius):
        assert validate_radius(radius) == radius
