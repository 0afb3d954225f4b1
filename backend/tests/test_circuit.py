"""
Tests for circuit template building and lap aggregation (loop mode).
"""

import numpy as np
import pytest

from core.models.segment import IndexRange
from core.segments.circuit import (
    build_circuit_template,
    min_distances_to_circuit,
    scan_laps,
    detect_loop_range,
)
from core.validation import LoopNotDetectedError, NoCompleteLapsError

RADIUS_M = 10.0


class TestBuildCircuitTemplate:
    """Tests for build_circuit_template function."""

    def test_template_is_first_lap(self, three_lap_track):
        """The template runs from the first anchor pass to the loop closure."""
        track, anchor, lap_starts = three_lap_track
        template = build_circuit_template(track, *anchor, RADIUS_M)

        assert template.lap_range == IndexRange(lap_starts[0], lap_starts[0] + 36)
        assert template.point_count == 37
        assert template.samples == track[lap_starts[0]:lap_starts[0] + 37]

    def test_template_keeps_parameters(self, three_lap_track):
        """The template records the anchor and radius it was built with."""
        track, anchor, _ = three_lap_track
        template = build_circuit_template(track, *anchor, RADIUS_M)

        assert template.anchor == anchor
        assert template.radius_m == RADIUS_M

    def test_single_pass_raises(self, track_builder):
        """A track passing the anchor once is not a loop."""
        track = track_builder([(0.0, -0.01), (0.0, 0.0), (0.0, 0.01), (0.0, 0.02)])
        with pytest.raises(LoopNotDetectedError) as exc_info:
            build_circuit_template(track, 0.0, 0.0, RADIUS_M)

        assert exc_info.value.pass_count == 1
        assert exc_info.value.radius_m == RADIUS_M
        assert exc_info.value.sample_count == 4

    def test_anchor_never_passed_raises(self, straight_track):
        """An anchor away from the track has no passes at all."""
        with pytest.raises(LoopNotDetectedError):
            build_circuit_template(straight_track, 5.0, 5.0, RADIUS_M)

    def test_dense_single_pass_raises(self, track_builder):
        """Several samples inside the radius on one pass still do not close a loop."""
        track = track_builder([(0.0, -0.01), (0.0, -0.00003), (0.0, 0.0),
                               (0.0, 0.00003), (0.0, 0.01)])
        with pytest.raises(LoopNotDetectedError):
            build_circuit_template(track, 0.0, 0.0, RADIUS_M)


class TestMinDistancesToCircuit:
    """Tests for min_distances_to_circuit function."""

    def test_template_points_are_on_circuit(self, three_lap_track):
        """Samples belonging to the template are at distance zero."""
        track, anchor, lap_starts = three_lap_track
        template = build_circuit_template(track, *anchor, RADIUS_M)

        distances = min_distances_to_circuit(track, template)

        lap = template.lap_range
        assert np.all(distances[lap.start:lap.end + 1] == 0)

    def test_detours_are_off_circuit(self, three_lap_track):
        """Approach points lie far outside the matching radius."""
        track, anchor, lap_starts = three_lap_track
        template = build_circuit_template(track, *anchor, RADIUS_M)

        distances = min_distances_to_circuit(track, template)

        assert np.all(distances[:lap_starts[0]] > 50)

    def test_one_value_per_sample(self, three_lap_track):
        track, anchor, _ = three_lap_track
        template = build_circuit_template(track, *anchor, RADIUS_M)
        assert len(min_distances_to_circuit(track, template)) == len(track)


class TestScanLaps:
    """Tests for scan_laps function."""

    def test_three_laps_exclude_first(self, three_lap_track):
        """Three identical laps give the range from lap 2's entry to lap 3's entry."""
        track, anchor, lap_starts = three_lap_track
        template = build_circuit_template(track, *anchor, RADIUS_M)

        scan = scan_laps(track, template, RADIUS_M)

        assert scan.lap_entries == (lap_starts[1], lap_starts[2])
        assert scan.index_range == IndexRange(lap_starts[1], lap_starts[2])
        assert scan.lap_count == 2

    def test_first_lap_not_in_range(self, three_lap_track):
        """The lap used as template lies entirely before the extracted range."""
        track, anchor, lap_starts = three_lap_track
        template = build_circuit_template(track, *anchor, RADIUS_M)

        scan = scan_laps(track, template, RADIUS_M)

        assert scan.index_range.start > template.lap_range.end

    def test_four_laps(self, circuit_builder):
        """Every entry after the first lap extends the range."""
        track, anchor, lap_starts = circuit_builder(laps=4)
        template = build_circuit_template(track, *anchor, RADIUS_M)

        scan = scan_laps(track, template, RADIUS_M)

        assert scan.lap_entries == tuple(lap_starts[1:])
        assert scan.index_range == IndexRange(lap_starts[1], lap_starts[3])

    def test_noisy_laps_still_match(self, circuit_builder):
        """Laps a few meters off the template are still recognised."""
        track, anchor, lap_starts = circuit_builder(laps=3, noise_m=3.0)
        template = build_circuit_template(track, *anchor, RADIUS_M)

        scan = scan_laps(track, template, RADIUS_M)

        assert scan.index_range == IndexRange(lap_starts[1], lap_starts[2])

    def test_two_laps_raise(self, circuit_builder):
        """A single repeat gives one entry only, which is not a range."""
        track, anchor, _ = circuit_builder(laps=2)
        template = build_circuit_template(track, *anchor, RADIUS_M)

        with pytest.raises(NoCompleteLapsError) as exc_info:
            scan_laps(track, template, RADIUS_M)

        assert exc_info.value.anchor == anchor
        assert exc_info.value.sample_count == len(track)

    def test_one_lap_raises(self, circuit_builder):
        """A single lap has nothing to repeat."""
        track, anchor, _ = circuit_builder(laps=1)
        template = build_circuit_template(track, *anchor, RADIUS_M)

        with pytest.raises(NoCompleteLapsError):
            scan_laps(track, template, RADIUS_M)


class TestDetectLoopRange:
    """Tests for detect_loop_range function."""

    def test_matches_scan(self, three_lap_track):
        track, anchor, lap_starts = three_lap_track
        assert detect_loop_range(track, anchor, RADIUS_M) == IndexRange(lap_starts[1], lap_starts[2])

    def test_is_deterministic(self, three_lap_track):
        """Running detection twice gives the same range."""
        track, anchor, _ = three_lap_track
        assert detect_loop_range(track, anchor, RADIUS_M) == detect_loop_range(track, anchor, RADIUS_M)
