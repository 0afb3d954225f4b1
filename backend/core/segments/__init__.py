"""
Segments package.

This package contains functionality for segment detection and extraction.
Clean, focused interface with no circular dependencies.
"""

# Core segment detection functions
from .locator import (
    nearest_index,
    resolve_two_point_range,
    passes_within,
    find_loop_closure,
)
from .circuit import (
    build_circuit_template,
    min_distances_to_circuit,
    scan_laps,
    detect_loop_range,
)
from .materializer import materialize_segment
from .factory import (
    TwoPointSelection,
    LoopSelection,
    SegmentSelectorFactory,
    resolve_segment_range,
    extract_segment,
)

# Segment models
from core.models.segment import IndexRange, CircuitTemplate, LapScan, Segment

# Clean public API - only segment detection and models
__all__ = [
    # Main entry point
    'extract_segment',
    'resolve_segment_range',

    # Selection modes
    'TwoPointSelection',
    'LoopSelection',
    'SegmentSelectorFactory',

    # Modular detection functions
    'nearest_index',
    'resolve_two_point_range',
    'passes_within',
    'find_loop_closure',
    'build_circuit_template',
    'min_distances_to_circuit',
    'scan_laps',
    'detect_loop_range',
    'materialize_segment',

    # Models
    'IndexRange',
    'CircuitTemplate',
    'LapScan',
    'Segment',
]
