"""
Services package.

Provides business logic layer between API/CLI and core algorithms.

Modules:
    segment_service: Extraction pipeline for GPX tracks
"""

from services.segment_service import (
    SegmentExtractionResult,
    build_selection,
    extract_segment_from_track,
    extract_segment_from_file,
)

__all__ = [
    'SegmentExtractionResult',
    'build_selection',
    'extract_segment_from_track',
    'extract_segment_from_file',
]
