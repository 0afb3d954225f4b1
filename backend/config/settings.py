"""
Application settings and configuration.

This module contains application-specific configuration and defaults.
For algorithmic constants, see core.constants module.
"""

import os
import logging
from typing import Dict, Any

# Import algorithmic constants from core module
from core.constants import (
    DEFAULT_LOOP_RADIUS_METERS,
    MIN_LOOP_RADIUS_METERS,
    MAX_LOOP_RADIUS_METERS,
    MIN_TRACK_POINTS,
    SELECTION_MODE_TWO_POINT
)

# App information
APP_NAME = "SegmentLab"
APP_VERSION = "1.0.0"
APP_DESCRIPTION = "Cut start/end stretches and repeated laps out of GPS tracks"

# Segment selection defaults (reference core constants where appropriate)
DEFAULT_SELECTION_MODE = SELECTION_MODE_TWO_POINT
DEFAULT_LOOP_RADIUS = DEFAULT_LOOP_RADIUS_METERS  # From core.constants
MIN_LOOP_RADIUS = MIN_LOOP_RADIUS_METERS  # From core.constants
MAX_LOOP_RADIUS = MAX_LOOP_RADIUS_METERS  # From core.constants
MIN_POINTS = MIN_TRACK_POINTS  # From core.constants

# Output parameters
OUTPUT_SUFFIX = "_segment"  # ride.gpx -> ride_segment.gpx
GPX_MEDIA_TYPE = "application/gpx+xml"

# Upload limits
MAX_UPLOAD_BYTES = 50 * 1024 * 1024  # 50MB
MIN_UPLOAD_BYTES = 100  # Smaller files cannot hold a GPX track

# API server
API_HOST = os.environ.get("SEGMENT_LAB_HOST", "0.0.0.0")
API_PORT = int(os.environ.get("SEGMENT_LAB_PORT", "8000"))
CORS_ALLOW_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("SEGMENT_LAB_CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]

# Logging configuration
LOGGING_CONFIG = {
    "level": logging.INFO,
    "format": '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    "handlers": [
        logging.StreamHandler(),
    ]
}


# =============== Configuration Classes ===============
# These classes provide typed access to configuration sections

class SegmentConfig:
    """Configuration parameters for segment selection and extraction."""
    SELECTION_MODE = DEFAULT_SELECTION_MODE
    LOOP_RADIUS = DEFAULT_LOOP_RADIUS
    MIN_LOOP_RADIUS = MIN_LOOP_RADIUS
    MAX_LOOP_RADIUS = MAX_LOOP_RADIUS
    MIN_POINTS = MIN_POINTS
    OUTPUT_SUFFIX = OUTPUT_SUFFIX

    @classmethod
    def as_dict(cls) -> Dict[str, Any]:
        """Get segment configuration as a dictionary."""
        return {
            'selection_mode': cls.SELECTION_MODE,
            'loop_radius': cls.LOOP_RADIUS,
            'min_loop_radius': cls.MIN_LOOP_RADIUS,
            'max_loop_radius': cls.MAX_LOOP_RADIUS,
            'min_points': cls.MIN_POINTS,
            'output_suffix': cls.OUTPUT_SUFFIX,
        }
