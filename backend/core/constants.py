"""
Constants for the Segment Lab application.

This module contains all the mathematical, algorithmic, and domain-specific
constants used throughout the codebase. Constants are grouped by their purpose
and documented with their units where applicable.
"""

# =============================================================================
# CONVERSION FACTORS
# =============================================================================

# Distance conversions
METERS_PER_KILOMETER = 1000

# =============================================================================
# GEODESY
# =============================================================================

EARTH_RADIUS_METERS = 6_371_000.0  # Mean Earth radius used by haversine

# Valid coordinate ranges (degrees)
MIN_LATITUDE_DEGREES = -90.0
MAX_LATITUDE_DEGREES = 90.0
MIN_LONGITUDE_DEGREES = -180.0
MAX_LONGITUDE_DEGREES = 180.0

# =============================================================================
# SEGMENT DETECTION
# =============================================================================

# A track needs at least this many samples before any detection runs
MIN_TRACK_POINTS = 2

# Loop mode: radius around the anchor and around the circuit template
MIN_LOOP_RADIUS_METERS = 1.0  # Below GPS accuracy nothing would ever match
DEFAULT_LOOP_RADIUS_METERS = 10.0
MAX_LOOP_RADIUS_METERS = 5000.0  # Anything larger swallows whole tracks

# Loop mode needs the anchor to be passed at least twice (start and closure)
MIN_ANCHOR_PASSES = 2

# =============================================================================
# SELECTION MODES
# =============================================================================

SELECTION_MODE_TWO_POINT = "two_point"
SELECTION_MODE_LOOP = "loop"

# =============================================================================
# GPX EXTENSIONS
# =============================================================================

GARMIN_TPX_NAMESPACE = "http://www.garmin.com/xmlschemas/TrackPointExtension/v2"
GARMIN_TPX_PREFIX = "gpxtpx"
GPXDATA_NAMESPACE = "http://www.cluetrust.com/XML/GPXDATA/1/0"
GPXDATA_PREFIX = "gpxdata"

# =============================================================================
# VALIDATION
# =============================================================================

assert MIN_LOOP_RADIUS_METERS <= DEFAULT_LOOP_RADIUS_METERS <= MAX_LOOP_RADIUS_METERS, \
    "Default loop radius must be within the allowed range"
