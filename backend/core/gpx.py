"""
GPX file parsing and writing.

This module contains functions for loading GPX files into tracks and for
writing extracted segments back out as GPX.
"""

import os
import gpxpy
import gpxpy.gpx
import logging
import xml.etree.ElementTree as ET
from typing import Tuple, Dict, Optional, Any

from core.constants import (
    GARMIN_TPX_NAMESPACE, GARMIN_TPX_PREFIX,
    GPXDATA_NAMESPACE, GPXDATA_PREFIX
)
from core.models.segment import Segment
from core.models.track import TrackSample, TrackSequence
from core.validation import validate_file_upload, ValidationError

logger = logging.getLogger(__name__)


def _local_name(tag: str) -> str:
    """Strip the namespace from an XML tag."""
    return tag.rsplit('}', 1)[-1]


def _read_extensions(point: gpxpy.gpx.GPXTrackPoint) -> Dict[str, str]:
    """Collect heart rate, cadence and speed from Garmin track point extensions."""
    values = {}
    for extension in point.extensions:
        for element in extension.iter():
            name = _local_name(element.tag)
            if name in ('hr', 'cad', 'speed') and element.text:
                values[name] = element.text.strip()
    return values


def _parse_number(text: Optional[str], cast, field: str) -> Optional[Any]:
    if text is None:
        return None
    try:
        return cast(float(text))
    except ValueError:
        logger.debug(f"Ignoring unparseable {field} value: {text!r}")
        return None


def _point_to_sample(point: gpxpy.gpx.GPXTrackPoint) -> TrackSample:
    extensions = _read_extensions(point)

    speed = point.speed if point.speed is not None else _parse_number(extensions.get('speed'), float, 'speed')

    return TrackSample(
        timestamp=point.time,
        latitude=point.latitude,
        longitude=point.longitude,
        heart_rate=_parse_number(extensions.get('hr'), int, 'heart rate'),
        speed=speed,
        cadence=_parse_number(extensions.get('cad'), int, 'cadence'),
        altitude=point.elevation
    )


def load_gpx_file(gpx_file) -> Tuple[TrackSequence, Dict[str, Any]]:
    """
    Load and parse a GPX file into a track.

    Points without a position or without a timestamp cannot take part in
    segment detection and are dropped.

    Args:
        gpx_file: A file-like object (or string) containing GPX data

    Returns:
        tuple: (TrackSequence in file order, dict with metadata)

    Raises:
        ValidationError: If file validation or parsing fails
    """
    try:
        # Validate the uploaded file
        validate_file_upload(gpx_file)

        # Parse the GPX file
        gpx = gpxpy.parse(gpx_file)

        if not gpx.tracks:
            raise ValidationError("GPX file contains no tracks")

    except gpxpy.gpx.GPXException as e:
        raise ValidationError(f"Invalid GPX file format: {str(e)}") from e
    except ValidationError:
        raise
    except Exception as e:
        raise ValidationError(f"Failed to parse GPX file: {str(e)}") from e

    # Extract metadata
    metadata = {
        'name': None,
        'description': None,
        'time': None,
        'author': None
    }

    # Try to get the track name from GPX data
    if gpx.tracks[0].name:
        metadata['name'] = gpx.tracks[0].name
    elif isinstance(getattr(gpx_file, 'name', None), str):
        # Use the filename if available
        filename = os.path.basename(gpx_file.name)
        metadata['name'] = os.path.splitext(filename)[0]

    # Extract other metadata if available
    if gpx.description:
        metadata['description'] = gpx.description
    if gpx.time:
        metadata['time'] = gpx.time
    if gpx.author_name:
        metadata['author'] = gpx.author_name

    # Parse track points
    samples = []
    dropped = 0
    for track in gpx.tracks:
        for segment in track.segments:
            for point in segment.points:
                if point.latitude is None or point.longitude is None or point.time is None:
                    dropped += 1
                    continue
                samples.append(_point_to_sample(point))

    if dropped:
        logger.warning(f"Dropped {dropped} track points without position or timestamp")

    logger.info(f"Successfully loaded GPX file with {len(samples)} track points")
    return tuple(samples), metadata


def load_gpx_from_path(file_path: str) -> Tuple[TrackSequence, Dict[str, Any]]:
    """
    Load a GPX file from disk path.

    Args:
        file_path: Path to the GPX file

    Returns:
        tuple: (TrackSequence, dict with metadata)

    Raises:
        FileNotFoundError: If the file does not exist
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"GPX file not found: {file_path}")

    with open(file_path, 'r', encoding='utf-8') as f:
        track, metadata = load_gpx_file(f)

        # Use filename if no name was extracted
        if not metadata['name']:
            metadata['name'] = os.path.splitext(os.path.basename(file_path))[0]

        return track, metadata


def _sample_extensions(sample: TrackSample, distance: float) -> list:
    """Build the Garmin and distance extension elements for one point."""
    extensions = []

    tpx = ET.Element(f'{{{GARMIN_TPX_NAMESPACE}}}TrackPointExtension')
    if sample.heart_rate is not None:
        ET.SubElement(tpx, f'{{{GARMIN_TPX_NAMESPACE}}}hr').text = str(sample.heart_rate)
    if sample.cadence is not None:
        ET.SubElement(tpx, f'{{{GARMIN_TPX_NAMESPACE}}}cad').text = str(sample.cadence)
    if sample.speed is not None:
        ET.SubElement(tpx, f'{{{GARMIN_TPX_NAMESPACE}}}speed').text = f"{sample.speed:.3f}"
    if len(tpx):
        extensions.append(tpx)

    distance_element = ET.Element(f'{{{GPXDATA_NAMESPACE}}}distance')
    distance_element.text = f"{distance:.2f}"
    extensions.append(distance_element)

    return extensions


def segment_to_gpx(segment: Segment,
                   metadata: Optional[Dict[str, Any]] = None,
                   creator: Optional[str] = None) -> gpxpy.gpx.GPX:
    """
    Build a GPX document for an extracted segment.

    Each point keeps its timestamp, altitude and measurements and carries
    its cumulative distance. The track description records the totals.

    Args:
        segment: Materialized segment
        metadata: Metadata of the source track (name is reused)
        creator: Creator attribute for the GPX root element

    Returns:
        gpxpy GPX object
    """
    if creator is None:
        from config.settings import APP_NAME, APP_VERSION
        creator = f"{APP_NAME} {APP_VERSION}"

    metadata = metadata or {}
    source_name = metadata.get('name') or 'track'

    gpx = gpxpy.gpx.GPX()
    gpx.creator = creator
    gpx.nsmap[GARMIN_TPX_PREFIX] = GARMIN_TPX_NAMESPACE
    gpx.nsmap[GPXDATA_PREFIX] = GPXDATA_NAMESPACE

    track = gpxpy.gpx.GPXTrack(
        name=f"{source_name} segment",
        description=(f"total_distance={segment.total_distance:.1f}m "
                     f"elapsed_time={segment.elapsed_time:.0f}s")
    )
    gpx.tracks.append(track)

    track_segment = gpxpy.gpx.GPXTrackSegment()
    track.segments.append(track_segment)

    for sample, distance in segment.points():
        point = gpxpy.gpx.GPXTrackPoint(
            latitude=sample.latitude,
            longitude=sample.longitude,
            elevation=sample.altitude,
            time=sample.timestamp
        )
        point.extensions.extend(_sample_extensions(sample, distance))
        track_segment.points.append(point)

    return gpx


def output_path_for(input_path: str, suffix: str) -> str:
    """Derive the output path for a segment, e.g. ride.gpx -> ride_segment.gpx."""
    root, _ = os.path.splitext(input_path)
    return f"{root}{suffix}.gpx"


def write_segment_gpx(segment: Segment,
                      file_path: str,
                      metadata: Optional[Dict[str, Any]] = None) -> str:
    """
    Write an extracted segment to a GPX file.

    Args:
        segment: Materialized segment
        file_path: Destination path
        metadata: Metadata of the source track

    Returns:
        The path written to
    """
    gpx = segment_to_gpx(segment, metadata)

    with open(file_path, 'w', encoding='utf-8') as f:
        f.write(gpx.to_xml())

    logger.info(f"Wrote {segment.point_count} points to {file_path}")
    return file_path
