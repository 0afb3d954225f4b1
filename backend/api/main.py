"""
FastAPI backend for Segment Lab.

This provides REST API endpoints for cutting start/end stretches and
repeated laps out of uploaded GPX tracks.
"""

from fastapi import FastAPI, UploadFile, File, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import BaseModel
from datetime import datetime
from typing import Dict, Optional, Any
import logging
import io

from config.settings import (
    APP_NAME, APP_VERSION, APP_DESCRIPTION, CORS_ALLOW_ORIGINS, LOGGING_CONFIG,
    DEFAULT_LOOP_RADIUS, MIN_LOOP_RADIUS, MAX_LOOP_RADIUS, MAX_UPLOAD_BYTES, MIN_UPLOAD_BYTES,
    OUTPUT_SUFFIX, GPX_MEDIA_TYPE, SegmentConfig
)
from core.segments import SegmentSelectorFactory
from core.validation import ValidationError, SegmentDetectionError
from services.segment_service import (
    SegmentExtractionResult, build_selection, extract_segment_from_file
)

# Initialize logging
logging.basicConfig(**LOGGING_CONFIG)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=f"{APP_NAME} API",
    description=APP_DESCRIPTION,
    version=APP_VERSION
)

# Add CORS middleware for frontend access
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


# Pydantic models for API requests/responses
class SegmentSummary(BaseModel):
    start_idx: int
    end_idx: int
    start_time: Optional[datetime]
    end_time: Optional[datetime]
    point_count: int
    total_distance: float
    elapsed_time: float
    avg_speed_ms: float
    distance_km: float


class SegmentExtractionResponse(BaseModel):
    filename: str
    source_point_count: int
    selection: Dict[str, Any]
    segment: SegmentSummary


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "message": f"{APP_NAME} API",
        "version": APP_VERSION,
        "endpoints": {
            "POST /api/extract-segment": "Extract a segment from a GPX track (JSON summary)",
            "POST /api/extract-segment/gpx": "Extract a segment from a GPX track (GPX download)",
            "GET /api/config": "Default parameters and selection modes",
            "GET /api/health": "Health check endpoint"
        }
    }


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "segment-lab-api"}


@app.get("/api/config")
async def get_config():
    """Get default configuration values."""
    return {
        "defaults": SegmentConfig.as_dict(),
        "modes": SegmentSelectorFactory.get_available_modes(),
        "ranges": {
            "radius": {"min": MIN_LOOP_RADIUS, "max": MAX_LOOP_RADIUS, "step": 1}
        }
    }


async def _run_extraction(file: UploadFile,
                          start: Optional[str],
                          end: Optional[str],
                          loop: bool,
                          radius: float) -> SegmentExtractionResult:
    """Validate the upload and run the extraction pipeline."""
    if not file.filename or not file.filename.lower().endswith('.gpx'):
        raise HTTPException(status_code=400, detail="Only GPX files are allowed")

    content = await file.read()

    if len(content) > MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size is {MAX_UPLOAD_BYTES // (1024 * 1024)}MB, "
                   f"received {len(content) / 1024 / 1024:.1f}MB"
        )

    if len(content) < MIN_UPLOAD_BYTES:
        raise HTTPException(status_code=400, detail="File appears to be empty or corrupted")

    logger.info(f"Processing file: {file.filename}")

    try:
        selection = build_selection(start=start, end=end, loop=loop, radius_m=radius)
        return extract_segment_from_file(io.BytesIO(content), selection, filename=file.filename)
    except SegmentDetectionError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error extracting segment: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Error extracting segment: {str(e)}")


@app.post("/api/extract-segment", response_model=SegmentExtractionResponse)
async def extract_segment(
    file: UploadFile = File(...),
    start: Optional[str] = None,
    end: Optional[str] = None,
    loop: bool = False,
    radius: float = DEFAULT_LOOP_RADIUS
):
    """
    Extract a segment from a GPX track file.

    Args:
        file: GPX file to cut
        start: Start coordinate "lat,lon" (the anchor in loop mode)
        end: End coordinate "lat,lon" (two-point mode only)
        loop: Select repeated laps of the circuit through start
        radius: Loop detection radius in meters

    Returns:
        Summary of the extracted segment
    """
    result = await _run_extraction(file, start, end, loop, radius)
    summary = result.summary()

    return SegmentExtractionResponse(
        filename=result.filename,
        source_point_count=result.source_point_count,
        selection=result.selection.to_dict(),
        segment=SegmentSummary(
            start_idx=summary['start_idx'],
            end_idx=summary['end_idx'],
            start_time=summary['start_time'],
            end_time=summary['end_time'],
            point_count=summary['point_count'],
            total_distance=summary['total_distance'],
            elapsed_time=summary['elapsed_time'],
            avg_speed_ms=summary['avg_speed_ms'],
            distance_km=summary['distance_km']
        )
    )


@app.post("/api/extract-segment/gpx")
async def extract_segment_gpx(
    file: UploadFile = File(...),
    start: Optional[str] = None,
    end: Optional[str] = None,
    loop: bool = False,
    radius: float = DEFAULT_LOOP_RADIUS
):
    """
    Extract a segment from a GPX track file and return it as GPX.

    Takes the same parameters as /api/extract-segment.
    """
    result = await _run_extraction(file, start, end, loop, radius)

    stem = file.filename.rsplit('.', 1)[0]
    return Response(
        content=result.to_gpx_xml(),
        media_type=GPX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{stem}{OUTPUT_SUFFIX}.gpx"'}
    )


if __name__ == "__main__":
    import uvicorn
    from config.settings import API_HOST, API_PORT
    uvicorn.run(app, host=API_HOST, port=API_PORT)
