"""FastAPI route definitions."""

import logging
from datetime import datetime
from typing import Optional

import cv2
from fastapi import APIRouter, HTTPException, Query, Response
from pydantic import ValidationError

from ..camera.stream import StreamClient
from ..editor.saver import SpotSaver
from ..exceptions import SaveInProgressError, SpotDecodeError, StoreError
from ..metrics import get_metrics
from ..rendering import render_status
from ..state.models import Spot, SpotScope
from ..store.base import SpotStore
from ..store.codec import decode_rows
from .schemas import (
    HealthResponse,
    SaveSpotsRequest,
    SaveSpotsResponse,
    SpotPayload,
    SpotsResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# Dependencies injected at startup
_store: Optional[SpotStore] = None
_stream: Optional[StreamClient] = None
_savers: dict[SpotScope, SpotSaver] = {}
_start_time: datetime = datetime.now()


def init_router(store: SpotStore, stream: Optional[StreamClient] = None) -> None:
    """
    Initialize router with dependencies.

    Args:
        store: Persistence collaborator for spot rows
        stream: Frame source for snapshot endpoints
    """
    global _store, _stream, _savers, _start_time

    _store = store
    _stream = stream
    _savers = {}
    _start_time = datetime.now()

    logger.info("API router initialized")


def _get_saver(scope: SpotScope) -> SpotSaver:
    """One saver per scope so the in-flight guard covers concurrent requests."""
    saver = _savers.get(scope)
    if saver is None:
        saver = SpotSaver(_store)
        _savers[scope] = saver
    return saver


def _release_saver(scope: SpotScope, saver: SpotSaver) -> None:
    """Drop a scope's saver once no save is running on it."""
    if not saver.is_saving and _savers.get(scope) is saver:
        del _savers[scope]


def _to_payload(spot: Spot) -> SpotPayload:
    return SpotPayload(
        id=spot.id,
        vertices=list(spot.vertices),
        type=spot.type,
        status=spot.status,
    )


async def _load_spots(scope: SpotScope) -> list[Spot]:
    try:
        rows = await _store.fetch(scope)
        return decode_rows(rows)
    except SpotDecodeError as e:
        logger.error(f"Stored spot row is invalid: {e}")
        raise HTTPException(status_code=502, detail=f"Stored spot row is invalid: {e}")
    except StoreError as e:
        logger.error(f"Failed to load spots: {e}")
        raise HTTPException(status_code=502, detail="Failed to load spots")


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Health check endpoint.

    Returns basic health information about the service.
    """
    uptime = (datetime.now() - _start_time).total_seconds()

    return HealthResponse(
        status="healthy",
        store_configured=_store is not None,
        camera_configured=_stream is not None,
        uptime_seconds=uptime,
    )


@router.get("/spots", response_model=SpotsResponse)
async def get_spots(
    camera_id: int = Query(...),
    area_id: int = Query(...),
) -> SpotsResponse:
    """
    Get the stored spots of one camera within one area.
    """
    if _store is None:
        raise HTTPException(status_code=503, detail="Service not initialized")

    scope = SpotScope(area_id=area_id, camera_id=camera_id)
    spots = await _load_spots(scope)

    return SpotsResponse(
        area_id=area_id,
        camera_id=camera_id,
        spots=[_to_payload(s) for s in spots],
    )


@router.put("/spots", response_model=SaveSpotsResponse)
async def save_spots(
    request: SaveSpotsRequest,
    camera_id: int = Query(...),
    area_id: int = Query(...),
) -> SaveSpotsResponse:
    """
    Replace the stored spots of one camera within one area.

    Existing rows for the pair are deleted and the posted list is
    inserted. The two steps are not atomic.
    """
    if _store is None:
        raise HTTPException(status_code=503, detail="Service not initialized")

    try:
        spots = [
            Spot(
                id=payload.id,
                vertices=payload.vertices,
                type=payload.type,
                status=payload.status,
                area_id=area_id,
                camera_id=camera_id,
            )
            for payload in request.spots
        ]
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    scope = SpotScope(area_id=area_id, camera_id=camera_id)

    saver = _get_saver(scope)
    try:
        result = await saver.save(spots, scope)
    except SaveInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))
    finally:
        _release_saver(scope, saver)

    if not result.success:
        raise HTTPException(status_code=502, detail=result.message)

    return SaveSpotsResponse(
        saved_count=result.saved_count,
        message=result.message,
        spots=[_to_payload(s) for s in result.spots],
    )


@router.get("/snapshot")
async def get_snapshot() -> Response:
    """
    Get current camera frame as JPEG.

    Returns the raw camera image without annotations.
    """
    if _stream is None:
        raise HTTPException(status_code=503, detail="Camera not configured")

    try:
        image_bytes = _stream.read_jpeg()
        return Response(content=image_bytes, media_type="image/jpeg")
    except Exception as e:
        logger.error(f"Failed to get snapshot: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to get snapshot: {e}")


@router.get("/snapshot/annotated")
async def get_annotated_snapshot(
    camera_id: int = Query(...),
    area_id: int = Query(...),
) -> Response:
    """
    Get camera frame with the stored spots drawn on it.

    Spots are coloured by status:
    - Green for available
    - Red for occupied
    - Yellow for reserved
    - Grey for maintenance
    """
    if _stream is None or _store is None:
        raise HTTPException(status_code=503, detail="Service not configured")

    spots = await _load_spots(SpotScope(area_id=area_id, camera_id=camera_id))

    try:
        frame = _stream.read_frame()
        image = render_status(frame, spots)
        _, buffer = cv2.imencode(".jpg", image)
        return Response(content=buffer.tobytes(), media_type="image/jpeg")
    except Exception as e:
        logger.error(f"Failed to create annotated snapshot: {e}")
        raise HTTPException(
            status_code=500, detail=f"Failed to create annotated snapshot: {e}"
        )


@router.get("/metrics")
async def prometheus_metrics() -> Response:
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text format including:
    - spot_editor_saves_total: Counter of saves by outcome
    - spot_editor_save_latency_seconds: Histogram of save latency
    - spot_editor_saved_spots: Gauge of spots stored per (area, camera)
    - spot_editor_edits_total: Counter of in-memory edits by kind
    """
    return Response(
        content=get_metrics(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
