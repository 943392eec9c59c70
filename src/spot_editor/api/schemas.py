"""API request and response schemas."""

from pydantic import BaseModel

from ..state.models import Point, SpotStatus, SpotType


class SpotPayload(BaseModel):
    """A spot as sent to and returned by the API."""

    id: str
    vertices: list[Point]
    type: SpotType = SpotType.STANDARD
    status: SpotStatus = SpotStatus.AVAILABLE


class SpotsResponse(BaseModel):
    """Spots stored for one (area, camera) pair."""

    area_id: int
    camera_id: int
    spots: list[SpotPayload]


class SaveSpotsRequest(BaseModel):
    """Full working set to store for one (area, camera) pair."""

    spots: list[SpotPayload]


class SaveSpotsResponse(BaseModel):
    """Result of a replace-all save."""

    saved_count: int
    message: str
    spots: list[SpotPayload]


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    store_configured: bool
    camera_configured: bool
    uptime_seconds: float
