"""Data models for parking spot geometry."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class SpotType(str, Enum):
    """Kind of parking spot."""

    STANDARD = "standard"
    HANDICAP = "handicap"
    ELECTRIC = "electric"
    COMPACT = "compact"


class SpotStatus(str, Enum):
    """Status of a parking spot."""

    AVAILABLE = "available"
    OCCUPIED = "occupied"
    RESERVED = "reserved"
    MAINTENANCE = "maintenance"


class EditMode(str, Enum):
    """Interaction mode of the spot editor."""

    SELECT = "select"
    DRAW = "draw"
    MOVE = "move"


class Point(BaseModel):
    """A point in normalized surface coordinates (fractions of width/height)."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class Spot(BaseModel):
    """A quadrilateral parking spot drawn over a camera view."""

    model_config = ConfigDict(frozen=True)

    id: str
    vertices: tuple[Point, Point, Point, Point]
    type: SpotType = SpotType.STANDARD
    status: SpotStatus = SpotStatus.AVAILABLE
    area_id: int
    camera_id: int

    @field_validator("vertices", mode="before")
    @classmethod
    def require_four_vertices(cls, v):
        """Reject anything other than a quadrilateral."""
        if not isinstance(v, (list, tuple)):
            raise ValueError(f"vertices must be a list, got {type(v).__name__}")
        if len(v) != 4:
            raise ValueError(f"a spot needs exactly 4 vertices, got {len(v)}")
        return tuple(v)


class Selection(BaseModel):
    """Selected spot and, optionally, one of its vertices."""

    model_config = ConfigDict(frozen=True)

    spot_index: int
    vertex_index: Optional[int] = None


class SurfaceSize(BaseModel):
    """Rendered pixel size of the surface the spots are drawn on."""

    model_config = ConfigDict(frozen=True)

    width: float = 0
    height: float = 0

    @property
    def is_measured(self) -> bool:
        return self.width > 0 and self.height > 0


class SpotScope(BaseModel):
    """Persistence key: spots are saved per (area, camera) pair."""

    model_config = ConfigDict(frozen=True)

    area_id: int
    camera_id: int


class SaveResult(BaseModel):
    """Outcome of a replace-all save."""

    success: bool
    saved_count: int = 0
    spots: list[Spot] = []
    message: str = ""
