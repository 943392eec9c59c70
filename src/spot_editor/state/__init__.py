"""State models module."""

from .models import (
    EditMode,
    Point,
    SaveResult,
    Selection,
    Spot,
    SpotScope,
    SpotStatus,
    SpotType,
    SurfaceSize,
)

__all__ = [
    "EditMode",
    "Point",
    "SaveResult",
    "Selection",
    "Spot",
    "SpotScope",
    "SpotStatus",
    "SpotType",
    "SurfaceSize",
]
