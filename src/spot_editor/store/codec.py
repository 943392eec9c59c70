"""Conversion between Spot models and rows of the parking_spots table."""

from typing import Any, Iterable

from pydantic import ValidationError

from ..exceptions import SpotDecodeError
from ..state.models import Spot, SpotScope

REQUIRED_COLUMNS = ("spot_id", "vertices", "type", "status", "area_id", "camera_id")


def spot_to_row(spot: Spot, scope: SpotScope) -> dict[str, Any]:
    """
    Build an insert row for a spot.

    Area and camera come from the save scope, not from the spot itself.
    """
    return {
        "spot_id": spot.id,
        "vertices": [{"x": v.x, "y": v.y} for v in spot.vertices],
        "type": spot.type.value,
        "status": spot.status.value,
        "area_id": scope.area_id,
        "camera_id": scope.camera_id,
    }


def spot_from_row(row: dict[str, Any]) -> Spot:
    """
    Decode one stored row into a Spot.

    Raises:
        SpotDecodeError: If a column is missing or holds an invalid value
    """
    if not isinstance(row, dict):
        raise SpotDecodeError(f"Expected a row object, got {type(row).__name__}")

    missing = [column for column in REQUIRED_COLUMNS if column not in row]
    if missing:
        raise SpotDecodeError(f"Row is missing column(s): {', '.join(missing)}", row)

    spot_id = row["spot_id"]
    if not isinstance(spot_id, str) or not spot_id:
        raise SpotDecodeError(f"Invalid spot_id {spot_id!r}: expected a non-empty string", row)

    try:
        return Spot(
            id=spot_id,
            vertices=row["vertices"],
            type=row["type"],
            status=row["status"],
            area_id=row["area_id"],
            camera_id=row["camera_id"],
        )
    except ValidationError as e:
        raise SpotDecodeError(f"Invalid spot row '{row.get('spot_id')}': {e}", row) from e


def decode_rows(rows: Iterable[dict[str, Any]]) -> list[Spot]:
    """Decode every row, failing on the first invalid one."""
    return [spot_from_row(row) for row in rows]
