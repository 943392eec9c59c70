"""Drawing spot overlays onto camera frames."""

from typing import Optional, Sequence

import cv2
import numpy as np

from .geometry.hit_test import centroid
from .geometry.transform import CoordinateTransform
from .state.models import Point, Selection, Spot, SpotStatus

# BGR colours
SPOT_COLOR = (129, 185, 16)  # Green
SELECTED_COLOR = (246, 130, 59)  # Blue
DRAFT_COLOR = (246, 130, 59)

STATUS_COLORS = {
    SpotStatus.AVAILABLE: (0, 255, 0),  # Green
    SpotStatus.OCCUPIED: (0, 0, 255),  # Red
    SpotStatus.RESERVED: (0, 255, 255),  # Yellow
    SpotStatus.MAINTENANCE: (128, 128, 128),  # Grey
}


def _draw_label(image: np.ndarray, text: str, center: tuple[int, int], color) -> None:
    label_size, _ = cv2.getTextSize(text, cv2.FONT_HERSHEY_SIMPLEX, 0.5, 1)
    x = center[0] - label_size[0] // 2
    y = center[1] + label_size[1] // 2

    # Background for label
    cv2.rectangle(
        image,
        (x - 3, y - label_size[1] - 3),
        (x + label_size[0] + 3, y + 4),
        (0, 0, 0),
        -1,
    )
    cv2.putText(image, text, (x, y), cv2.FONT_HERSHEY_SIMPLEX, 0.5, color, 1)


def draw_spot(
    image: np.ndarray,
    spot: Spot,
    transform: CoordinateTransform,
    color: tuple[int, int, int],
    selected_vertex: Optional[int] = None,
    fill_alpha: float = 0.15,
    label: Optional[str] = None,
) -> None:
    """Draw one spot (outline, translucent fill, vertex dots, label) in place."""
    pts = np.array(transform.polygon_to_pixels(spot.vertices), np.int32)
    cv2.polylines(image, [pts], True, color, 2)

    # Semi-transparent fill
    overlay = image.copy()
    cv2.fillPoly(overlay, [pts], color)
    cv2.addWeighted(overlay, fill_alpha, image, 1 - fill_alpha, 0, image)

    for index, (x, y) in enumerate(pts):
        radius = 6 if index == selected_vertex else 4
        cv2.circle(image, (int(x), int(y)), radius, color, -1)

    cx, cy = transform.to_pixels(centroid(spot.vertices))
    _draw_label(image, label or spot.id, (int(cx), int(cy)), color)


def draw_draft(
    image: np.ndarray,
    draft: Sequence[Point],
    transform: CoordinateTransform,
) -> None:
    """Draw the corners placed so far for a spot being drawn."""
    if not draft:
        return

    pts = transform.polygon_to_pixels(draft)
    if len(pts) > 1:
        cv2.polylines(image, [np.array(pts, np.int32)], False, DRAFT_COLOR, 2)
    for point in pts:
        cv2.circle(image, point, 5, DRAFT_COLOR, -1)


def render_editor(
    frame: np.ndarray,
    spots: Sequence[Spot],
    transform: CoordinateTransform,
    selection: Optional[Selection] = None,
    draft: Sequence[Point] = (),
) -> np.ndarray:
    """Return a copy of the frame with the editor's spots, selection and draft drawn."""
    image = frame.copy()

    for index, spot in enumerate(spots):
        is_selected = selection is not None and selection.spot_index == index
        draw_spot(
            image,
            spot,
            transform,
            SELECTED_COLOR if is_selected else SPOT_COLOR,
            selected_vertex=selection.vertex_index if is_selected else None,
            fill_alpha=0.2 if is_selected else 0.1,
        )

    draw_draft(image, draft, transform)
    return image


def render_status(frame: np.ndarray, spots: Sequence[Spot]) -> np.ndarray:
    """Return a copy of the frame with spots coloured by status."""
    image = frame.copy()
    height, width = image.shape[:2]
    transform = CoordinateTransform()
    transform.update_surface(width, height)

    for spot in spots:
        draw_spot(
            image,
            spot,
            transform,
            STATUS_COLORS.get(spot.status, SPOT_COLOR),
            fill_alpha=0.2,
            label=f"{spot.id}: {spot.status.value}",
        )

    return image
