"""Conversion between normalized spot coordinates and surface pixels."""

import logging

from ..state.models import Point, SurfaceSize

logger = logging.getLogger(__name__)


class CoordinateTransform:
    """
    Maps normalized [0, 1] coordinates to the pixels of the rendering surface.

    Spots are stored normalized so they stay valid when the surface is
    resized or when the same camera is shown as a static image or a live
    stream. The surface size must be refreshed by the owner whenever the
    surface is measured again (window resize, image load, new frame).
    """

    def __init__(self, surface_size: SurfaceSize | None = None):
        self._surface = surface_size or SurfaceSize()

    @property
    def surface_size(self) -> SurfaceSize:
        return self._surface

    def update_surface(self, width: float, height: float) -> None:
        """Record the latest measured surface size."""
        if (width, height) != (self._surface.width, self._surface.height):
            logger.debug(f"Surface resized to {width}x{height}")
        self._surface = SurfaceSize(width=width, height=height)

    def to_normalized(self, pixel_x: float, pixel_y: float) -> Point:
        """
        Convert a pixel position to normalized coordinates.

        Returns (0, 0) while the surface has not been measured yet.
        """
        if not self._surface.is_measured:
            return Point(x=0.0, y=0.0)
        return Point(
            x=pixel_x / self._surface.width,
            y=pixel_y / self._surface.height,
        )

    def to_pixels(self, point: Point) -> tuple[float, float]:
        """Convert a normalized point to pixel coordinates."""
        return (point.x * self._surface.width, point.y * self._surface.height)

    def polygon_to_pixels(self, vertices) -> list[tuple[int, int]]:
        """Pixel polygon rounded to ints, ready for OpenCV drawing calls."""
        return [
            (int(round(px)), int(round(py)))
            for px, py in (self.to_pixels(v) for v in vertices)
        ]
