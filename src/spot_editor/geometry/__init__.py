"""Spot geometry module."""

from .hit_test import centroid, find_spot_at, nearest_vertex, point_in_polygon, translate
from .transform import CoordinateTransform

__all__ = [
    "CoordinateTransform",
    "centroid",
    "find_spot_at",
    "nearest_vertex",
    "point_in_polygon",
    "translate",
]
