"""Spot editing module."""

from .saver import SpotSaver, duplicate_spot_ids
from .spot_editor import SpotGeometryEditor, generate_spot_id

__all__ = ["SpotGeometryEditor", "SpotSaver", "duplicate_spot_ids", "generate_spot_id"]
