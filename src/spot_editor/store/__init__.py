"""Spot persistence module."""

from .base import SpotStore
from .codec import decode_rows, spot_from_row, spot_to_row
from .rest import RestSpotStore

__all__ = ["SpotStore", "RestSpotStore", "decode_rows", "spot_from_row", "spot_to_row"]
