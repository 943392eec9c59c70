"""
Custom exceptions for the spot editor.

Geometry code never raises for degenerate input; these cover the
store boundary and the save protocol.
"""


class SpotEditorError(Exception):
    """Base exception for all spot editor errors"""
    pass


class SpotDecodeError(SpotEditorError, ValueError):
    """Raised when a stored row cannot be turned into a Spot"""

    def __init__(self, message: str, row: dict | None = None):
        super().__init__(message)
        self.row = row


class StoreError(SpotEditorError):
    """Raised when the backing store fails a read, delete or insert"""
    pass


class SaveInProgressError(SpotEditorError):
    """Raised when a save is requested while another one is still running"""
    pass


class SpotIdsExhaustedError(SpotEditorError):
    """Raised when every label from A1 to Z9 is already taken"""
    pass
