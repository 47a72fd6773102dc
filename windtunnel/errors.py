from __future__ import annotations


class InvalidInputError(ValueError):
    """Raised when a polygon or flow parameter is unusable before any geometry is computed."""


class StorageError(RuntimeError):
    """Raised when a saved test cannot be written or read back."""
