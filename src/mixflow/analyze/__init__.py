"""
Key Analysis Module: Normalize key metadata and model the Camelot wheel.

- Keys are read from library metadata, never detected from audio
- Every resolved key is one of the 24 Camelot positions (1A..12B)
- All functions are pure; no shared mutable state
"""

__all__ = ["key", "camelot"]
