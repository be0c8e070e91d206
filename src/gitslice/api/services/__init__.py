"""Service layer for the gitslice API."""

from .slices import SliceService

__all__ = ["SliceService"]
