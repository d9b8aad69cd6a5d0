"""Shared record types for the node identity library."""

from .base import StrictBaseModel

__all__ = [
    "StrictBaseModel",
]
