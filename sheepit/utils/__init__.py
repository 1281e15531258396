"""Utility functions for SheepIt."""

from sheepit.utils.ids import generate_id, generate_subdomain
from sheepit.utils.logging import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
    "generate_id",
    "generate_subdomain",
]
