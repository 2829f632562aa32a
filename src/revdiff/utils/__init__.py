"""Utility functions used across the project."""

from .polling import poll_until

__all__ = ["poll_until"]
