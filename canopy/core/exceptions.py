"""Shared exceptions module."""


class CanopyException(Exception):
    """Base exception for Canopy services."""

    pass
