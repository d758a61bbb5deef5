"""Canopy: inherited permission maintenance for nested collections."""
