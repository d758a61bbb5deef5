"""Inherited permission maintenance for the collection tree."""
