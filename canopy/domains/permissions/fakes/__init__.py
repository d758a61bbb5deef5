"""Fakes for the permissions domain."""
