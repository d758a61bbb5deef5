"""CRUD singletons."""

from .crud_collection import collection
from .crud_membership import group_membership, user_membership

__all__ = ["collection", "group_membership", "user_membership"]
