"""Dependency Injection Container Module.

Usage:
------
    # Initialize at startup
    from canopy.core.container import initialize_container
    from canopy.core.config import settings
    initialize_container(settings)

    # Import the global container after initialization
    from canopy.core import container as container_module
    recalculator = container_module.container.permission_recalculator

Module structure:
-----------------
    container/
    ├── __init__.py      # This file - exports public API
    ├── container.py     # Container dataclass (serves)
    └── factory.py       # create_container() (builds)
"""

from typing import TYPE_CHECKING

from canopy.core.container.container import Container
from canopy.core.container.factory import create_container

if TYPE_CHECKING:
    from canopy.core.config import Settings

__all__ = ["Container", "create_container", "container", "initialize_container"]


container: Container | None = None
"""Global container instance, set by `initialize_container()`.

Do NOT import this in domain code. Domains receive dependencies
via constructor parameters, never by importing the container directly.
"""


def initialize_container(settings: "Settings") -> None:
    """Initialize the global container. Call once at startup.

    Args:
        settings: Application settings from core/config.py

    Raises:
        RuntimeError: If called more than once (container already initialized)
    """
    global container

    if container is not None:
        raise RuntimeError(
            "Container already initialized. "
            "initialize_container() should only be called once at startup."
        )

    container = create_container(settings)


def reset_container() -> None:
    """Reset the global container to None. For testing only."""
    global container
    container = None
