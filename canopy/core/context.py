"""Base context for all operations.

Provides the context type that services and repositories type-hint against.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional
from uuid import UUID

from canopy.core.logging import ContextualLogger


@dataclass
class BaseContext:
    """Base context for all operations.

    Carries the owning team identity and a contextual logger. ``logger`` is
    keyword-only with a default of None; when omitted it is derived from the
    team in __post_init__.
    """

    team_id: UUID

    actor_id: Optional[UUID] = None

    logger: ContextualLogger = field(default=None, kw_only=True, repr=False)

    def __post_init__(self):
        """Auto-derive logger from team identity if not provided."""
        if self.logger is None:
            from canopy.core.logging import logger as base_logger

            dims: Dict[str, str] = {"team_id": str(self.team_id)}
            if self.actor_id is not None:
                dims["actor_id"] = str(self.actor_id)
            self.logger = base_logger.with_context(**dims)
