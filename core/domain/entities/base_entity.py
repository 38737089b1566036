# core/domain/entities/base_entity.py
from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict


class DomainEntity(BaseModel):
    """
    Base entity for values flowing through the chart core.

    - Immutable once constructed: series are replaced wholesale, never patched.
    - Enums are kept as enum members so comparisons stay typed.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,
        extra="forbid",
    )

    def to_dict(self) -> Dict[str, Any]:
        """
        JSON-safe dict for HTTP payloads and logging.
        """
        return self.model_dump(mode="json", exclude_none=True)
