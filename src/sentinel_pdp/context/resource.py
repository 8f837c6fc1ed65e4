"""Resource model - WHAT is being accessed.

Built per request by the caller, usually from a lookup against its own data
store (owner id, status, visibility, ...). Only `type` is required.
"""

from __future__ import annotations

__all__ = ["Resource"]

from typing import Any

from pydantic import BaseModel, ConfigDict


class Resource(BaseModel):
    """Target of the request (ABAC Resource).

    Attributes:
        type: Resource type discriminator (e.g. "document", "padron").
        **attributes: Any additional resource attributes (model extras).
    """

    type: str

    model_config = ConfigDict(frozen=True, extra="allow")

    @property
    def attributes(self) -> dict[str, Any]:
        """Resource attributes beyond type."""
        return dict(self.model_extra or {})
