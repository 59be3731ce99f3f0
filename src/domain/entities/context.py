"""Context Broker exchange values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True, frozen=True)
class BrokerResponse:
    """Status, body and ``Location`` header of a Context Broker answer."""

    status_code: int
    body: str = ""
    location: Optional[str] = None

    @property
    def resource_id(self) -> Optional[str]:
        """Trailing path segment of ``Location``, e.g. a registration id."""
        if not self.location:
            return None
        return self.location.rstrip("/").rsplit("/", 1)[-1] or None
