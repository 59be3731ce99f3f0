"""Domain port projecting web services into the Context Broker."""

from __future__ import annotations

from typing import Protocol

from src.domain.entities.web_service import WebService


class IWebServiceProjector(Protocol):
    """Pushes the NGSI representation of a web service.

    Every method raises ``RemoteUnavailableError`` when the broker cannot be
    reached and ``RemoteProtocolError`` when it rejects the request.
    """

    async def create(self, web_service: WebService) -> None:
        """Create the remote entity (and any redirected entities)."""
        ...

    async def update(self, web_service: WebService) -> None:
        """Push the attributes carried by ``web_service`` to the remote entity."""
        ...

    async def remove(self, web_service: WebService) -> None:
        """Delete the remote entity; an already missing entity is not an error."""
        ...
