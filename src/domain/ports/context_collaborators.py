"""Domain ports for the Context Broker side effects of a web service:
provider registrations and subscriptions."""

from __future__ import annotations

from typing import Protocol

from src.domain.entities.web_service import WebService


class IRegistrationManager(Protocol):
    """Keeps the context provider registration of a web service in sync."""

    async def send_registrations(
        self, is_removal: bool, web_service: WebService
    ) -> WebService:
        """Create, replace or delete the registration for lazy attributes and
        commands.

        Returns:
            The web service carrying the current ``registration_id``.
        """
        ...


class ISubscriptionManager(Protocol):
    """Cancels subscriptions owned by a web service."""

    async def unsubscribe(self, web_service: WebService, subscription_id: str) -> None:
        """Remove one subscription from the broker."""
        ...
