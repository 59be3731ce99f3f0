"""Orion Context Broker gateway interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict

from src.domain.entities.context import BrokerResponse


class IOrionGateway(ABC):
    """
    Raw NGSIv2 operations used by the agent.

    Implementations return the broker answer untouched so that callers can
    interpret status codes. Transport failures raise
    ``RemoteUnavailableError``.
    """

    @abstractmethod
    async def upsert_entity(
        self,
        *,
        entity_id: str,
        entity_type: str,
        attributes: Dict[str, Any],
        service: str,
        service_path: str,
    ) -> BrokerResponse:
        """Create the entity or append attributes when it exists."""
        raise NotImplementedError

    @abstractmethod
    async def update_entity_attributes(
        self,
        *,
        entity_id: str,
        attributes: Dict[str, Any],
        service: str,
        service_path: str,
    ) -> BrokerResponse:
        """Append or update attributes of an existing entity."""
        raise NotImplementedError

    @abstractmethod
    async def delete_entity(
        self,
        entity_id: str,
        *,
        service: str,
        service_path: str,
    ) -> BrokerResponse:
        """Remove an entity."""
        raise NotImplementedError

    @abstractmethod
    async def create_registration(
        self,
        payload: Dict[str, Any],
        *,
        service: str,
        service_path: str,
    ) -> BrokerResponse:
        """Create a context provider registration."""
        raise NotImplementedError

    @abstractmethod
    async def delete_registration(
        self,
        registration_id: str,
        *,
        service: str,
        service_path: str,
    ) -> BrokerResponse:
        """Remove a context provider registration."""
        raise NotImplementedError

    @abstractmethod
    async def delete_subscription(
        self,
        subscription_id: str,
        *,
        service: str,
        service_path: str,
    ) -> BrokerResponse:
        """Remove a subscription."""
        raise NotImplementedError
