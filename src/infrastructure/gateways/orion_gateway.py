"""Orion Context Broker gateway implementation."""

from __future__ import annotations

from typing import Any, Dict, Optional
from uuid import uuid4

import httpx

from src.domain.entities.context import BrokerResponse
from src.domain.entities.errors import RemoteUnavailableError
from src.domain.gateways.orion_gateway import IOrionGateway
from src.shared import get_logger

logger = get_logger(__name__)


class OrionGateway(IOrionGateway):
    """HTTP-based Orion Context Broker gateway."""

    def __init__(self, base_url: str, timeout: float = 30.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    async def upsert_entity(
        self,
        *,
        entity_id: str,
        entity_type: str,
        attributes: Dict[str, Any],
        service: str,
        service_path: str,
    ) -> BrokerResponse:
        """Create an entity, appending attributes when it already exists."""

        payload = {"id": entity_id, "type": entity_type, **attributes}
        return await self._send(
            "POST",
            "/v2/entities",
            event="orion.entity.upsert",
            service=service,
            service_path=service_path,
            json=payload,
            params={"options": "upsert"},
            entity_id=entity_id,
        )

    async def update_entity_attributes(
        self,
        *,
        entity_id: str,
        attributes: Dict[str, Any],
        service: str,
        service_path: str,
    ) -> BrokerResponse:
        return await self._send(
            "POST",
            f"/v2/entities/{entity_id}/attrs",
            event="orion.entity.update",
            service=service,
            service_path=service_path,
            json=attributes,
            entity_id=entity_id,
        )

    async def delete_entity(
        self,
        entity_id: str,
        *,
        service: str,
        service_path: str,
    ) -> BrokerResponse:
        return await self._send(
            "DELETE",
            f"/v2/entities/{entity_id}",
            event="orion.entity.delete",
            service=service,
            service_path=service_path,
            entity_id=entity_id,
        )

    async def create_registration(
        self,
        payload: Dict[str, Any],
        *,
        service: str,
        service_path: str,
    ) -> BrokerResponse:
        return await self._send(
            "POST",
            "/v2/registrations",
            event="orion.registration.create",
            service=service,
            service_path=service_path,
            json=payload,
        )

    async def delete_registration(
        self,
        registration_id: str,
        *,
        service: str,
        service_path: str,
    ) -> BrokerResponse:
        return await self._send(
            "DELETE",
            f"/v2/registrations/{registration_id}",
            event="orion.registration.delete",
            service=service,
            service_path=service_path,
            registration_id=registration_id,
        )

    async def delete_subscription(
        self,
        subscription_id: str,
        *,
        service: str,
        service_path: str,
    ) -> BrokerResponse:
        return await self._send(
            "DELETE",
            f"/v2/subscriptions/{subscription_id}",
            event="orion.subscription.delete",
            service=service,
            service_path=service_path,
            subscription_id=subscription_id,
        )

    async def _send(
        self,
        method: str,
        path: str,
        *,
        event: str,
        service: str,
        service_path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
        **context: Any,
    ) -> BrokerResponse:
        url = f"{self._base_url}{path}"
        headers = self._build_headers(
            service, service_path, include_content_type=json is not None
        )

        logger.info(
            f"{event}.request",
            method=method,
            url=url,
            service=service,
            service_path=service_path,
            correlator=headers["fiware-correlator"],
            **context,
        )
        logger.debug(f"{event}.payload", payload=json)

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.request(
                    method, url, headers=headers, json=json, params=params
                )
        except httpx.RequestError as exc:
            logger.error(
                f"{event}.request_error",
                url=url,
                error=str(exc),
                exc_info=exc,
                **context,
            )
            raise RemoteUnavailableError(
                f"Error connecting to the Context Broker: {exc}",
                {"url": url, **context},
            ) from exc

        logger.info(
            f"{event}.response",
            status_code=response.status_code,
            **context,
        )
        return BrokerResponse(
            status_code=response.status_code,
            body=response.text,
            location=response.headers.get("Location"),
        )

    def _build_headers(
        self,
        service: str,
        service_path: str,
        *,
        include_content_type: bool,
    ) -> Dict[str, str]:
        headers: Dict[str, str] = {
            "fiware-service": service,
            "fiware-servicepath": service_path,
            "fiware-correlator": str(uuid4()),
        }
        if include_content_type:
            headers["Content-Type"] = "application/json"
        return headers
