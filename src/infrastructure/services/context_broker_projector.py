"""Projection of web services into the Orion Context Broker."""

from __future__ import annotations

from typing import Optional

from src.domain.entities.context import BrokerResponse
from src.domain.entities.errors import RemoteProtocolError
from src.domain.entities.web_service import WebService
from src.domain.gateways.orion_gateway import IOrionGateway
from src.domain.ports.health_check import IAlarmState
from src.domain.ports.web_service_projector import IWebServiceProjector
from src.domain.services.ngsi_payload import (
    NgsiAttributes,
    build_entity_payload,
    build_redirected_payloads,
)
from src.shared import get_logger
from src.shared.consts import ORION_ALARM

from .orion_alarm import watch_orion

logger = get_logger(__name__)

NO_CONTENT = 204
NOT_FOUND = 404


class ContextBrokerProjector(IWebServiceProjector):
    """
    Pushes the NGSIv2 representation of a web service to Orion.

    Every broker exchange feeds the ORION alarm: a transport failure raises
    it and a 204 answer releases it. Any other status is reported as a
    ``RemoteProtocolError`` without touching the alarm.
    """

    def __init__(
        self,
        orion_gateway: IOrionGateway,
        alarms: IAlarmState,
        *,
        timestamp: bool = False,
    ) -> None:
        self._gateway = orion_gateway
        self._alarms = alarms
        self._timestamp = timestamp

    async def create(self, web_service: WebService) -> None:
        attributes = build_entity_payload(web_service, timestamp=self._timestamp)

        logger.info(
            "projector.create",
            web_service_id=web_service.id,
            entity_name=web_service.name,
            entity_type=web_service.type,
        )
        response = await self._call(
            self._gateway.upsert_entity(
                entity_id=web_service.name,
                entity_type=web_service.type,
                attributes=attributes,
                service=web_service.service,
                service_path=web_service.subservice,
            )
        )
        self._interpret(response, web_service, web_service.name, web_service.type)
        await self._push_redirected(web_service)

    async def update(self, web_service: WebService) -> None:
        attributes = build_entity_payload(web_service, timestamp=self._timestamp)

        if attributes:
            logger.info(
                "projector.update",
                web_service_id=web_service.id,
                entity_name=web_service.name,
                attributes=sorted(attributes),
            )
            response = await self._call(
                self._gateway.update_entity_attributes(
                    entity_id=web_service.name,
                    attributes=attributes,
                    service=web_service.service,
                    service_path=web_service.subservice,
                )
            )
            self._interpret(response, web_service, web_service.name, web_service.type)
        else:
            logger.debug(
                "projector.update.nothing_to_push",
                web_service_id=web_service.id,
                entity_name=web_service.name,
            )

        await self._push_redirected(web_service)

    async def remove(self, web_service: WebService) -> None:
        logger.info(
            "projector.remove",
            web_service_id=web_service.id,
            entity_name=web_service.name,
        )
        response = await self._call(
            self._gateway.delete_entity(
                web_service.name,
                service=web_service.service,
                service_path=web_service.subservice,
            )
        )
        if response.status_code == NOT_FOUND:
            self._alarms.release_alarm(ORION_ALARM)
            logger.debug("projector.remove.already_missing", entity_name=web_service.name)
            return
        self._interpret(response, web_service, web_service.name, web_service.type)

    async def _push_redirected(self, web_service: WebService) -> None:
        redirected = build_redirected_payloads(web_service, timestamp=self._timestamp)
        for (entity_name, entity_type), attributes in redirected.items():
            await self._upsert(web_service, entity_name, entity_type, attributes)

    async def _upsert(
        self,
        web_service: WebService,
        entity_name: str,
        entity_type: Optional[str],
        attributes: NgsiAttributes,
    ) -> None:
        logger.info(
            "projector.redirected.upsert",
            web_service_id=web_service.id,
            entity_name=entity_name,
            entity_type=entity_type,
        )
        response = await self._call(
            self._gateway.upsert_entity(
                entity_id=entity_name,
                entity_type=entity_type,
                attributes=attributes,
                service=web_service.service,
                service_path=web_service.subservice,
            )
        )
        self._interpret(response, web_service, entity_name, entity_type)

    async def _call(self, request) -> BrokerResponse:
        return await watch_orion(request, self._alarms)

    def _interpret(
        self,
        response: BrokerResponse,
        web_service: WebService,
        entity_name: Optional[str],
        entity_type: Optional[str],
    ) -> None:
        if response.status_code == NO_CONTENT:
            self._alarms.release_alarm(ORION_ALARM)
            return

        logger.error(
            "projector.unexpected_status",
            web_service_id=web_service.id,
            entity_name=entity_name,
            entity_type=entity_type,
            status_code=response.status_code,
            body=response.body,
        )
        raise RemoteProtocolError(
            web_service.id,
            entity_type,
            response.body,
            response.status_code,
            entity_name=entity_name,
        )
