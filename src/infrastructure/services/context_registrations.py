"""Context provider registrations for lazy attributes and commands."""

from __future__ import annotations

from copy import deepcopy
from typing import Any, Dict, List

from src.domain.entities.context import BrokerResponse
from src.domain.entities.errors import RemoteProtocolError
from src.domain.entities.web_service import WebService
from src.domain.gateways.orion_gateway import IOrionGateway
from src.domain.ports.context_collaborators import IRegistrationManager
from src.domain.ports.health_check import IAlarmState
from src.shared import get_logger
from src.shared.consts import ORION_ALARM

from .orion_alarm import watch_orion

logger = get_logger(__name__)

CREATED = 201
NO_CONTENT = 204
NOT_FOUND = 404


class ContextRegistrationManager(IRegistrationManager):
    """
    Registers the agent as context provider for the lazy attributes and
    commands of a web service.

    Orion keeps one registration per web service. Sending registrations for
    an update drops the previous registration before creating the new one;
    a web service without lazy attributes or commands ends up with none.
    Broker answers feed the ORION alarm like every other broker call.
    """

    def __init__(
        self, orion_gateway: IOrionGateway, provider_url: str, alarms: IAlarmState
    ) -> None:
        self._gateway = orion_gateway
        self._provider_url = provider_url
        self._alarms = alarms

    async def send_registrations(
        self, is_removal: bool, web_service: WebService
    ) -> WebService:
        result = deepcopy(web_service)

        if result.registration_id:
            await self._delete(result)
            result.registration_id = None

        if is_removal:
            return result

        provided_attributes = self._provided_attributes(result)
        if not provided_attributes:
            logger.debug(
                "registration.skipped",
                web_service_id=result.id,
                entity_name=result.name,
            )
            return result

        payload: Dict[str, Any] = {
            "dataProvided": {
                "entities": [{"id": result.name, "type": result.type}],
                "attrs": provided_attributes,
            },
            "provider": {"http": {"url": self._provider_url}},
        }
        response = await watch_orion(
            self._gateway.create_registration(
                payload, service=result.service, service_path=result.subservice
            ),
            self._alarms,
        )
        if response.status_code != CREATED or not response.resource_id:
            self._reject(response, result)
        self._alarms.release_alarm(ORION_ALARM)

        result.registration_id = response.resource_id
        logger.info(
            "registration.created",
            web_service_id=result.id,
            registration_id=result.registration_id,
            attrs=provided_attributes,
        )
        return result

    async def _delete(self, web_service: WebService) -> None:
        response = await watch_orion(
            self._gateway.delete_registration(
                web_service.registration_id,
                service=web_service.service,
                service_path=web_service.subservice,
            ),
            self._alarms,
        )
        if response.status_code not in (NO_CONTENT, NOT_FOUND):
            self._reject(response, web_service)
        self._alarms.release_alarm(ORION_ALARM)

        logger.info(
            "registration.deleted",
            web_service_id=web_service.id,
            registration_id=web_service.registration_id,
            status_code=response.status_code,
        )

    @staticmethod
    def _provided_attributes(web_service: WebService) -> List[str]:
        return [attribute.name for attribute in web_service.lazy] + [
            command.name for command in web_service.commands
        ]

    @staticmethod
    def _reject(response: BrokerResponse, web_service: WebService) -> None:
        logger.error(
            "registration.unexpected_status",
            web_service_id=web_service.id,
            status_code=response.status_code,
            body=response.body,
        )
        raise RemoteProtocolError(
            web_service.id,
            web_service.type,
            response.body,
            response.status_code,
            entity_name=web_service.name,
        )
