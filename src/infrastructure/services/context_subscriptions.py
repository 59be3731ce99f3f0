"""Cancellation of Context Broker subscriptions owned by web services."""

from __future__ import annotations

from src.domain.entities.errors import RemoteProtocolError
from src.domain.entities.web_service import WebService
from src.domain.gateways.orion_gateway import IOrionGateway
from src.domain.ports.context_collaborators import ISubscriptionManager
from src.domain.ports.health_check import IAlarmState
from src.shared import get_logger
from src.shared.consts import ORION_ALARM

from .orion_alarm import watch_orion

logger = get_logger(__name__)


class ContextSubscriptionManager(ISubscriptionManager):
    """Deletes subscriptions; an already missing subscription counts as removed."""

    def __init__(self, orion_gateway: IOrionGateway, alarms: IAlarmState) -> None:
        self._gateway = orion_gateway
        self._alarms = alarms

    async def unsubscribe(self, web_service: WebService, subscription_id: str) -> None:
        response = await watch_orion(
            self._gateway.delete_subscription(
                subscription_id,
                service=web_service.service,
                service_path=web_service.subservice,
            ),
            self._alarms,
        )
        if response.status_code in (204, 404):
            self._alarms.release_alarm(ORION_ALARM)
            logger.info(
                "subscription.deleted",
                web_service_id=web_service.id,
                subscription_id=subscription_id,
                status_code=response.status_code,
            )
            return

        logger.warning(
            "subscription.delete_failed",
            web_service_id=web_service.id,
            subscription_id=subscription_id,
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
