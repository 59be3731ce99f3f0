"""ORION alarm bookkeeping shared by every Context Broker collaborator."""

from __future__ import annotations

from typing import Awaitable

from src.domain.entities.context import BrokerResponse
from src.domain.entities.errors import RemoteUnavailableError
from src.domain.ports.health_check import IAlarmState
from src.shared.consts import ORION_ALARM


async def watch_orion(
    request: Awaitable[BrokerResponse], alarms: IAlarmState
) -> BrokerResponse:
    """Await a gateway call, raising the ORION alarm on transport failure.

    Releasing the alarm is left to the caller, once the answer is one it
    accepts.
    """
    try:
        return await request
    except RemoteUnavailableError as exc:
        alarms.raise_alarm(ORION_ALARM, exc.message)
        raise
