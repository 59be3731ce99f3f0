"""Domain ports for health reporting."""

from __future__ import annotations

from typing import List, Protocol

from src.domain.entities.health import Alarm, SystemHealth


class IHealthCheckService(Protocol):
    """Interface for retrieving system health information."""

    async def evaluate(self) -> SystemHealth:
        """Collect and aggregate health information for dependencies."""
        ...


class IAlarmState(Protocol):
    """Process-wide alarm state shared by the components talking to
    remote dependencies."""

    def raise_alarm(self, name: str, message: str) -> bool:
        """Raise the alarm; returns False when it was already raised."""
        ...

    def release_alarm(self, name: str) -> bool:
        """Release the alarm; returns False when it was not raised."""
        ...

    def is_raised(self, name: str) -> bool:
        ...

    def list_alarms(self) -> List[Alarm]:
        ...
