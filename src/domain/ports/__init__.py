"""Domain ports package."""

from .context_collaborators import IRegistrationManager, ISubscriptionManager
from .health_check import IAlarmState, IHealthCheckService
from .web_service_projector import IWebServiceProjector

__all__ = [
    "IAlarmState",
    "IHealthCheckService",
    "IRegistrationManager",
    "ISubscriptionManager",
    "IWebServiceProjector",
]
