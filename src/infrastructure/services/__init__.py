"""Infrastructure services package."""

from .context_broker_projector import ContextBrokerProjector
from .context_registrations import ContextRegistrationManager
from .context_subscriptions import ContextSubscriptionManager
from .health_check_service import HealthCheckService

__all__ = [
    "ContextBrokerProjector",
    "ContextRegistrationManager",
    "ContextSubscriptionManager",
    "HealthCheckService",
]
