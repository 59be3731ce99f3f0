"""
Domain Entities Package

This package contains the web service records, their attributes and the
value objects exchanged with the Context Broker and the health endpoints.
"""

from .context import BrokerResponse
from .errors import (
    DomainError,
    DuplicateWebServiceIdError,
    DuplicateWebServiceNameError,
    InternalStoreError,
    MissingAttributesError,
    RegistryNotAvailableError,
    RemoteProtocolError,
    RemoteUnavailableError,
    WebServiceNotFoundError,
    WebServiceValidationError,
)
from .health import Alarm, ApplicationInfo, DependencyStatus, ServiceStatus, SystemHealth
from .web_service import (
    ServiceAttribute,
    ServiceGroup,
    Subscription,
    TypeTemplate,
    UnregistrationReport,
    WebService,
    WebServiceList,
    WebServiceUpdate,
)

__all__ = [
    "Alarm",
    "ApplicationInfo",
    "BrokerResponse",
    "DependencyStatus",
    "DomainError",
    "DuplicateWebServiceIdError",
    "DuplicateWebServiceNameError",
    "InternalStoreError",
    "MissingAttributesError",
    "RegistryNotAvailableError",
    "RemoteProtocolError",
    "RemoteUnavailableError",
    "ServiceAttribute",
    "ServiceGroup",
    "ServiceStatus",
    "Subscription",
    "SystemHealth",
    "TypeTemplate",
    "UnregistrationReport",
    "WebService",
    "WebServiceList",
    "WebServiceNotFoundError",
    "WebServiceUpdate",
    "WebServiceValidationError",
]
