"""Domain entities for provisioned web services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass(slots=True)
class ServiceAttribute:
    """Attribute of a web service as projected into the Context Broker.

    ``entity_name``/``entity_type`` redirect the attribute to a different
    remote entity than the one owning the web service.
    """

    name: str
    type: str = ""
    value: Any = None
    object_id: Optional[str] = None
    expression: Optional[str] = None
    entity_name: Optional[str] = None
    entity_type: Optional[str] = None
    reverse: Optional[List[Dict[str, Any]]] = None


@dataclass(slots=True)
class Subscription:
    """Context Broker subscription owned by a web service."""

    id: str
    triggers: List[str] = field(default_factory=list)


@dataclass(slots=True)
class WebService:
    """A provisioned web service (device group) record."""

    id: str
    service: str
    subservice: str
    type: Optional[str] = None
    name: Optional[str] = None
    prefix: str = ""
    expression: Optional[str] = None
    endpoint: Optional[str] = None
    timezone: Optional[str] = None
    active: List[ServiceAttribute] = field(default_factory=list)
    lazy: List[ServiceAttribute] = field(default_factory=list)
    commands: List[ServiceAttribute] = field(default_factory=list)
    static_attributes: List[ServiceAttribute] = field(default_factory=list)
    registration_id: Optional[str] = None
    creation_date: Optional[datetime] = None
    subscriptions: List[Subscription] = field(default_factory=list)


@dataclass(slots=True)
class WebServiceUpdate:
    """Partial web service consumed by the update pipeline.

    ``None`` marks a field that is not part of the update.
    """

    id: str
    service: str
    subservice: str
    type: Optional[str] = None
    name: Optional[str] = None
    prefix: Optional[str] = None
    expression: Optional[str] = None
    endpoint: Optional[str] = None
    timezone: Optional[str] = None
    active: Optional[List[ServiceAttribute]] = None
    lazy: Optional[List[ServiceAttribute]] = None
    commands: Optional[List[ServiceAttribute]] = None
    static_attributes: Optional[List[ServiceAttribute]] = None


@dataclass(slots=True)
class WebServiceList:
    """Page of web services plus the total number of matches."""

    count: int
    web_services: List[WebService] = field(default_factory=list)


@dataclass(slots=True)
class TypeTemplate:
    """Default attributes configured for an entity type."""

    active: List[ServiceAttribute] = field(default_factory=list)
    lazy: List[ServiceAttribute] = field(default_factory=list)
    commands: List[ServiceAttribute] = field(default_factory=list)
    static_attributes: List[ServiceAttribute] = field(default_factory=list)


@dataclass(slots=True)
class ServiceGroup:
    """Tenant-level configuration used when web services are created
    on behalf of device onboarding."""

    service: str
    subservice: str
    type: Optional[str] = None
    template: Optional[TypeTemplate] = None


@dataclass(slots=True)
class UnregistrationReport:
    """Outcome of an unregistration; warnings hold best-effort failures."""

    web_service_id: str
    warnings: List[str] = field(default_factory=list)
