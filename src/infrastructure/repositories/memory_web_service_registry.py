"""
In-memory Web Service Registry - Infrastructure Layer

Volatile registry backend keyed by service and web service id. Records are
deep-copied on the way in and out so callers never share state with the
registry.
"""

from copy import deepcopy
from datetime import datetime, timezone
import threading
from typing import Any, Dict, List, Optional

from src.domain.entities.errors import (
    DuplicateWebServiceIdError,
    WebServiceNotFoundError,
)
from src.domain.entities.web_service import WebService, WebServiceList
from src.domain.repositories.web_service_registry import IWebServiceRegistry
from src.shared import get_logger

logger = get_logger(__name__)


class InMemoryWebServiceRegistry(IWebServiceRegistry):
    """Dictionary backed registry: ``{service: {web_service_id: record}}``."""

    def __init__(self) -> None:
        self._services: Dict[str, Dict[str, WebService]] = {}
        self._lock = threading.Lock()

    async def store(self, web_service: WebService) -> WebService:
        record = deepcopy(web_service)
        record.creation_date = datetime.now(timezone.utc)

        with self._lock:
            tenant = self._services.setdefault(record.service, {})
            if record.id in tenant:
                logger.debug(
                    "registry.memory.store.duplicate",
                    web_service_id=record.id,
                    service=record.service,
                )
                raise DuplicateWebServiceIdError(record.id)
            tenant[record.id] = record

        logger.debug(
            "registry.memory.store",
            web_service_id=record.id,
            service=record.service,
            subservice=record.subservice,
        )
        return deepcopy(record)

    async def get(self, web_service_id: str, service: str, subservice: str) -> WebService:
        with self._lock:
            record = self._services.get(service, {}).get(web_service_id)
            if record is None or record.subservice != subservice:
                raise WebServiceNotFoundError(web_service_id)
            return deepcopy(record)

    async def get_by_name(self, name: str, service: str, subservice: str) -> WebService:
        with self._lock:
            for record in self._services.get(service, {}).values():
                if record.subservice == subservice and record.name == name:
                    return deepcopy(record)
        raise WebServiceNotFoundError(name)

    async def get_by_attribute(
        self,
        attribute_name: str,
        attribute_value: Any,
        service: Optional[str] = None,
        subservice: Optional[str] = None,
    ) -> List[WebService]:
        matches = [
            record
            for record in self._snapshot(service, subservice)
            if getattr(record, attribute_name, None) == attribute_value
        ]
        if not matches:
            raise WebServiceNotFoundError(f"{attribute_name}={attribute_value}")
        return matches

    async def list(
        self,
        service: Optional[str],
        subservice: Optional[str],
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> WebServiceList:
        matches = self._snapshot(service, subservice)
        start = offset or 0
        page = matches[start : start + limit] if limit else matches[start:]
        return WebServiceList(count=len(matches), web_services=page)

    async def update(self, web_service: WebService) -> WebService:
        with self._lock:
            record = self._services.get(web_service.service, {}).get(web_service.id)
            if record is None:
                raise WebServiceNotFoundError(web_service.id)

            record.type = web_service.type
            record.name = web_service.name
            record.prefix = web_service.prefix
            record.expression = web_service.expression
            record.endpoint = web_service.endpoint
            record.timezone = web_service.timezone
            record.registration_id = web_service.registration_id
            record.active = deepcopy(web_service.active)
            record.lazy = deepcopy(web_service.lazy)
            record.commands = deepcopy(web_service.commands)
            record.static_attributes = deepcopy(web_service.static_attributes)
            return deepcopy(record)

    async def remove(self, web_service_id: str, service: str, subservice: str) -> None:
        with self._lock:
            for tenant in self._services.values():
                tenant.pop(web_service_id, None)

        logger.debug(
            "registry.memory.remove",
            web_service_id=web_service_id,
            service=service,
            subservice=subservice,
        )

    async def clear(self) -> None:
        with self._lock:
            self._services.clear()

    def _snapshot(
        self, service: Optional[str], subservice: Optional[str]
    ) -> List[WebService]:
        with self._lock:
            if service is None:
                tenants = list(self._services.values())
            else:
                tenants = [self._services.get(service, {})]

            return [
                deepcopy(record)
                for tenant in tenants
                for record in tenant.values()
                if subservice is None or record.subservice == subservice
            ]
