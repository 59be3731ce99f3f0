"""
MongoDB Web Service Registry - Infrastructure Layer

This module implements the IWebServiceRegistry interface using MongoDB as the
underlying data store. Uniqueness of ``(service, id)`` is enforced by the
unique index created in ``MongoDatabase.create_indexes``.
"""

from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pymongo
from pymongo.errors import DuplicateKeyError, PyMongoError

from src.domain.entities.errors import (
    DuplicateWebServiceIdError,
    InternalStoreError,
    WebServiceNotFoundError,
)
from src.domain.entities.web_service import (
    ServiceAttribute,
    Subscription,
    WebService,
    WebServiceList,
)
from src.domain.ports.health_check import IAlarmState
from src.domain.repositories.web_service_registry import IWebServiceRegistry
from src.infrastructure.database import MongoDatabase
from src.infrastructure.database.mongo_database import WEB_SERVICES_COLLECTION
from src.shared import get_logger
from src.shared.consts import MONGO_ALARM

logger = get_logger(__name__)

_ATTRIBUTE_LISTS = ("active", "lazy", "commands", "static_attributes")


class MongoWebServiceRegistry(IWebServiceRegistry):
    """MongoDB implementation of the web service registry."""

    COLLECTION_NAME = WEB_SERVICES_COLLECTION

    def __init__(self, mongo_database: MongoDatabase, alarms: IAlarmState):
        """
        Initialize the MongoDB web service registry.

        Args:
            mongo_database: MongoDB database client
            alarms: Alarm state raised on MongoDB failures
        """
        self.db = mongo_database
        self.alarms = alarms

    def _to_document(self, web_service: WebService) -> Dict[str, Any]:
        document = {
            "id": web_service.id,
            "service": web_service.service,
            "subservice": web_service.subservice,
            "type": web_service.type,
            "name": web_service.name,
            "prefix": web_service.prefix,
            "expression": web_service.expression,
            "endpoint": web_service.endpoint,
            "timezone": web_service.timezone,
            "registration_id": web_service.registration_id,
            "creation_date": web_service.creation_date,
            "subscriptions": [
                {"id": subscription.id, "triggers": list(subscription.triggers)}
                for subscription in web_service.subscriptions
            ],
        }
        for list_name in _ATTRIBUTE_LISTS:
            document[list_name] = [
                asdict(attribute) for attribute in getattr(web_service, list_name)
            ]
        return document

    def _to_entity(self, document: Dict[str, Any]) -> WebService:
        attribute_lists = {
            list_name: [
                ServiceAttribute(**attribute)
                for attribute in document.get(list_name) or []
            ]
            for list_name in _ATTRIBUTE_LISTS
        }
        return WebService(
            id=document["id"],
            service=document["service"],
            subservice=document["subservice"],
            type=document.get("type"),
            name=document.get("name"),
            prefix=document.get("prefix") or "",
            expression=document.get("expression"),
            endpoint=document.get("endpoint"),
            timezone=document.get("timezone"),
            registration_id=document.get("registration_id"),
            creation_date=document.get("creation_date"),
            subscriptions=[
                Subscription(id=item["id"], triggers=list(item.get("triggers") or []))
                for item in document.get("subscriptions") or []
            ],
            **attribute_lists,
        )

    def _backend_failed(self, operation: str, error: PyMongoError) -> InternalStoreError:
        logger.error(
            "registry.mongo.operation_failed",
            operation=operation,
            error=str(error),
        )
        self.alarms.raise_alarm(MONGO_ALARM, str(error))
        return InternalStoreError(f"Internal MongoDB error during {operation}", error)

    def _backend_ok(self) -> None:
        self.alarms.release_alarm(MONGO_ALARM)

    async def store(self, web_service: WebService) -> WebService:
        """
        Insert a new web service record.

        Raises:
            DuplicateWebServiceIdError: If ``(service, id)`` already exists
            InternalStoreError: If MongoDB fails
        """
        record = self._to_entity(self._to_document(web_service))
        record.creation_date = datetime.now(timezone.utc)

        try:
            await self.db.insert_one(self.COLLECTION_NAME, self._to_document(record))
        except DuplicateKeyError:
            self._backend_ok()
            logger.debug(
                "registry.mongo.store.duplicate",
                web_service_id=record.id,
                service=record.service,
            )
            raise DuplicateWebServiceIdError(record.id)
        except PyMongoError as exc:
            raise self._backend_failed("store", exc) from exc

        self._backend_ok()
        logger.debug(
            "registry.mongo.store",
            web_service_id=record.id,
            service=record.service,
            subservice=record.subservice,
        )
        return record

    async def get(self, web_service_id: str, service: str, subservice: str) -> WebService:
        document = await self._find_one(
            "get", {"id": web_service_id, "service": service, "subservice": subservice}
        )
        if document is None:
            raise WebServiceNotFoundError(web_service_id)
        return self._to_entity(document)

    async def get_by_name(self, name: str, service: str, subservice: str) -> WebService:
        document = await self._find_one(
            "get_by_name", {"name": name, "service": service, "subservice": subservice}
        )
        if document is None:
            raise WebServiceNotFoundError(name)
        return self._to_entity(document)

    async def get_by_attribute(
        self,
        attribute_name: str,
        attribute_value: Any,
        service: Optional[str] = None,
        subservice: Optional[str] = None,
    ) -> List[WebService]:
        query = self._tenant_query(service, subservice)
        query[attribute_name] = attribute_value

        try:
            documents = await self.db.find_many(self.COLLECTION_NAME, query)
        except PyMongoError as exc:
            raise self._backend_failed("get_by_attribute", exc) from exc
        self._backend_ok()

        if not documents:
            raise WebServiceNotFoundError(f"{attribute_name}={attribute_value}")
        return [self._to_entity(document) for document in documents]

    async def list(
        self,
        service: Optional[str],
        subservice: Optional[str],
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> WebServiceList:
        query = self._tenant_query(service, subservice)

        try:
            count = await self.db.count_documents(self.COLLECTION_NAME, query)
            documents = await self.db.find_many(
                self.COLLECTION_NAME,
                query,
                sort_by="creation_date",
                sort_direction=pymongo.ASCENDING,
                skip=offset or 0,
                limit=limit or 0,
            )
        except PyMongoError as exc:
            raise self._backend_failed("list", exc) from exc
        self._backend_ok()

        return WebServiceList(
            count=count,
            web_services=[self._to_entity(document) for document in documents],
        )

    async def update(self, web_service: WebService) -> WebService:
        """
        Replace the mutable fields of a stored record.

        Raises:
            WebServiceNotFoundError: If ``(service, id)`` is not stored
            InternalStoreError: If MongoDB fails
        """
        document = self._to_document(web_service)
        changes = {
            key: document[key]
            for key in (
                "type",
                "name",
                "prefix",
                "expression",
                "endpoint",
                "timezone",
                "registration_id",
                *_ATTRIBUTE_LISTS,
            )
        }

        try:
            matched = await self.db.update_one(
                self.COLLECTION_NAME,
                {"id": web_service.id, "service": web_service.service},
                changes,
            )
            stored = await self.db.find_one(
                self.COLLECTION_NAME,
                {"id": web_service.id, "service": web_service.service},
            )
        except PyMongoError as exc:
            raise self._backend_failed("update", exc) from exc
        self._backend_ok()

        if not matched or stored is None:
            raise WebServiceNotFoundError(web_service.id)
        return self._to_entity(stored)

    async def remove(self, web_service_id: str, service: str, subservice: str) -> None:
        try:
            deleted = await self.db.delete_many(
                self.COLLECTION_NAME, {"id": web_service_id}
            )
        except PyMongoError as exc:
            raise self._backend_failed("remove", exc) from exc
        self._backend_ok()

        logger.debug(
            "registry.mongo.remove",
            web_service_id=web_service_id,
            service=service,
            subservice=subservice,
            deleted=deleted,
        )

    async def clear(self) -> None:
        try:
            await self.db.delete_many(self.COLLECTION_NAME, {})
        except PyMongoError as exc:
            raise self._backend_failed("clear", exc) from exc
        self._backend_ok()

    async def _find_one(
        self, operation: str, query: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        try:
            document = await self.db.find_one(self.COLLECTION_NAME, query)
        except PyMongoError as exc:
            raise self._backend_failed(operation, exc) from exc
        self._backend_ok()
        return document

    @staticmethod
    def _tenant_query(
        service: Optional[str], subservice: Optional[str]
    ) -> Dict[str, Any]:
        query: Dict[str, Any] = {}
        if service is not None:
            query["service"] = service
        if subservice is not None:
            query["subservice"] = subservice
        return query
