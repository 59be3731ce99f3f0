from __future__ import annotations

from copy import deepcopy
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple

import pytest
from pymongo.errors import DuplicateKeyError, PyMongoError

from src.application.models import ProvisioningDefaults, RegistryProvider
from src.domain.entities.context import BrokerResponse
from src.domain.entities.errors import DomainError
from src.domain.entities.web_service import ServiceAttribute, Subscription, WebService
from src.domain.services import AlarmManager
from src.infrastructure.repositories import InMemoryWebServiceRegistry


def make_web_service(
    web_service_id: str = "ws-001",
    *,
    service: str = "smartcity",
    subservice: str = "/weather",
    **overrides: Any,
) -> WebService:
    values: Dict[str, Any] = {
        "type": "WeatherObserved",
        "name": None,
        "endpoint": "https://api.example.org/weather",
        "active": [ServiceAttribute(name="temperature", type="Number", object_id="t")],
        "static_attributes": [ServiceAttribute(name="city", type="Text", value="Madrid")],
    }
    values.update(overrides)
    return WebService(id=web_service_id, service=service, subservice=subservice, **values)


@pytest.fixture()
def web_service_factory() -> Callable[..., WebService]:
    return make_web_service


@pytest.fixture()
def sample_web_service() -> WebService:
    return make_web_service(
        lazy=[ServiceAttribute(name="humidity", type="Number")],
        commands=[ServiceAttribute(name="reset", type="command")],
        subscriptions=[Subscription(id="sub-1", triggers=["temperature"])],
    )


@pytest.fixture()
def alarm_manager() -> AlarmManager:
    return AlarmManager()


@pytest.fixture()
def memory_registry() -> InMemoryWebServiceRegistry:
    return InMemoryWebServiceRegistry()


@pytest.fixture()
def registry_provider(memory_registry: InMemoryWebServiceRegistry) -> RegistryProvider:
    provider = RegistryProvider()
    provider.activate(memory_registry)
    return provider


@pytest.fixture()
def provisioning_defaults() -> ProvisioningDefaults:
    return ProvisioningDefaults.from_config(
        "WebService",
        {
            "WeatherObserved": {
                "attributes": [{"name": "pressure", "type": "Number"}],
                "static_attributes": [
                    {"name": "source", "type": "Text", "value": "template"},
                    {"name": "city", "type": "Text", "value": "Unknown"},
                ],
            }
        },
    )


class RecordingProjector:
    """Projector double recording every call; errors can be scripted per method."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, WebService]] = []
        self.errors: Dict[str, DomainError] = {}

    async def _record(self, method: str, web_service: WebService) -> None:
        self.calls.append((method, deepcopy(web_service)))
        error = self.errors.get(method)
        if error is not None:
            raise error

    async def create(self, web_service: WebService) -> None:
        await self._record("create", web_service)

    async def update(self, web_service: WebService) -> None:
        await self._record("update", web_service)

    async def remove(self, web_service: WebService) -> None:
        await self._record("remove", web_service)


class RecordingRegistrationManager:
    def __init__(self, registration_id: Optional[str] = "reg-1") -> None:
        self.calls: List[Tuple[bool, WebService]] = []
        self.error: Optional[DomainError] = None
        self.registration_id = registration_id

    async def send_registrations(
        self, is_removal: bool, web_service: WebService
    ) -> WebService:
        self.calls.append((is_removal, deepcopy(web_service)))
        if self.error is not None:
            raise self.error
        result = deepcopy(web_service)
        result.registration_id = None if is_removal else self.registration_id
        return result


class RecordingSubscriptionManager:
    def __init__(self) -> None:
        self.calls: List[Tuple[str, str]] = []
        self.errors: Dict[str, DomainError] = {}

    async def unsubscribe(self, web_service: WebService, subscription_id: str) -> None:
        self.calls.append((web_service.id, subscription_id))
        error = self.errors.get(subscription_id)
        if error is not None:
            raise error


@pytest.fixture()
def projector() -> RecordingProjector:
    return RecordingProjector()


@pytest.fixture()
def registration_manager() -> RecordingRegistrationManager:
    return RecordingRegistrationManager()


@pytest.fixture()
def subscription_manager() -> RecordingSubscriptionManager:
    return RecordingSubscriptionManager()


class FakeCursor:
    def __init__(self, documents: Sequence[Dict[str, Any]]):
        self._documents = list(documents)
        self._skip = 0
        self._limit: int | None = None

    def sort(self, key: str, direction: int = 1) -> "FakeCursor":
        self._documents.sort(key=lambda doc: doc.get(key), reverse=direction < 0)
        return self

    def skip(self, amount: int) -> "FakeCursor":
        self._skip = amount
        return self

    def limit(self, amount: int) -> "FakeCursor":
        self._limit = amount or None
        return self

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        docs = self._documents[self._skip :]
        if self._limit is not None:
            docs = docs[: self._limit]
        return iter(docs)


class FakeCollection:
    """In-process stand-in for a pymongo collection with a unique key."""

    def __init__(self, unique_key: Tuple[str, ...] = ("service", "id")) -> None:
        self.documents: List[Dict[str, Any]] = []
        self.unique_key = unique_key
        self.last_query: Dict[str, Any] | None = None
        self.created_indexes: List[tuple[Any, ...]] = []

    def find_one(self, query: Dict[str, Any]) -> Dict[str, Any] | None:
        self.last_query = query
        for document in self.documents:
            if self._matches(document, query):
                return deepcopy(document)
        return None

    def find(self, query: Dict[str, Any]) -> FakeCursor:
        self.last_query = query
        return FakeCursor(
            [deepcopy(doc) for doc in self.documents if self._matches(doc, query)]
        )

    def count_documents(self, query: Dict[str, Any]) -> int:
        return sum(1 for doc in self.documents if self._matches(doc, query))

    def insert_one(self, document: Dict[str, Any]) -> Any:
        key = tuple(document.get(field) for field in self.unique_key)
        for existing in self.documents:
            if tuple(existing.get(field) for field in self.unique_key) == key:
                raise DuplicateKeyError(f"E11000 duplicate key error: {key}")
        self.documents.append(deepcopy(document))
        return SimpleNamespace(acknowledged=True, inserted_id=document.get("id"))

    def update_one(self, query: Dict[str, Any], update: Dict[str, Any]) -> Any:
        for document in self.documents:
            if self._matches(document, query):
                document.update(deepcopy(update["$set"]))
                return SimpleNamespace(matched_count=1, modified_count=1)
        return SimpleNamespace(matched_count=0, modified_count=0)

    def delete_many(self, query: Dict[str, Any]) -> Any:
        kept = [doc for doc in self.documents if not self._matches(doc, query)]
        deleted = len(self.documents) - len(kept)
        self.documents = kept
        return SimpleNamespace(deleted_count=deleted, acknowledged=True)

    def create_index(self, keys: Any, name: str | None = None, **kwargs: Any) -> Any:
        self.created_indexes.append((keys, name, kwargs))
        return name or keys

    @staticmethod
    def _matches(document: Dict[str, Any], query: Dict[str, Any]) -> bool:
        for key, value in query.items():
            if document.get(key) != value:
                return False
        return True


class FakeMongoDatabase:
    """Async facade mirroring ``MongoDatabase`` over ``FakeCollection``.

    Setting ``failure`` makes every operation raise it.
    """

    def __init__(self) -> None:
        self.collections: Dict[str, FakeCollection] = {}
        self.failure: Optional[PyMongoError] = None
        self.closed = False

    def get_collection(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection())

    def _check(self) -> None:
        if self.failure is not None:
            raise self.failure

    async def find_one(self, collection_name: str, query: Dict[str, Any]) -> Any:
        self._check()
        return self.get_collection(collection_name).find_one(query)

    async def find_many(
        self,
        collection_name: str,
        query: Dict[str, Any],
        sort_by: str | None = None,
        sort_direction: int = 1,
        skip: int = 0,
        limit: int = 0,
    ) -> List[Dict[str, Any]]:
        self._check()
        cursor = self.get_collection(collection_name).find(query)
        if sort_by:
            cursor.sort(sort_by, sort_direction)
        cursor.skip(skip)
        cursor.limit(limit)
        return list(cursor)

    async def count_documents(self, collection_name: str, query: Dict[str, Any]) -> int:
        self._check()
        return self.get_collection(collection_name).count_documents(query)

    async def insert_one(self, collection_name: str, document: Dict[str, Any]) -> Any:
        self._check()
        self.get_collection(collection_name).insert_one(document)
        return document

    async def update_one(
        self, collection_name: str, query: Dict[str, Any], changes: Dict[str, Any]
    ) -> int:
        self._check()
        result = self.get_collection(collection_name).update_one(query, {"$set": changes})
        return result.matched_count

    async def delete_many(self, collection_name: str, query: Dict[str, Any]) -> int:
        self._check()
        return self.get_collection(collection_name).delete_many(query).deleted_count

    async def create_indexes(self) -> None:  # pragma: no cover - stub for tests
        pass

    def ping(self) -> None:
        self._check()

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def fake_mongo_database() -> FakeMongoDatabase:
    return FakeMongoDatabase()


@pytest.fixture()
def dummy_now() -> datetime:
    return datetime.now(timezone.utc)


class ScriptedOrionGateway:
    """Orion gateway double answering from a per-operation response queue.

    Queued items are ``BrokerResponse`` instances or exceptions to raise.
    Unscripted calls answer 204.
    """

    def __init__(self) -> None:
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self.responses: Dict[str, List[Any]] = {}

    def script(self, operation: str, *outcomes: Any) -> None:
        self.responses.setdefault(operation, []).extend(outcomes)

    async def _answer(self, operation: str, **call: Any) -> BrokerResponse:
        self.calls.append((operation, call))
        queue = self.responses.get(operation)
        outcome = queue.pop(0) if queue else BrokerResponse(status_code=204)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def operations(self) -> List[str]:
        return [operation for operation, _ in self.calls]

    async def upsert_entity(self, **kwargs: Any) -> BrokerResponse:
        return await self._answer("upsert_entity", **kwargs)

    async def update_entity_attributes(self, **kwargs: Any) -> BrokerResponse:
        return await self._answer("update_entity_attributes", **kwargs)

    async def delete_entity(self, entity_id: str, **kwargs: Any) -> BrokerResponse:
        return await self._answer("delete_entity", entity_id=entity_id, **kwargs)

    async def create_registration(
        self, payload: Dict[str, Any], **kwargs: Any
    ) -> BrokerResponse:
        return await self._answer("create_registration", payload=payload, **kwargs)

    async def delete_registration(
        self, registration_id: str, **kwargs: Any
    ) -> BrokerResponse:
        return await self._answer(
            "delete_registration", registration_id=registration_id, **kwargs
        )

    async def delete_subscription(
        self, subscription_id: str, **kwargs: Any
    ) -> BrokerResponse:
        return await self._answer(
            "delete_subscription", subscription_id=subscription_id, **kwargs
        )


@pytest.fixture()
def orion_gateway() -> ScriptedOrionGateway:
    return ScriptedOrionGateway()
