"""Register/update/unregister against the real broker collaborators, checking
that Orion is left in step with the registry when a step fails."""

from __future__ import annotations

import pytest

from src.application.models import RegistryProvider
from src.application.use_cases.web_service_use_cases import (
    RegisterWebServiceUseCase,
    UnregisterWebServiceUseCase,
    UpdateWebServiceUseCase,
)
from src.domain.entities.context import BrokerResponse
from src.domain.entities.errors import InternalStoreError, RemoteProtocolError
from src.domain.entities.web_service import ServiceAttribute, WebServiceUpdate
from src.infrastructure.repositories import InMemoryWebServiceRegistry
from src.infrastructure.services import (
    ContextBrokerProjector,
    ContextRegistrationManager,
    ContextSubscriptionManager,
)
from tests.conftest import make_web_service


class _UnavailableStoreRegistry(InMemoryWebServiceRegistry):
    async def store(self, web_service):
        raise InternalStoreError("Internal MongoDB error during store")


def _created(registration_id: str) -> BrokerResponse:
    return BrokerResponse(
        status_code=201, location=f"/v2/registrations/{registration_id}"
    )


def _provider_web_service(**overrides):
    overrides.setdefault("lazy", [ServiceAttribute(name="humidity", type="Number")])
    return make_web_service("ws-1", **overrides)


@pytest.fixture()
def projector(orion_gateway, alarm_manager) -> ContextBrokerProjector:
    return ContextBrokerProjector(orion_gateway, alarm_manager)


@pytest.fixture()
def registrations(orion_gateway, alarm_manager) -> ContextRegistrationManager:
    return ContextRegistrationManager(orion_gateway, "http://agent:4041", alarm_manager)


def _register_use_case(registry, projector, registrations, provisioning_defaults):
    provider = RegistryProvider()
    provider.activate(registry)
    return RegisterWebServiceUseCase(
        registry_provider=provider,
        projector=projector,
        registration_manager=registrations,
        provisioning_defaults=provisioning_defaults,
    )


@pytest.mark.asyncio
async def test_store_failure_leaves_nothing_in_orion(
    orion_gateway, projector, registrations, provisioning_defaults
) -> None:
    registry = _UnavailableStoreRegistry()
    use_case = _register_use_case(registry, projector, registrations, provisioning_defaults)
    orion_gateway.script("create_registration", _created("r1"), _created("r2"))

    for _ in range(2):
        with pytest.raises(InternalStoreError):
            await use_case.execute(_provider_web_service())

    assert orion_gateway.operations() == [
        "upsert_entity",
        "create_registration",
        "delete_registration",
        "delete_entity",
    ] * 2
    deleted = [
        call["registration_id"]
        for operation, call in orion_gateway.calls
        if operation == "delete_registration"
    ]
    assert deleted == ["r1", "r2"]
    assert (await registry.list(None, None)).count == 0


@pytest.mark.asyncio
async def test_rejected_registration_removes_the_entity(
    orion_gateway, projector, registrations, provisioning_defaults, memory_registry
) -> None:
    use_case = _register_use_case(
        memory_registry, projector, registrations, provisioning_defaults
    )
    orion_gateway.script(
        "create_registration", BrokerResponse(status_code=400, body="bad payload")
    )

    with pytest.raises(RemoteProtocolError):
        await use_case.execute(_provider_web_service())

    assert orion_gateway.operations() == [
        "upsert_entity",
        "create_registration",
        "delete_entity",
    ]
    assert orion_gateway.calls[2][1]["entity_id"] == "WeatherObserved:ws-1"
    assert (await memory_registry.list(None, None)).count == 0


@pytest.mark.asyncio
async def test_renamed_web_service_is_removed_under_its_current_name(
    orion_gateway,
    projector,
    registrations,
    alarm_manager,
    registry_provider,
    memory_registry,
) -> None:
    await memory_registry.store(_provider_web_service(name="old-name", lazy=[]))
    update = UpdateWebServiceUseCase(
        registry_provider=registry_provider,
        projector=projector,
        registration_manager=registrations,
    )
    unregister = UnregisterWebServiceUseCase(
        registry_provider=registry_provider,
        projector=projector,
        registration_manager=registrations,
        subscription_manager=ContextSubscriptionManager(orion_gateway, alarm_manager),
    )

    await update.execute(
        WebServiceUpdate(
            id="ws-1",
            service="smartcity",
            subservice="/weather",
            type="WeatherObserved",
            name="new-name",
        )
    )
    await unregister.execute("ws-1", "smartcity", "/weather")

    entity_calls = [
        (operation, call["entity_id"])
        for operation, call in orion_gateway.calls
        if operation in ("upsert_entity", "delete_entity")
    ]
    assert entity_calls == [
        ("upsert_entity", "new-name"),
        ("delete_entity", "old-name"),
        ("delete_entity", "new-name"),
    ]
