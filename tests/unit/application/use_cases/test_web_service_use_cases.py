from __future__ import annotations

import pytest

from src.application.models import RegistryProvider
from src.application.use_cases.web_service_use_cases import (
    ClearRegistryUseCase,
    FindOrCreateWebServiceUseCase,
    GetWebServiceByNameUseCase,
    GetWebServicesByAttributeUseCase,
    GetWebServiceUseCase,
    ListWebServicesUseCase,
    RegisterWebServiceUseCase,
    UnregisterWebServiceUseCase,
    UpdateWebServiceUseCase,
)
from src.domain.entities.errors import (
    DuplicateWebServiceIdError,
    DuplicateWebServiceNameError,
    InternalStoreError,
    MissingAttributesError,
    RegistryNotAvailableError,
    RemoteProtocolError,
    RemoteUnavailableError,
    WebServiceNotFoundError,
)
from src.domain.entities.web_service import (
    ServiceAttribute,
    ServiceGroup,
    Subscription,
    TypeTemplate,
    WebServiceUpdate,
)
from src.infrastructure.repositories import InMemoryWebServiceRegistry
from tests.conftest import make_web_service


def _names(attributes):
    return [attribute.name for attribute in attributes]


@pytest.fixture()
def register(
    registry_provider, projector, registration_manager, provisioning_defaults
) -> RegisterWebServiceUseCase:
    return RegisterWebServiceUseCase(
        registry_provider=registry_provider,
        projector=projector,
        registration_manager=registration_manager,
        provisioning_defaults=provisioning_defaults,
    )


@pytest.fixture()
def update(registry_provider, projector, registration_manager) -> UpdateWebServiceUseCase:
    return UpdateWebServiceUseCase(
        registry_provider=registry_provider,
        projector=projector,
        registration_manager=registration_manager,
    )


@pytest.fixture()
def unregister(
    registry_provider, projector, registration_manager, subscription_manager
) -> UnregisterWebServiceUseCase:
    return UnregisterWebServiceUseCase(
        registry_provider=registry_provider,
        projector=projector,
        registration_manager=registration_manager,
        subscription_manager=subscription_manager,
    )


def _update_for(web_service_id: str = "ws-001", **values) -> WebServiceUpdate:
    values.setdefault("type", "WeatherObserved")
    return WebServiceUpdate(
        id=web_service_id, service="smartcity", subservice="/weather", **values
    )


# Registration


@pytest.mark.asyncio
async def test_register_creates_entity_then_registration_then_record(
    register, projector, registration_manager, memory_registry
) -> None:
    stored = await register.execute(make_web_service(lazy=[ServiceAttribute("humidity")]))

    assert stored.name == "WeatherObserved:ws-001"
    assert stored.registration_id == "reg-1"
    assert [method for method, _ in projector.calls] == ["create"]
    assert projector.calls[0][1].name == "WeatherObserved:ws-001"
    assert registration_manager.calls[0][0] is False

    record = await memory_registry.get("ws-001", "smartcity", "/weather")
    assert record.registration_id == "reg-1"


@pytest.mark.asyncio
async def test_register_merges_type_template_with_request(register) -> None:
    stored = await register.execute(make_web_service())

    assert _names(stored.active) == ["pressure", "temperature"]
    assert _names(stored.static_attributes) == ["source", "city"]
    assert stored.static_attributes[1].value == "Madrid"


@pytest.mark.asyncio
async def test_register_collapses_repeated_names_without_template(register) -> None:
    stored = await register.execute(
        make_web_service(
            type="Unconfigured",
            static_attributes=[
                ServiceAttribute(name="city", type="Text", value="Madrid"),
                ServiceAttribute(name="city", type="Text", value="Valencia"),
            ],
        )
    )

    assert len(stored.static_attributes) == 1
    assert stored.static_attributes[0].value == "Valencia"


@pytest.mark.asyncio
async def test_register_resolves_type_from_group_then_global_default(register) -> None:
    grouped = await register.execute(
        make_web_service("ws-a", type=None),
        ServiceGroup(service="smartcity", subservice="/weather", type="Sensor"),
    )
    defaulted = await register.execute(make_web_service("ws-b", type=None))

    assert grouped.type == "Sensor"
    assert grouped.name == "Sensor:ws-a"
    assert defaulted.type == "WebService"


@pytest.mark.asyncio
async def test_group_template_wins_over_type_template(register) -> None:
    group = ServiceGroup(
        service="smartcity",
        subservice="/weather",
        template=TypeTemplate(active=[ServiceAttribute(name="wind", type="Number")]),
    )

    stored = await register.execute(make_web_service(), group)

    assert _names(stored.active) == ["wind", "temperature"]


@pytest.mark.asyncio
async def test_register_keeps_explicit_name(register) -> None:
    stored = await register.execute(make_web_service(name="Station:Madrid"))

    assert stored.name == "Station:Madrid"


@pytest.mark.asyncio
async def test_register_rejects_duplicate_before_remote_calls(
    register, projector, memory_registry
) -> None:
    await memory_registry.store(make_web_service(subservice="/other"))

    with pytest.raises(DuplicateWebServiceIdError):
        await register.execute(make_web_service())

    assert projector.calls == []


@pytest.mark.asyncio
async def test_register_rejects_taken_entity_name(
    register, projector, memory_registry
) -> None:
    await memory_registry.store(make_web_service("ws-other", name="Weather:shared"))

    with pytest.raises(DuplicateWebServiceNameError):
        await register.execute(make_web_service(name="Weather:shared"))

    assert projector.calls == []


@pytest.mark.asyncio
async def test_remote_failure_leaves_no_record(
    register, projector, registration_manager, memory_registry
) -> None:
    projector.errors["create"] = RemoteUnavailableError("connection refused")

    with pytest.raises(RemoteUnavailableError):
        await register.execute(make_web_service())

    assert registration_manager.calls == []
    assert (await memory_registry.list(None, None)).count == 0


@pytest.mark.asyncio
async def test_registration_failure_leaves_no_record(
    register, projector, registration_manager, memory_registry
) -> None:
    registration_manager.error = RemoteProtocolError("ws-001", None, "", 400)

    with pytest.raises(RemoteProtocolError):
        await register.execute(make_web_service())

    assert (await memory_registry.list(None, None)).count == 0
    assert [method for method, _ in projector.calls] == ["create", "remove"]
    assert projector.calls[1][1].name == "WeatherObserved:ws-001"


class _FailingStoreRegistry(InMemoryWebServiceRegistry):
    async def store(self, web_service):
        raise InternalStoreError("Internal MongoDB error during store")


@pytest.mark.asyncio
async def test_store_failure_undoes_registration_and_entity(
    projector, registration_manager, provisioning_defaults
) -> None:
    provider = RegistryProvider()
    provider.activate(_FailingStoreRegistry())
    use_case = RegisterWebServiceUseCase(
        registry_provider=provider,
        projector=projector,
        registration_manager=registration_manager,
        provisioning_defaults=provisioning_defaults,
    )

    with pytest.raises(InternalStoreError):
        await use_case.execute(make_web_service(lazy=[ServiceAttribute("humidity")]))

    assert [is_removal for is_removal, _ in registration_manager.calls] == [False, True]
    assert registration_manager.calls[1][1].registration_id == "reg-1"
    assert [method for method, _ in projector.calls] == ["create", "remove"]


@pytest.mark.asyncio
async def test_failed_cleanup_still_raises_original_error(
    register, projector, registration_manager, memory_registry
) -> None:
    registration_manager.error = RemoteProtocolError("ws-001", None, "", 400)
    projector.errors["remove"] = RemoteUnavailableError("connection refused")

    with pytest.raises(RemoteProtocolError):
        await register.execute(make_web_service())

    assert (await memory_registry.list(None, None)).count == 0


@pytest.mark.asyncio
async def test_lost_duplicate_race_keeps_the_winning_entity(
    register, projector, registration_manager, memory_registry, monkeypatch
) -> None:
    original_store = memory_registry.store

    async def store_after_concurrent_winner(web_service):
        await original_store(make_web_service(name=web_service.name))
        return await original_store(web_service)

    monkeypatch.setattr(memory_registry, "store", store_after_concurrent_winner)

    with pytest.raises(DuplicateWebServiceIdError):
        await register.execute(make_web_service(lazy=[ServiceAttribute("humidity")]))

    assert [is_removal for is_removal, _ in registration_manager.calls] == [False, True]
    assert [method for method, _ in projector.calls] == ["create"]


@pytest.mark.asyncio
async def test_register_without_active_registry_fails(
    projector, registration_manager, provisioning_defaults
) -> None:
    use_case = RegisterWebServiceUseCase(
        registry_provider=RegistryProvider(),
        projector=projector,
        registration_manager=registration_manager,
        provisioning_defaults=provisioning_defaults,
    )

    with pytest.raises(RegistryNotAvailableError):
        await use_case.execute(make_web_service())

    assert projector.calls == []


# Update


@pytest.mark.asyncio
async def test_update_requires_id_and_type(update) -> None:
    with pytest.raises(MissingAttributesError):
        await update.execute(_update_for(type=None))
    with pytest.raises(MissingAttributesError):
        await update.execute(_update_for(""))


@pytest.mark.asyncio
async def test_update_of_unknown_web_service(update) -> None:
    with pytest.raises(WebServiceNotFoundError):
        await update.execute(_update_for("missing"))


@pytest.mark.asyncio
async def test_update_pushes_new_attributes_to_previous_name(
    update, projector, memory_registry
) -> None:
    await memory_registry.store(make_web_service(name="Weather:old"))

    stored = await update.execute(
        _update_for(
            name="Weather:new",
            active=[
                ServiceAttribute(name="temperature", type="Number"),
                ServiceAttribute(name="pressure", type="Number"),
            ],
        )
    )

    method, pushed = projector.calls[0]
    assert method == "update"
    assert pushed.name == "Weather:old"
    assert _names(pushed.active) == ["pressure"]
    assert pushed.static_attributes == []

    assert stored.name == "Weather:new"
    assert _names(stored.active) == ["temperature", "pressure"]
    assert _names(stored.static_attributes) == ["city"]
    assert stored.registration_id == "reg-1"


@pytest.mark.asyncio
async def test_update_does_not_push_changed_values(update, projector, memory_registry) -> None:
    await memory_registry.store(make_web_service(name="Weather:1"))

    stored = await update.execute(
        _update_for(
            static_attributes=[ServiceAttribute(name="city", type="Text", value="Bilbao")]
        )
    )

    assert projector.calls[0][1].static_attributes == []
    assert stored.static_attributes[0].value == "Bilbao"


@pytest.mark.asyncio
async def test_rename_moves_the_remote_entity(update, projector, memory_registry) -> None:
    await memory_registry.store(make_web_service(name="Weather:old"))

    await update.execute(_update_for(name="Weather:new"))

    assert [(method, ws.name) for method, ws in projector.calls] == [
        ("update", "Weather:old"),
        ("create", "Weather:new"),
        ("remove", "Weather:old"),
    ]
    assert _names(projector.calls[1][1].static_attributes) == ["city"]


@pytest.mark.asyncio
async def test_update_with_same_name_only_pushes_diff(
    update, projector, memory_registry
) -> None:
    await memory_registry.store(make_web_service(name="Weather:1"))

    await update.execute(_update_for(name="Weather:1"))

    assert [method for method, _ in projector.calls] == ["update"]


@pytest.mark.asyncio
async def test_failed_rename_drops_the_new_entity(
    update, projector, registration_manager, memory_registry
) -> None:
    await memory_registry.store(make_web_service(name="Weather:old"))
    registration_manager.error = RemoteUnavailableError("connection refused")

    with pytest.raises(RemoteUnavailableError):
        await update.execute(_update_for(name="Weather:new"))

    assert [(method, ws.name) for method, ws in projector.calls] == [
        ("update", "Weather:old"),
        ("create", "Weather:new"),
        ("remove", "Weather:new"),
    ]
    record = await memory_registry.get("ws-001", "smartcity", "/weather")
    assert record.name == "Weather:old"


@pytest.mark.asyncio
async def test_update_rejects_taken_entity_name(
    update, projector, memory_registry
) -> None:
    await memory_registry.store(make_web_service(name="Weather:1"))
    await memory_registry.store(make_web_service("ws-002", name="Weather:2"))

    with pytest.raises(DuplicateWebServiceNameError):
        await update.execute(_update_for(name="Weather:2"))

    assert projector.calls == []
    record = await memory_registry.get("ws-001", "smartcity", "/weather")
    assert record.name == "Weather:1"


# Unregistration


@pytest.mark.asyncio
async def test_unregister_cleans_everything(
    unregister, projector, registration_manager, subscription_manager, memory_registry
) -> None:
    await memory_registry.store(
        make_web_service(
            name="Weather:1",
            registration_id="reg-1",
            subscriptions=[Subscription(id="sub-1"), Subscription(id="sub-2")],
        )
    )

    report = await unregister.execute("ws-001", "smartcity", "/weather")

    assert report.warnings == []
    assert subscription_manager.calls == [("ws-001", "sub-1"), ("ws-001", "sub-2")]
    assert registration_manager.calls[0][0] is True
    assert [method for method, _ in projector.calls] == ["remove"]
    assert (await memory_registry.list(None, None)).count == 0


@pytest.mark.asyncio
async def test_unregister_reports_best_effort_failures(
    unregister, registration_manager, subscription_manager, memory_registry
) -> None:
    await memory_registry.store(
        make_web_service(subscriptions=[Subscription(id="sub-1"), Subscription(id="sub-2")])
    )
    subscription_manager.errors["sub-1"] = RemoteUnavailableError("subscription gone")
    registration_manager.error = RemoteUnavailableError("registration gone")

    report = await unregister.execute("ws-001", "smartcity", "/weather")

    assert report.warnings == ["subscription gone", "registration gone"]
    assert len(subscription_manager.calls) == 2
    assert (await memory_registry.list(None, None)).count == 0


@pytest.mark.asyncio
async def test_unregister_removes_record_before_raising_remote_error(
    unregister, projector, memory_registry
) -> None:
    await memory_registry.store(make_web_service())
    projector.errors["remove"] = RemoteUnavailableError("connection refused")

    with pytest.raises(RemoteUnavailableError):
        await unregister.execute("ws-001", "smartcity", "/weather")

    assert (await memory_registry.list(None, None)).count == 0


@pytest.mark.asyncio
async def test_unregister_unknown_web_service(unregister, projector) -> None:
    with pytest.raises(WebServiceNotFoundError):
        await unregister.execute("missing", "smartcity", "/weather")

    assert projector.calls == []


# Find or create and read accessors


@pytest.mark.asyncio
async def test_find_or_create_returns_existing(
    registry_provider, register, projector, memory_registry
) -> None:
    await memory_registry.store(make_web_service(name="Weather:1"))
    use_case = FindOrCreateWebServiceUseCase(
        registry_provider=registry_provider, register_use_case=register
    )

    found = await use_case.execute(
        "ws-001", ServiceGroup(service="smartcity", subservice="/weather")
    )

    assert found.name == "Weather:1"
    assert projector.calls == []


@pytest.mark.asyncio
async def test_find_or_create_registers_from_group(
    registry_provider, register, memory_registry
) -> None:
    use_case = FindOrCreateWebServiceUseCase(
        registry_provider=registry_provider, register_use_case=register
    )
    group = ServiceGroup(service="smartcity", subservice="/weather", type="Sensor")

    created = await use_case.execute("ws-new", group)

    assert created.type == "Sensor"
    assert created.name == "Sensor:ws-new"
    assert (await memory_registry.get("ws-new", "smartcity", "/weather")).type == "Sensor"


@pytest.mark.asyncio
async def test_read_accessors(registry_provider, memory_registry) -> None:
    await memory_registry.store(make_web_service("ws-1", name="Weather:1"))
    await memory_registry.store(make_web_service("ws-2", name="Weather:2"))

    page = await ListWebServicesUseCase(registry_provider=registry_provider).execute(
        "smartcity", "/weather", limit=1, offset=1
    )
    by_id = await GetWebServiceUseCase(registry_provider=registry_provider).execute(
        "ws-2", "smartcity", "/weather"
    )
    by_name = await GetWebServiceByNameUseCase(
        registry_provider=registry_provider
    ).execute("Weather:1", "smartcity", "/weather")
    by_endpoint = await GetWebServicesByAttributeUseCase(
        registry_provider=registry_provider
    ).execute("endpoint", "https://api.example.org/weather")

    assert page.count == 2
    assert [ws.id for ws in page.web_services] == ["ws-2"]
    assert by_id.name == "Weather:2"
    assert by_name.id == "ws-1"
    assert len(by_endpoint) == 2

    await ClearRegistryUseCase(registry_provider=registry_provider).execute()
    assert (await memory_registry.list(None, None)).count == 0
