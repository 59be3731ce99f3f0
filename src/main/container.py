"""
Dependency container injection module - Main Layer

This module implements the dependency injection container
to simplify the management and lifecycle of dependencies
in the application.
"""

from contextlib import asynccontextmanager

from dependency_injector import containers, providers

from src.application.models import ProvisioningDefaults, RegistryProvider, SystemInfo
from src.application.use_cases.health_use_cases import (
    GetApplicationInfoUseCase,
    GetHealthStatusUseCase,
)
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
from src.domain.services import AlarmManager
from src.infrastructure.database import MongoDatabase
from src.infrastructure.gateways import OrionGateway
from src.infrastructure.repositories import (
    InMemoryWebServiceRegistry,
    MongoWebServiceRegistry,
)
from src.infrastructure.services import (
    ContextBrokerProjector,
    ContextRegistrationManager,
    ContextSubscriptionManager,
    HealthCheckService,
)
from src.shared import EnumRegistryType, get_logger

from .config import AppSettings

logger = get_logger(__name__)


def _enum_value(value):
    return value.value if hasattr(value, "value") else str(value)


class AppContainer(containers.DeclarativeContainer):
    """Composition Root using dependecy-injector."""

    wiring_config = containers.WiringConfiguration(
        packages=["..presentation", "..application"]
    )

    # Settings
    config = providers.Configuration()
    registry_type = providers.Callable(_enum_value, config.registry.type)

    # Domain state
    alarm_manager = providers.Singleton(AlarmManager)

    provisioning_defaults = providers.Singleton(
        ProvisioningDefaults.from_config,
        default_type=config.agent.default_type,
        types=config.agent.types,
    )

    # Infrastructure
    mongo_database = providers.Singleton(
        MongoDatabase,
        mongo_uri=config.database.mongo_uri,
        db_name=config.database.database_name,
    )

    web_service_registry = providers.Selector(
        registry_type,
        memory=providers.Singleton(InMemoryWebServiceRegistry),
        mongodb=providers.Singleton(
            MongoWebServiceRegistry,
            mongo_database=mongo_database,
            alarms=alarm_manager,
        ),
    )

    registry_provider = providers.Singleton(RegistryProvider)

    # Gateways
    orion_gateway = providers.Singleton(
        OrionGateway,
        base_url=config.fiware.orion_url,
        timeout=config.fiware.timeout,
    )

    # Context Broker collaborators
    web_service_projector = providers.Singleton(
        ContextBrokerProjector,
        orion_gateway=orion_gateway,
        alarms=alarm_manager,
        timestamp=config.agent.timestamp,
    )

    registration_manager = providers.Singleton(
        ContextRegistrationManager,
        orion_gateway=orion_gateway,
        provider_url=config.agent.provider_url,
        alarms=alarm_manager,
    )

    subscription_manager = providers.Singleton(
        ContextSubscriptionManager,
        orion_gateway=orion_gateway,
        alarms=alarm_manager,
    )

    # Application (use cases)
    register_web_service_use_case = providers.Factory(
        RegisterWebServiceUseCase,
        registry_provider=registry_provider,
        projector=web_service_projector,
        registration_manager=registration_manager,
        provisioning_defaults=provisioning_defaults,
    )

    update_web_service_use_case = providers.Factory(
        UpdateWebServiceUseCase,
        registry_provider=registry_provider,
        projector=web_service_projector,
        registration_manager=registration_manager,
    )

    unregister_web_service_use_case = providers.Factory(
        UnregisterWebServiceUseCase,
        registry_provider=registry_provider,
        projector=web_service_projector,
        registration_manager=registration_manager,
        subscription_manager=subscription_manager,
    )

    find_or_create_web_service_use_case = providers.Factory(
        FindOrCreateWebServiceUseCase,
        registry_provider=registry_provider,
        register_use_case=register_web_service_use_case,
    )

    list_web_services_use_case = providers.Factory(
        ListWebServicesUseCase,
        registry_provider=registry_provider,
    )

    get_web_service_use_case = providers.Factory(
        GetWebServiceUseCase,
        registry_provider=registry_provider,
    )

    get_web_service_by_name_use_case = providers.Factory(
        GetWebServiceByNameUseCase,
        registry_provider=registry_provider,
    )

    get_web_services_by_attribute_use_case = providers.Factory(
        GetWebServicesByAttributeUseCase,
        registry_provider=registry_provider,
    )

    clear_registry_use_case = providers.Factory(
        ClearRegistryUseCase,
        registry_provider=registry_provider,
    )

    health_check_service = providers.Singleton(
        HealthCheckService,
        alarms=alarm_manager,
        orion_url=config.fiware.orion_url,
        mongo_database=providers.Selector(
            registry_type,
            memory=providers.Object(None),
            mongodb=mongo_database,
        ),
    )

    system_info = providers.Singleton(
        SystemInfo,
        title=config.agent.title,
        description=config.agent.description,
        version=config.agent.version,
        environment=providers.Callable(_enum_value, config.environment),
        git_commit=config.agent.git_commit,
        build_time=config.agent.build_time,
        orion_url=config.fiware.orion_url,
        registry_type=registry_type,
        mongo_uri=config.database.mongo_uri,
    )

    get_health_status_use_case = providers.Factory(
        GetHealthStatusUseCase,
        health_check_service=health_check_service,
    )

    get_application_info_use_case = providers.Factory(
        GetApplicationInfoUseCase,
        health_check_service=health_check_service,
        system_info=system_info,
    )


# -------------------------
# Global Container Instance
# -------------------------
_app_container: AppContainer | None = None


def init_container(settings: AppSettings) -> AppContainer:
    """Initialize global container with application settings."""

    global _app_container

    container = AppContainer()
    container.config.from_pydantic(settings)
    _app_container = container
    return container


def get_container() -> AppContainer:
    """Get the initialized global container."""

    if _app_container is None:
        raise RuntimeError("Container has not been initialized yet")

    return _app_container


@asynccontextmanager
async def app_lifespan():
    """
    Centralized lifecycle management for external resources.

    The selected registry backend is prepared (MongoDB indexes) and then
    activated in the registry provider; use cases fail with
    ``RegistryNotAvailableError`` outside this context.
    """
    container = get_container()

    uses_mongo = container.registry_type() == EnumRegistryType.MONGODB.value
    mongo_database = container.mongo_database() if uses_mongo else None
    registry_provider = container.registry_provider()

    try:
        if mongo_database is not None:
            logger.info("container.mongo.ensure_indexes")
            await mongo_database.create_indexes()

        registry_provider.activate(container.web_service_registry())
        logger.info(
            "container.resources.initialized",
            registry_type=container.registry_type(),
        )
        yield container

    finally:
        registry_provider.deactivate()

        if mongo_database is not None:
            logger.info("container.mongo.close")
            mongo_database.close()

        logger.info("container.resources.shutdown")
