"""
Web Service Use Cases - Application Layer

This module defines the synchronization pipelines that keep the web service
registry and the Context Broker in step, plus the read accessors over the
registry. Remote side effects always happen before the registry is written.
When a later step fails, the remote side effects already made are undone on
a best-effort basis so registry and Context Broker do not diverge.
"""

from copy import deepcopy
from typing import Any, List, Optional

from dependency_injector.wiring import Provide, inject

from src.application.models import ProvisioningDefaults, RegistryProvider
from src.domain.entities.errors import (
    DomainError,
    DuplicateWebServiceIdError,
    DuplicateWebServiceNameError,
    MissingAttributesError,
    WebServiceNotFoundError,
)
from src.domain.entities.web_service import (
    ServiceGroup,
    TypeTemplate,
    UnregistrationReport,
    WebService,
    WebServiceList,
    WebServiceUpdate,
)
from src.domain.ports.context_collaborators import (
    IRegistrationManager,
    ISubscriptionManager,
)
from src.domain.ports.web_service_projector import IWebServiceProjector
from src.domain.repositories.web_service_registry import IWebServiceRegistry
from src.domain.services import attribute_difference, merge_attributes, unique_attributes
from src.shared import get_logger

logger = get_logger(__name__)

_ATTRIBUTE_LISTS = ("active", "lazy", "commands", "static_attributes")


async def _ensure_name_available(
    registry: IWebServiceRegistry, web_service: WebService
) -> None:
    try:
        holder = await registry.get_by_name(
            web_service.name, web_service.service, web_service.subservice
        )
    except WebServiceNotFoundError:
        return

    if holder.id != web_service.id:
        logger.warning(
            "web_service.name_conflict",
            web_service_id=web_service.id,
            entity_name=web_service.name,
            holder_id=holder.id,
            service=web_service.service,
            subservice=web_service.subservice,
        )
        raise DuplicateWebServiceNameError(web_service.name)


async def _discard_entity(
    projector: IWebServiceProjector, web_service: WebService, reason: str
) -> Optional[str]:
    try:
        await projector.remove(web_service)
    except DomainError as exc:
        logger.warning(
            "web_service.entity_cleanup_failed",
            web_service_id=web_service.id,
            entity_name=web_service.name,
            reason=reason,
            error=exc.message,
        )
        return exc.message
    return None


class RegisterWebServiceUseCase:
    """Use case for registering a new web service."""

    @inject
    def __init__(
        self,
        registry_provider: RegistryProvider = Provide["registry_provider"],
        projector: IWebServiceProjector = Provide["web_service_projector"],
        registration_manager: IRegistrationManager = Provide["registration_manager"],
        provisioning_defaults: ProvisioningDefaults = Provide["provisioning_defaults"],
    ):
        self.registry_provider = registry_provider
        self.projector = projector
        self.registration_manager = registration_manager
        self.provisioning_defaults = provisioning_defaults

    async def execute(
        self, web_service: WebService, group: Optional[ServiceGroup] = None
    ) -> WebService:
        """
        Register a web service.

        Steps run in order and any failure stops the pipeline: duplicate
        check, default resolution, entity name check, entity creation in
        the Context Broker, context provider registration and finally the
        registry write. A failure after the entity was created removes the
        registration and the entity again before the error is re-raised.

        Args:
            web_service: Record built from the provisioning request
            group: Optional tenant configuration providing type and templates

        Returns:
            The stored record

        Raises:
            DuplicateWebServiceIdError: If ``(service, id)`` is registered
            DuplicateWebServiceNameError: If the entity name is taken
            RemoteUnavailableError: If the Context Broker is unreachable
            RemoteProtocolError: If the Context Broker rejects the entity
        """
        registry = self.registry_provider.get()

        await self._check_duplicates(registry, web_service)
        resolved = self._resolve_defaults(web_service, group)
        await _ensure_name_available(registry, resolved)

        await self.projector.create(resolved)

        registered: Optional[WebService] = None
        try:
            registered = await self.registration_manager.send_registrations(
                False, resolved
            )
            stored = await registry.store(registered)
        except DomainError as exc:
            await self._roll_back(registry, registered or resolved, exc)
            raise

        logger.info(
            "web_service.registered",
            web_service_id=stored.id,
            entity_name=stored.name,
            entity_type=stored.type,
            service=stored.service,
            subservice=stored.subservice,
        )
        return stored

    async def _roll_back(
        self,
        registry: IWebServiceRegistry,
        web_service: WebService,
        error: DomainError,
    ) -> None:
        failures: List[str] = []

        if web_service.registration_id:
            try:
                await self.registration_manager.send_registrations(True, web_service)
            except DomainError as exc:
                logger.warning(
                    "web_service.register.registration_cleanup_failed",
                    web_service_id=web_service.id,
                    registration_id=web_service.registration_id,
                    error=exc.message,
                )
                failures.append(exc.message)

        if isinstance(error, DuplicateWebServiceIdError) and await self._entity_claimed(
            registry, web_service
        ):
            logger.info(
                "web_service.register.entity_kept",
                web_service_id=web_service.id,
                entity_name=web_service.name,
            )
        else:
            failure = await _discard_entity(self.projector, web_service, "register")
            if failure is not None:
                failures.append(failure)

        logger.warning(
            "web_service.register.rolled_back",
            web_service_id=web_service.id,
            entity_name=web_service.name,
            error=error.message,
            cleanup_failures=failures,
        )

    @staticmethod
    async def _entity_claimed(
        registry: IWebServiceRegistry, web_service: WebService
    ) -> bool:
        # A concurrent registration of the same id that won the store owns
        # the entity when the names match.
        try:
            holders = await registry.get_by_attribute(
                "id", web_service.id, web_service.service
            )
        except DomainError:
            return False
        return any(holder.name == web_service.name for holder in holders)

    async def _check_duplicates(
        self, registry: IWebServiceRegistry, web_service: WebService
    ) -> None:
        try:
            await registry.get_by_attribute("id", web_service.id, web_service.service)
        except WebServiceNotFoundError:
            return

        logger.warning(
            "web_service.register.duplicate",
            web_service_id=web_service.id,
            service=web_service.service,
        )
        raise DuplicateWebServiceIdError(web_service.id)

    def _resolve_defaults(
        self, web_service: WebService, group: Optional[ServiceGroup]
    ) -> WebService:
        resolved = deepcopy(web_service)

        if not resolved.type:
            if group is not None and group.type:
                resolved.type = group.type
            else:
                resolved.type = self.provisioning_defaults.default_type

        if not resolved.name:
            resolved.name = f"{resolved.type}:{resolved.id}"
            logger.debug(
                "web_service.register.default_name",
                web_service_id=resolved.id,
                entity_name=resolved.name,
            )

        template = self._select_template(resolved.type, group)
        for list_name in _ATTRIBUTE_LISTS:
            requested = getattr(resolved, list_name) or []
            if template is not None:
                merged = merge_attributes(getattr(template, list_name), requested)
            else:
                merged = unique_attributes(requested)
            setattr(resolved, list_name, merged)

        return resolved

    def _select_template(
        self, entity_type: str, group: Optional[ServiceGroup]
    ) -> Optional[TypeTemplate]:
        if group is not None and group.template is not None:
            return group.template
        return self.provisioning_defaults.template_for(entity_type)


class UpdateWebServiceUseCase:
    """Use case for updating a registered web service."""

    @inject
    def __init__(
        self,
        registry_provider: RegistryProvider = Provide["registry_provider"],
        projector: IWebServiceProjector = Provide["web_service_projector"],
        registration_manager: IRegistrationManager = Provide["registration_manager"],
    ):
        self.registry_provider = registry_provider
        self.projector = projector
        self.registration_manager = registration_manager

    async def execute(self, update: WebServiceUpdate) -> WebService:
        """
        Apply a partial update.

        Only attributes whose name is new to each list are pushed to the
        Context Broker, addressed to the entity name stored before the
        update. Attribute lists, name and type present in the update replace
        the stored ones.

        A new entity name is projected as a new entity; once the registry
        holds the new name the entity under the old name is removed.

        Raises:
            MissingAttributesError: If id or type is missing
            WebServiceNotFoundError: If the web service is not registered
            DuplicateWebServiceNameError: If the new entity name is taken
        """
        if not update.id or not update.type:
            raise MissingAttributesError("Id or type missing from the web service update")

        registry = self.registry_provider.get()
        existing = await registry.get(update.id, update.service, update.subservice)

        merged = self._merge(existing, update)
        renamed = merged.name != existing.name
        if renamed:
            await _ensure_name_available(registry, merged)

        await self.projector.update(self._difference(existing, update))
        if renamed:
            await self.projector.create(merged)

        try:
            merged = await self.registration_manager.send_registrations(False, merged)
            stored = await registry.update(merged)
        except DomainError:
            if renamed:
                await _discard_entity(self.projector, merged, "update")
            raise

        if renamed:
            await _discard_entity(self.projector, existing, "rename")

        logger.info(
            "web_service.updated",
            web_service_id=stored.id,
            entity_name=stored.name,
            service=stored.service,
            subservice=stored.subservice,
        )
        return stored

    @staticmethod
    def _difference(existing: WebService, update: WebServiceUpdate) -> WebService:
        diff = deepcopy(existing)
        for list_name in _ATTRIBUTE_LISTS:
            setattr(
                diff,
                list_name,
                attribute_difference(
                    getattr(existing, list_name), getattr(update, list_name)
                ),
            )
        return diff

    @staticmethod
    def _merge(existing: WebService, update: WebServiceUpdate) -> WebService:
        merged = deepcopy(existing)
        for list_name in _ATTRIBUTE_LISTS:
            replacement = getattr(update, list_name)
            if replacement is not None:
                setattr(merged, list_name, unique_attributes(replacement))

        merged.type = update.type
        for field_name in ("name", "prefix", "expression", "endpoint", "timezone"):
            value = getattr(update, field_name)
            if value is not None:
                setattr(merged, field_name, value)
        return merged


class UnregisterWebServiceUseCase:
    """Use case for removing a web service."""

    @inject
    def __init__(
        self,
        registry_provider: RegistryProvider = Provide["registry_provider"],
        projector: IWebServiceProjector = Provide["web_service_projector"],
        registration_manager: IRegistrationManager = Provide["registration_manager"],
        subscription_manager: ISubscriptionManager = Provide["subscription_manager"],
    ):
        self.registry_provider = registry_provider
        self.projector = projector
        self.registration_manager = registration_manager
        self.subscription_manager = subscription_manager

    async def execute(
        self, web_service_id: str, service: str, subservice: str
    ) -> UnregistrationReport:
        """
        Remove a web service from the Context Broker and the registry.

        Subscription and registration cleanup is best effort; their failures
        are returned as warnings. The registry record is removed even when
        the entity removal fails, in which case that failure is raised
        afterwards.

        Raises:
            WebServiceNotFoundError: If the web service is not registered
            RemoteUnavailableError: If the entity could not be removed
            RemoteProtocolError: If the entity removal was rejected
        """
        registry = self.registry_provider.get()
        web_service = await registry.get(web_service_id, service, subservice)
        report = UnregistrationReport(web_service_id=web_service_id)

        for subscription in web_service.subscriptions:
            try:
                await self.subscription_manager.unsubscribe(web_service, subscription.id)
            except DomainError as exc:
                logger.warning(
                    "web_service.unregister.unsubscribe_failed",
                    web_service_id=web_service_id,
                    subscription_id=subscription.id,
                    error=exc.message,
                )
                report.warnings.append(exc.message)

        try:
            await self.registration_manager.send_registrations(True, web_service)
        except DomainError as exc:
            logger.warning(
                "web_service.unregister.registration_failed",
                web_service_id=web_service_id,
                registration_id=web_service.registration_id,
                error=exc.message,
            )
            report.warnings.append(exc.message)

        remote_error: Optional[DomainError] = None
        try:
            await self.projector.remove(web_service)
        except DomainError as exc:
            logger.error(
                "web_service.unregister.remote_failed",
                web_service_id=web_service_id,
                entity_name=web_service.name,
                error=exc.message,
            )
            remote_error = exc

        await registry.remove(web_service_id, service, subservice)
        logger.info(
            "web_service.unregistered",
            web_service_id=web_service_id,
            service=service,
            subservice=subservice,
            warnings=len(report.warnings),
        )

        if remote_error is not None:
            raise remote_error
        return report


class FindOrCreateWebServiceUseCase:
    """Use case returning a web service, registering it from a group when absent."""

    @inject
    def __init__(
        self,
        registry_provider: RegistryProvider = Provide["registry_provider"],
        register_use_case: RegisterWebServiceUseCase = Provide[
            "register_web_service_use_case"
        ],
    ):
        self.registry_provider = registry_provider
        self.register_use_case = register_use_case

    async def execute(self, web_service_id: str, group: ServiceGroup) -> WebService:
        registry = self.registry_provider.get()
        try:
            return await registry.get(web_service_id, group.service, group.subservice)
        except WebServiceNotFoundError:
            logger.info(
                "web_service.find_or_create.creating",
                web_service_id=web_service_id,
                service=group.service,
                subservice=group.subservice,
            )

        web_service = WebService(
            id=web_service_id,
            service=group.service,
            subservice=group.subservice,
            type=group.type,
        )
        return await self.register_use_case.execute(web_service, group)


class ListWebServicesUseCase:
    """Use case for listing web services with pagination."""

    @inject
    def __init__(
        self, registry_provider: RegistryProvider = Provide["registry_provider"]
    ):
        self.registry_provider = registry_provider

    async def execute(
        self,
        service: Optional[str],
        subservice: Optional[str],
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> WebServiceList:
        return await self.registry_provider.get().list(
            service, subservice, limit=limit, offset=offset
        )


class GetWebServiceUseCase:
    """Use case for retrieving a web service by id."""

    @inject
    def __init__(
        self, registry_provider: RegistryProvider = Provide["registry_provider"]
    ):
        self.registry_provider = registry_provider

    async def execute(
        self, web_service_id: str, service: str, subservice: str
    ) -> WebService:
        return await self.registry_provider.get().get(web_service_id, service, subservice)


class GetWebServiceByNameUseCase:
    """Use case for retrieving a web service by entity name."""

    @inject
    def __init__(
        self, registry_provider: RegistryProvider = Provide["registry_provider"]
    ):
        self.registry_provider = registry_provider

    async def execute(self, name: str, service: str, subservice: str) -> WebService:
        return await self.registry_provider.get().get_by_name(name, service, subservice)


class GetWebServicesByAttributeUseCase:
    """Use case for retrieving web services whose field matches a value."""

    @inject
    def __init__(
        self, registry_provider: RegistryProvider = Provide["registry_provider"]
    ):
        self.registry_provider = registry_provider

    async def execute(
        self,
        attribute_name: str,
        attribute_value: Any,
        service: Optional[str] = None,
        subservice: Optional[str] = None,
    ) -> List[WebService]:
        return await self.registry_provider.get().get_by_attribute(
            attribute_name, attribute_value, service, subservice
        )


class ClearRegistryUseCase:
    """Use case wiping every registered web service."""

    @inject
    def __init__(
        self, registry_provider: RegistryProvider = Provide["registry_provider"]
    ):
        self.registry_provider = registry_provider

    async def execute(self) -> None:
        await self.registry_provider.get().clear()
        logger.info("web_service.registry.cleared")
