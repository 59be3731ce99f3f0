"""
Web Services Router - Presentation Layer

This module defines the FastAPI router for the web service provisioning API.
Every endpoint is scoped by the mandatory ``fiware-service`` and
``fiware-servicepath`` headers.
"""

from typing import Optional, Tuple

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Header, HTTPException, Query, Response, status

from src.application.dtos.web_service_dto import (
    WebServiceListResponseDTO,
    WebServiceProvisionRequestDTO,
    WebServiceResponseDTO,
    WebServiceUpdateDTO,
)
from src.application.use_cases.web_service_use_cases import (
    GetWebServiceUseCase,
    ListWebServicesUseCase,
    RegisterWebServiceUseCase,
    UnregisterWebServiceUseCase,
    UpdateWebServiceUseCase,
)
from src.domain.entities.errors import (
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
from src.shared import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/iot/web/services", tags=["Web Services"])

_ERROR_STATUS = (
    (WebServiceNotFoundError, status.HTTP_404_NOT_FOUND),
    (DuplicateWebServiceIdError, status.HTTP_409_CONFLICT),
    (DuplicateWebServiceNameError, status.HTTP_409_CONFLICT),
    (MissingAttributesError, status.HTTP_400_BAD_REQUEST),
    (WebServiceValidationError, status.HTTP_400_BAD_REQUEST),
    (RemoteUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (RegistryNotAvailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (RemoteProtocolError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (InternalStoreError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def _to_http_error(exc: DomainError) -> HTTPException:
    for error_class, status_code in _ERROR_STATUS:
        if isinstance(exc, error_class):
            return HTTPException(status_code=status_code, detail=exc.message)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.message
    )


def fiware_headers(
    fiware_service: Optional[str] = Header(None, alias="fiware-service"),
    fiware_servicepath: Optional[str] = Header(None, alias="fiware-servicepath"),
) -> Tuple[str, str]:
    """Extract the tenant from the mandatory FIWARE headers."""
    missing = [
        name
        for name, value in (
            ("fiware-service", fiware_service),
            ("fiware-servicepath", fiware_servicepath),
        )
        if not value
    ]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Missing mandatory headers: {', '.join(missing)}",
        )
    return fiware_service, fiware_servicepath


@router.post("", status_code=status.HTTP_201_CREATED)
@inject
async def provision_web_services(
    request_dto: WebServiceProvisionRequestDTO,
    tenant: Tuple[str, str] = Depends(fiware_headers),
    register_use_case: RegisterWebServiceUseCase = Depends(
        Provide["register_web_service_use_case"]
    ),
) -> dict:
    """
    Provision one or more web services.

    Services are registered in order; the first failure stops the request
    and services registered before it are kept.
    """
    service, subservice = tenant
    for web_service_dto in request_dto.services:
        try:
            await register_use_case.execute(web_service_dto.to_domain(service, subservice))
        except DomainError as exc:
            logger.info(
                "web_service.provision.failed",
                web_service_id=web_service_dto.web_service_id,
                error=exc.message,
            )
            raise _to_http_error(exc) from exc
    return {}


@router.get(
    "",
    response_model=WebServiceListResponseDTO,
    response_model_exclude_none=True,
)
@inject
async def list_web_services(
    limit: Optional[int] = Query(None, ge=0, description="Maximum number of results"),
    offset: Optional[int] = Query(None, ge=0, description="Number of results to skip"),
    tenant: Tuple[str, str] = Depends(fiware_headers),
    list_use_case: ListWebServicesUseCase = Depends(
        Provide["list_web_services_use_case"]
    ),
) -> WebServiceListResponseDTO:
    """List the web services of the tenant."""
    service, subservice = tenant
    try:
        page = await list_use_case.execute(service, subservice, limit=limit, offset=offset)
    except DomainError as exc:
        raise _to_http_error(exc) from exc
    return WebServiceListResponseDTO.from_domain(page)


@router.get(
    "/{web_service_id}",
    response_model=WebServiceResponseDTO,
    response_model_exclude_none=True,
)
@inject
async def get_web_service(
    web_service_id: str,
    tenant: Tuple[str, str] = Depends(fiware_headers),
    get_use_case: GetWebServiceUseCase = Depends(Provide["get_web_service_use_case"]),
) -> WebServiceResponseDTO:
    service, subservice = tenant
    try:
        web_service = await get_use_case.execute(web_service_id, service, subservice)
    except DomainError as exc:
        raise _to_http_error(exc) from exc
    return WebServiceResponseDTO.from_domain(web_service)


@router.put("/{web_service_id}", status_code=status.HTTP_204_NO_CONTENT)
@inject
async def update_web_service(
    web_service_id: str,
    update_dto: WebServiceUpdateDTO,
    tenant: Tuple[str, str] = Depends(fiware_headers),
    get_use_case: GetWebServiceUseCase = Depends(Provide["get_web_service_use_case"]),
    update_use_case: UpdateWebServiceUseCase = Depends(
        Provide["update_web_service_use_case"]
    ),
) -> Response:
    """
    Update a provisioned web service.

    The web service id cannot be changed and the entity type defaults to
    the stored one.
    """
    if update_dto.web_service_id is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Can't change the ID of a preprovisioned web service",
        )

    service, subservice = tenant
    try:
        existing = await get_use_case.execute(web_service_id, service, subservice)
        await update_use_case.execute(
            update_dto.to_domain(
                web_service_id, service, subservice, default_type=existing.type
            )
        )
    except DomainError as exc:
        raise _to_http_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{web_service_id}", status_code=status.HTTP_204_NO_CONTENT)
@inject
async def delete_web_service(
    web_service_id: str,
    tenant: Tuple[str, str] = Depends(fiware_headers),
    unregister_use_case: UnregisterWebServiceUseCase = Depends(
        Provide["unregister_web_service_use_case"]
    ),
) -> Response:
    service, subservice = tenant
    try:
        report = await unregister_use_case.execute(web_service_id, service, subservice)
    except DomainError as exc:
        raise _to_http_error(exc) from exc

    if report.warnings:
        logger.warning(
            "web_service.delete.partial_cleanup",
            web_service_id=web_service_id,
            warnings=report.warnings,
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
