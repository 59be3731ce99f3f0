"""
DTOs Package - Application Layer

This package contains Data Transfer Objects (DTOs) used for data exchange
between the application layer and the presentation layer.
"""

from .health_dto import (
    AlarmDTO,
    ApplicationInfoDTO,
    DependencyStatusDTO,
    SystemHealthDTO,
)
from .web_service_dto import (
    ServiceAttributeDTO,
    WebServiceCreateDTO,
    WebServiceListResponseDTO,
    WebServiceProvisionRequestDTO,
    WebServiceResponseDTO,
    WebServiceUpdateDTO,
)

__all__ = [
    "AlarmDTO",
    "ApplicationInfoDTO",
    "DependencyStatusDTO",
    "SystemHealthDTO",
    "ServiceAttributeDTO",
    "WebServiceCreateDTO",
    "WebServiceListResponseDTO",
    "WebServiceProvisionRequestDTO",
    "WebServiceResponseDTO",
    "WebServiceUpdateDTO",
]
