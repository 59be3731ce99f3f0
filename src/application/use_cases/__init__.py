"""
Use Cases Package - Application Layer

This package contains use cases that implement the business logic
of the application. Use cases orchestrate the flow of data between the
web service registry and the Context Broker.
"""

from .web_service_use_cases import (
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

__all__ = [
    "ClearRegistryUseCase",
    "FindOrCreateWebServiceUseCase",
    "GetWebServiceByNameUseCase",
    "GetWebServicesByAttributeUseCase",
    "GetWebServiceUseCase",
    "ListWebServicesUseCase",
    "RegisterWebServiceUseCase",
    "UnregisterWebServiceUseCase",
    "UpdateWebServiceUseCase",
]
