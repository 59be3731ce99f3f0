"""
Controllers Package - Presentation Layer

This package contains FastAPI controllers (routers) that handle
HTTP requests and responses. Controllers are responsible for
input validation, error handling, and mapping between API DTOs
and application layer use cases.
"""

from .system_controller import router as system_router
from .web_services_controller import router as web_services_router

__all__ = ["system_router", "web_services_router"]
