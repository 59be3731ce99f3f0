"""
Repositories Package - Infrastructure Layer

This package contains the web service registry backends implementing the
domain registry interface.
"""

from .memory_web_service_registry import InMemoryWebServiceRegistry
from .mongo_web_service_registry import MongoWebServiceRegistry

__all__ = ["InMemoryWebServiceRegistry", "MongoWebServiceRegistry"]
