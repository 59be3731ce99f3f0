"""
Repositories Package

This package contains interfaces defining repository contracts
for data access operations. Specific implementations are provided
by the infrastructure layer.
"""

from .web_service_registry import IWebServiceRegistry

__all__ = ["IWebServiceRegistry"]
