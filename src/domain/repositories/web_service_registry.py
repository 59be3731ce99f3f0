"""
Web Service Registry Interface

Contract shared by the in-memory and the MongoDB registry backends. Every
operation is scoped by the tenant pair (service, subservice) unless stated
otherwise, and every backend failure surfaces as a domain error.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional

from src.domain.entities.web_service import WebService, WebServiceList


class IWebServiceRegistry(ABC):
    """Interface for web service registry implementations."""

    @abstractmethod
    async def store(self, web_service: WebService) -> WebService:
        """
        Store a new web service.

        The check for an existing ``(service, id)`` pair and the insertion
        happen atomically. The stored record is a deep copy stamped with
        its creation date.

        Raises:
            DuplicateWebServiceIdError: If the pair is already registered
            InternalStoreError: If the backend fails
        """
        pass

    @abstractmethod
    async def get(self, web_service_id: str, service: str, subservice: str) -> WebService:
        """
        Retrieve a web service by id.

        Raises:
            WebServiceNotFoundError: If no record matches
        """
        pass

    @abstractmethod
    async def get_by_name(self, name: str, service: str, subservice: str) -> WebService:
        """
        Retrieve the web service whose entity name matches.

        Raises:
            WebServiceNotFoundError: If no record matches
        """
        pass

    @abstractmethod
    async def get_by_attribute(
        self,
        attribute_name: str,
        attribute_value: Any,
        service: Optional[str] = None,
        subservice: Optional[str] = None,
    ) -> List[WebService]:
        """
        Retrieve the web services whose field equals the given value.

        Omitting service and subservice searches every tenant.

        Raises:
            WebServiceNotFoundError: If nothing matches
        """
        pass

    @abstractmethod
    async def list(
        self,
        service: Optional[str],
        subservice: Optional[str],
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> WebServiceList:
        """
        List web services with pagination.

        Args:
            service: Tenant filter; None lists every tenant
            subservice: Sub-tenant filter; None lists every sub-tenant
            limit: Maximum number of records returned; 0 or None means no cap
            offset: Number of matches skipped; 0 or None means no skip

        Returns:
            The page and the total number of matches before pagination
        """
        pass

    @abstractmethod
    async def update(self, web_service: WebService) -> WebService:
        """
        Replace the mutable fields of a stored web service.

        Raises:
            WebServiceNotFoundError: If the record does not exist
        """
        pass

    @abstractmethod
    async def remove(self, web_service_id: str, service: str, subservice: str) -> None:
        """
        Remove a web service. Removing an unknown id is not an error.

        Every tenant held by the backend is scanned and the id is removed
        wherever it appears.
        """
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Remove every stored web service."""
        pass
