"""
Domain Errors

Single error taxonomy for the provisioning agent. Registry backends and
gateways translate their native failures into these classes so callers
never depend on pymongo or httpx exceptions.
"""

from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base class for domain errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class DuplicateWebServiceIdError(DomainError):
    """Raised when a web service id is already registered for the service."""

    def __init__(self, web_service_id: str, details: Optional[Dict[str, Any]] = None):
        self.web_service_id = web_service_id
        super().__init__(
            f"A web service with id {web_service_id} already exists", details
        )


class DuplicateWebServiceNameError(DomainError):
    """Raised when an entity name is already used inside the same tenant."""

    def __init__(self, name: str, details: Optional[Dict[str, Any]] = None):
        self.name = name
        super().__init__(
            f"A web service with entity name {name} already exists", details
        )


class WebServiceNotFoundError(DomainError):
    """Raised when a web service cannot be found."""

    def __init__(self, identifier: str, details: Optional[Dict[str, Any]] = None):
        self.identifier = identifier
        super().__init__(f"Web service {identifier} not found", details)


class MissingAttributesError(DomainError):
    """Raised when a request lacks attributes required by the operation."""


class WebServiceValidationError(DomainError):
    """Raised when a provisioning request is malformed."""


class RegistryNotAvailableError(DomainError):
    """Raised when the registry is accessed before a backend is activated."""

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            "Tried to access web service information before a registry "
            "was available",
            details,
        )


class InternalStoreError(DomainError):
    """Raised when the registry backend fails; wraps the native error."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        details = {"cause": str(cause)} if cause is not None else None
        super().__init__(message, details)


class RemoteUnavailableError(DomainError):
    """Raised when the Context Broker cannot be reached."""


class RemoteProtocolError(DomainError):
    """Raised when the Context Broker answers with an unexpected status.

    ``entity_id`` is the web service id; ``entity_name`` is the Context
    Broker entity the request addressed, when there is one.
    """

    def __init__(
        self,
        entity_id: str,
        entity_type: Optional[str],
        body: str,
        status_code: Optional[int] = None,
        entity_name: Optional[str] = None,
    ):
        self.entity_id = entity_id
        self.entity_type = entity_type
        self.body = body
        self.status_code = status_code
        self.entity_name = entity_name
        super().__init__(
            f"Error accessing entity data for entity {entity_id} "
            f"of type {entity_type}: {body}",
            {
                "entity_id": entity_id,
                "entity_name": entity_name,
                "entity_type": entity_type,
                "status_code": status_code,
                "body": body,
            },
        )
