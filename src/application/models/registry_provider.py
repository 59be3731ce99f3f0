"""Holder of the registry backend currently serving the agent."""

from __future__ import annotations

import threading
from typing import Optional

from src.domain.entities.errors import RegistryNotAvailableError
from src.domain.repositories.web_service_registry import IWebServiceRegistry


class RegistryProvider:
    """
    Gives use cases access to the active registry backend.

    The backend is activated once the application has finished starting
    (indexes created, connections opened). Until then, and after shutdown,
    every access raises ``RegistryNotAvailableError``.
    """

    def __init__(self, registry: Optional[IWebServiceRegistry] = None) -> None:
        self._registry = registry
        self._lock = threading.Lock()

    def activate(self, registry: IWebServiceRegistry) -> None:
        with self._lock:
            self._registry = registry

    def deactivate(self) -> None:
        with self._lock:
            self._registry = None

    @property
    def is_available(self) -> bool:
        return self._registry is not None

    def get(self) -> IWebServiceRegistry:
        registry = self._registry
        if registry is None:
            raise RegistryNotAvailableError()
        return registry
