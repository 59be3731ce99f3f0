"""Application models package."""

from .provisioning_defaults import ProvisioningDefaults
from .registry_provider import RegistryProvider
from .system_info import SystemInfo

__all__ = ["ProvisioningDefaults", "RegistryProvider", "SystemInfo"]
