"""
Shared module - Cross-cutting concerns / Shared Layer

This module provides the utilities, constants and enums used by more than
one layer of the agent: environment names, log levels, registry backend
identifiers, alarm names and the NGSI defaults applied when a web service
is projected into the Context Broker.

It must not depend on Infrastructure or Frameworks.
"""

from .consts import EnumEnvironment, EnumLogLevel, EnumRegistryType
from .logging import configure_logging, get_logger, update_logging_from_settings

__all__ = [
    "EnumEnvironment",
    "EnumLogLevel",
    "EnumRegistryType",
    "configure_logging",
    "get_logger",
    "update_logging_from_settings",
]
