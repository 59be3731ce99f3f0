"""Pure domain services: attribute diffing, NGSI payload building and
alarm state."""

from .alarm_manager import AlarmManager
from .attribute_diff import attribute_difference, merge_attributes, unique_attributes
from .ngsi_payload import (
    build_entity_payload,
    build_redirected_payloads,
    format_attributes,
    format_commands,
    initial_value_for_type,
)

__all__ = [
    "AlarmManager",
    "attribute_difference",
    "build_entity_payload",
    "build_redirected_payloads",
    "format_attributes",
    "format_commands",
    "initial_value_for_type",
    "merge_attributes",
    "unique_attributes",
]
