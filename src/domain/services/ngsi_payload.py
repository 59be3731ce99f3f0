"""
NGSIv2 payload building for web services.

A web service is projected as one Context Broker entity named after the web
service, plus one entity per distinct ``entity_name`` redirection found in
its attributes. Active attributes always start from a type-dependent
placeholder: their values arrive later through live data, never at
provisioning time.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from src.domain.entities.web_service import ServiceAttribute, WebService
from src.shared.consts import (
    ATTRIBUTE_DEFAULT,
    COMMAND_RESULT_INITIAL,
    COMMAND_RESULT_SUFFIX,
    COMMAND_RESULT_TYPE,
    COMMAND_STATUS_INITIAL,
    COMMAND_STATUS_SUFFIX,
    COMMAND_STATUS_TYPE,
    DATETIME_DEFAULT,
    DATETIME_TYPE,
    LOCATION_DEFAULT,
    LOCATION_TYPE,
    TIMESTAMP_ATTRIBUTE,
    TIMESTAMP_TYPE,
)

NgsiAttributes = Dict[str, Dict[str, Any]]
EntityKey = Tuple[str, Optional[str]]


def initial_value_for_type(attribute_type: Optional[str]) -> Any:
    if attribute_type == LOCATION_TYPE:
        return LOCATION_DEFAULT
    if attribute_type == DATETIME_TYPE:
        return DATETIME_DEFAULT
    return ATTRIBUTE_DEFAULT


def format_attributes(
    attributes: Optional[Iterable[ServiceAttribute]], is_static: bool
) -> NgsiAttributes:
    """Format attributes as ``{name: {type, value}}``.

    Static attributes carry their configured value; every other attribute
    gets the placeholder for its type. Redirected attributes are skipped.
    """
    formatted: NgsiAttributes = {}
    for attribute in attributes or []:
        if attribute.entity_name:
            continue
        value = attribute.value if is_static else initial_value_for_type(attribute.type)
        formatted[attribute.name] = {"type": attribute.type, "value": value}
    return formatted


def format_commands(commands: Optional[Iterable[ServiceAttribute]]) -> NgsiAttributes:
    """Format the status and result attributes derived from each command."""
    formatted: NgsiAttributes = {}
    for command in commands or []:
        formatted[command.name + COMMAND_STATUS_SUFFIX] = {
            "type": COMMAND_STATUS_TYPE,
            "value": COMMAND_STATUS_INITIAL,
        }
        formatted[command.name + COMMAND_RESULT_SUFFIX] = {
            "type": COMMAND_RESULT_TYPE,
            "value": COMMAND_RESULT_INITIAL,
        }
    return formatted


def is_timestamped(attributes: NgsiAttributes) -> bool:
    return TIMESTAMP_ATTRIBUTE in attributes


def format_timestamp(moment: datetime) -> str:
    """Format a datetime in ISO8601 UTC with millisecond precision and 'Z'."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def add_timestamp(
    attributes: NgsiAttributes, now: Optional[datetime] = None
) -> NgsiAttributes:
    if not is_timestamped(attributes):
        attributes[TIMESTAMP_ATTRIBUTE] = {
            "type": TIMESTAMP_TYPE,
            "value": format_timestamp(now or datetime.now(timezone.utc)),
        }
    return attributes


def build_entity_payload(
    web_service: WebService,
    *,
    timestamp: bool = False,
    now: Optional[datetime] = None,
) -> NgsiAttributes:
    """Build the attributes of the entity owned by the web service."""
    payload: NgsiAttributes = {}
    payload.update(format_attributes(web_service.active, is_static=False))
    payload.update(format_attributes(web_service.static_attributes, is_static=True))
    payload.update(format_commands(web_service.commands))

    if timestamp:
        add_timestamp(payload, now)
    return payload


def build_redirected_payloads(
    web_service: WebService,
    *,
    timestamp: bool = False,
    now: Optional[datetime] = None,
) -> Dict[EntityKey, NgsiAttributes]:
    """Group redirected attributes by target ``(entity_name, entity_type)``.

    A redirected attribute without ``entity_type`` targets an entity of the
    web service's own type.
    """
    grouped: Dict[EntityKey, NgsiAttributes] = {}
    sources: List[Tuple[List[ServiceAttribute], bool]] = [
        (web_service.active, False),
        (web_service.static_attributes, True),
    ]

    for attributes, is_static in sources:
        for attribute in attributes:
            if not attribute.entity_name:
                continue
            key = (attribute.entity_name, attribute.entity_type or web_service.type)
            value = (
                attribute.value if is_static else initial_value_for_type(attribute.type)
            )
            grouped.setdefault(key, {})[attribute.name] = {
                "type": attribute.type,
                "value": value,
            }

    if timestamp:
        for attributes in grouped.values():
            add_timestamp(attributes, now)
    return grouped
