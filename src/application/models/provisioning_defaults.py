"""Read-only provisioning configuration consulted when resolving defaults."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from src.domain.entities.web_service import ServiceAttribute, TypeTemplate


def _attributes(items: Optional[Iterable[Mapping[str, Any]]]) -> List[ServiceAttribute]:
    return [
        ServiceAttribute(
            name=item["name"],
            type=item.get("type", ""),
            value=item.get("value"),
            object_id=item.get("object_id"),
            expression=item.get("expression"),
            entity_name=item.get("entity_name"),
            entity_type=item.get("entity_type"),
            reverse=item.get("reverse"),
        )
        for item in items or []
    ]


@dataclass(frozen=True)
class ProvisioningDefaults:
    """Global default entity type and per-type attribute templates."""

    default_type: str
    types: Dict[str, TypeTemplate] = field(default_factory=dict)

    def template_for(self, entity_type: Optional[str]) -> Optional[TypeTemplate]:
        if entity_type is None:
            return None
        return self.types.get(entity_type)

    @classmethod
    def from_config(
        cls,
        default_type: str,
        types: Optional[Mapping[str, Mapping[str, Any]]] = None,
    ) -> "ProvisioningDefaults":
        """
        Build defaults from the raw ``AGENT_TYPES`` mapping.

        Each entry may carry ``attributes``, ``lazy``, ``commands`` and
        ``static_attributes`` lists using the provisioning API attribute
        format.
        """
        templates = {
            name: TypeTemplate(
                active=_attributes(raw.get("attributes")),
                lazy=_attributes(raw.get("lazy")),
                commands=_attributes(raw.get("commands")),
                static_attributes=_attributes(raw.get("static_attributes")),
            )
            for name, raw in (types or {}).items()
        }
        return cls(default_type=default_type, types=templates)
