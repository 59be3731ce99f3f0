"""
Web Service DTOs - Application Layer

Provisioning API representation of web services. Field names follow the
northbound provisioning format (``web_service_id``, ``entity_type``,
``attributes``...) and are translated to and from the domain records here.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from src.domain.entities.web_service import (
    ServiceAttribute,
    WebService,
    WebServiceList,
    WebServiceUpdate,
)


class ServiceAttributeDTO(BaseModel):
    """Attribute in provisioning API format."""

    name: str = Field(..., min_length=1, description="Attribute name in the entity")
    type: str = Field("", description="NGSI attribute type")
    value: Any = Field(None, description="Literal value, static attributes only")
    object_id: Optional[str] = Field(None, description="Attribute id in the source")
    expression: Optional[str] = Field(None, description="Transformation expression")
    entity_name: Optional[str] = Field(
        None, description="Redirect the attribute to this entity"
    )
    entity_type: Optional[str] = Field(
        None, description="Type of the redirected entity"
    )
    reverse: Optional[List[Dict[str, Any]]] = None

    def to_domain(self) -> ServiceAttribute:
        return ServiceAttribute(
            name=self.name,
            type=self.type,
            value=self.value,
            object_id=self.object_id,
            expression=self.expression,
            entity_name=self.entity_name,
            entity_type=self.entity_type,
            reverse=self.reverse,
        )

    @classmethod
    def from_domain(cls, attribute: ServiceAttribute) -> "ServiceAttributeDTO":
        return cls(
            name=attribute.name,
            type=attribute.type,
            value=attribute.value,
            object_id=attribute.object_id,
            expression=attribute.expression,
            entity_name=attribute.entity_name,
            entity_type=attribute.entity_type,
            reverse=attribute.reverse,
        )


def _to_domain_list(
    attributes: Optional[List[ServiceAttributeDTO]],
) -> Optional[List[ServiceAttribute]]:
    if attributes is None:
        return None
    return [attribute.to_domain() for attribute in attributes]


class WebServiceCreateDTO(BaseModel):
    """One web service of a provisioning request."""

    web_service_id: str = Field(..., min_length=1, description="Web service id")
    entity_type: Optional[str] = Field(None, description="Entity type")
    entity_name: Optional[str] = Field(
        None, description="Entity name; defaults to '<type>:<id>'"
    )
    entity_id_prefix: Optional[str] = None
    entity_id_expression: Optional[str] = None
    timezone: Optional[str] = None
    endpoint: Optional[str] = Field(None, description="Remote endpoint to poll")
    attributes: List[ServiceAttributeDTO] = Field(default_factory=list)
    lazy: List[ServiceAttributeDTO] = Field(default_factory=list)
    commands: List[ServiceAttributeDTO] = Field(default_factory=list)
    static_attributes: List[ServiceAttributeDTO] = Field(default_factory=list)

    def to_domain(self, service: str, subservice: str) -> WebService:
        return WebService(
            id=self.web_service_id,
            service=service,
            subservice=subservice,
            type=self.entity_type,
            name=self.entity_name,
            prefix=self.entity_id_prefix or "",
            expression=self.entity_id_expression,
            endpoint=self.endpoint,
            timezone=self.timezone,
            active=_to_domain_list(self.attributes),
            lazy=_to_domain_list(self.lazy),
            commands=_to_domain_list(self.commands),
            static_attributes=_to_domain_list(self.static_attributes),
        )

    model_config = {
        "json_schema_extra": {
            "example": {
                "web_service_id": "weather-madrid",
                "entity_type": "WeatherObserved",
                "endpoint": "https://api.example.org/weather/madrid",
                "attributes": [
                    {"object_id": "t", "name": "temperature", "type": "Number"}
                ],
                "static_attributes": [
                    {"name": "city", "type": "Text", "value": "Madrid"}
                ],
            }
        }
    }


class WebServiceProvisionRequestDTO(BaseModel):
    """Body of ``POST /iot/web/services``."""

    services: List[WebServiceCreateDTO] = Field(..., min_length=1)


class WebServiceUpdateDTO(BaseModel):
    """Body of ``PUT /iot/web/services/{id}``; absent fields are kept."""

    web_service_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("web_service_id", "webServiceId"),
        description="Not accepted: web service ids are immutable",
    )
    entity_type: Optional[str] = None
    entity_name: Optional[str] = None
    entity_id_prefix: Optional[str] = None
    entity_id_expression: Optional[str] = None
    timezone: Optional[str] = None
    endpoint: Optional[str] = None
    attributes: Optional[List[ServiceAttributeDTO]] = None
    lazy: Optional[List[ServiceAttributeDTO]] = None
    commands: Optional[List[ServiceAttributeDTO]] = None
    static_attributes: Optional[List[ServiceAttributeDTO]] = None

    def to_domain(
        self,
        web_service_id: str,
        service: str,
        subservice: str,
        *,
        default_type: Optional[str] = None,
    ) -> WebServiceUpdate:
        return WebServiceUpdate(
            id=web_service_id,
            service=service,
            subservice=subservice,
            type=self.entity_type or default_type,
            name=self.entity_name,
            prefix=self.entity_id_prefix,
            expression=self.entity_id_expression,
            endpoint=self.endpoint,
            timezone=self.timezone,
            active=_to_domain_list(self.attributes),
            lazy=_to_domain_list(self.lazy),
            commands=_to_domain_list(self.commands),
            static_attributes=_to_domain_list(self.static_attributes),
        )


class WebServiceResponseDTO(BaseModel):
    """Web service in provisioning API format."""

    web_service_id: str
    service: str
    service_path: str
    entity_name: Optional[str] = None
    entity_type: Optional[str] = None
    entity_id_prefix: Optional[str] = None
    entity_id_expression: Optional[str] = None
    timezone: Optional[str] = None
    endpoint: Optional[str] = None
    attributes: List[ServiceAttributeDTO] = Field(default_factory=list)
    lazy: List[ServiceAttributeDTO] = Field(default_factory=list)
    commands: List[ServiceAttributeDTO] = Field(default_factory=list)
    static_attributes: List[ServiceAttributeDTO] = Field(default_factory=list)
    registration_id: Optional[str] = None
    creation_date: Optional[datetime] = None

    @field_validator("attributes", "lazy", "commands", "static_attributes", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @classmethod
    def from_domain(cls, web_service: WebService) -> "WebServiceResponseDTO":
        return cls(
            web_service_id=web_service.id,
            service=web_service.service,
            service_path=web_service.subservice,
            entity_name=web_service.name,
            entity_type=web_service.type,
            entity_id_prefix=web_service.prefix,
            entity_id_expression=web_service.expression,
            timezone=web_service.timezone,
            endpoint=web_service.endpoint,
            attributes=[ServiceAttributeDTO.from_domain(a) for a in web_service.active],
            lazy=[ServiceAttributeDTO.from_domain(a) for a in web_service.lazy],
            commands=[ServiceAttributeDTO.from_domain(a) for a in web_service.commands],
            static_attributes=[
                ServiceAttributeDTO.from_domain(a) for a in web_service.static_attributes
            ],
            registration_id=web_service.registration_id,
            creation_date=web_service.creation_date,
        )


class WebServiceListResponseDTO(BaseModel):
    """Page of web services returned by ``GET /iot/web/services``."""

    model_config = ConfigDict(populate_by_name=True)

    count: int = Field(..., ge=0, description="Total matches before pagination")
    web_services: List[WebServiceResponseDTO] = Field(
        default_factory=list, alias="webServices"
    )

    @classmethod
    def from_domain(cls, page: WebServiceList) -> "WebServiceListResponseDTO":
        return cls(
            count=page.count,
            web_services=[
                WebServiceResponseDTO.from_domain(ws) for ws in page.web_services
            ],
        )
