from __future__ import annotations

from datetime import datetime, timezone

from src.application.dtos.health_dto import (
    ApplicationInfoDTO,
    DependencyStatusDTO,
    SystemHealthDTO,
)
from src.domain.entities.health import (
    Alarm,
    ApplicationInfo,
    DependencyStatus,
    ServiceStatus,
    SystemHealth,
)


def test_dependency_status_dto_from_domain() -> None:
    domain = DependencyStatus(name="orion", status=ServiceStatus.UP)
    dto = DependencyStatusDTO.from_domain(domain)
    assert dto.name == "orion"
    assert dto.status is ServiceStatus.UP


def test_system_health_dto_from_domain_lists_alarms() -> None:
    raised_at = datetime(2024, 9, 1, tzinfo=timezone.utc)
    domain = SystemHealth(
        status=ServiceStatus.DEGRADED,
        dependencies=[],
        alarms=[Alarm(name="MONGO-ALARM", message="timeout", raised_at=raised_at)],
    )

    dto = SystemHealthDTO.from_domain(domain)

    assert dto.status is ServiceStatus.DEGRADED
    assert dto.dependencies == []
    assert dto.alarms[0].name == "MONGO-ALARM"
    assert dto.alarms[0].raised_at == raised_at


def test_application_info_dto_from_domain() -> None:
    now = datetime.now(timezone.utc)
    info = ApplicationInfo(
        name="IoT Agent for Web Services",
        description="desc",
        version="1.0",
        environment="development",
        git_commit="abc",
        build_time="2024-09-01",
        started_at=now,
        uptime_seconds=42.0,
        status=ServiceStatus.UP,
        registry_type="memory",
        dependencies=[DependencyStatus(name="orion", status=ServiceStatus.UP)],
        extras={"foo": "bar"},
    )

    dto = ApplicationInfoDTO.from_domain(info)
    assert dto.name == "IoT Agent for Web Services"
    assert dto.status is ServiceStatus.UP
    assert dto.registry_type == "memory"
    assert dto.extras == {"foo": "bar"}
