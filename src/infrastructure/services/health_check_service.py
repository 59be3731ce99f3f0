"""Infrastructure implementation for system health checks."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from time import perf_counter
from typing import Iterable, List, Optional
from urllib.parse import urljoin

import httpx

from src.domain.entities.health import DependencyStatus, ServiceStatus, SystemHealth
from src.domain.ports.health_check import IAlarmState, IHealthCheckService
from src.infrastructure.database.mongo_database import MongoDatabase


class HealthCheckService(IHealthCheckService):
    """Collect health information for external dependencies and alarms."""

    def __init__(
        self,
        alarms: IAlarmState,
        orion_url: str,
        mongo_database: Optional[MongoDatabase] = None,
        *,
        http_timeout: float = 5.0,
    ) -> None:
        self._alarms = alarms
        self._orion_url = orion_url
        self._mongo_database = mongo_database
        self._http_timeout = http_timeout

    async def evaluate(self) -> SystemHealth:
        """Run checks concurrently and aggregate system health."""

        checks = {
            "orion": asyncio.create_task(
                self._check_http_service(
                    name="orion",
                    base_url=self._orion_url,
                    paths=("/version", "/"),
                )
            ),
        }
        if self._mongo_database is not None:
            checks["mongo"] = asyncio.create_task(self._check_mongo())

        dependency_statuses: List[DependencyStatus] = []

        for name, task in checks.items():
            try:
                dependency_statuses.append(await task)
            except Exception as exc:  # pragma: no cover
                dependency_statuses.append(
                    DependencyStatus(
                        name=name,
                        status=ServiceStatus.DOWN,
                        message=str(exc),
                    )
                )

        alarms = self._alarms.list_alarms()
        for alarm in alarms:
            dependency_statuses.append(
                DependencyStatus(
                    name=alarm.name,
                    status=ServiceStatus.DEGRADED,
                    message=alarm.message,
                    checked_at=alarm.raised_at,
                    details={"alarm": True},
                )
            )

        overall_status = self._aggregate_status(dependency_statuses)
        return SystemHealth(
            status=overall_status,
            dependencies=dependency_statuses,
            alarms=alarms,
        )

    def _aggregate_status(self, statuses: Iterable[DependencyStatus]) -> ServiceStatus:
        has_unknown = False
        has_degraded = False

        for status in statuses:
            if status.status == ServiceStatus.DOWN:
                return ServiceStatus.DOWN
            if status.status == ServiceStatus.DEGRADED:
                has_degraded = True
            if status.status == ServiceStatus.UNKNOWN:
                has_unknown = True

        if has_degraded:
            return ServiceStatus.DEGRADED
        if has_unknown:
            return ServiceStatus.UNKNOWN
        return ServiceStatus.UP

    async def _check_mongo(self) -> DependencyStatus:
        start = perf_counter()
        try:
            await asyncio.to_thread(self._mongo_database.ping)
            latency_ms = (perf_counter() - start) * 1000
            return DependencyStatus(
                name="mongo",
                status=ServiceStatus.UP,
                message="MongoDB ping successful",
                latency_ms=latency_ms,
                details={"database": self._mongo_database.db.name},
            )
        except Exception as exc:
            latency_ms = (perf_counter() - start) * 1000
            return DependencyStatus(
                name="mongo",
                status=ServiceStatus.DOWN,
                message=f"MongoDB ping failed: {exc}",
                latency_ms=latency_ms,
            )

    async def _check_http_service(
        self,
        *,
        name: str,
        base_url: str,
        paths: Iterable[str],
    ) -> DependencyStatus:
        if not base_url:
            return DependencyStatus(
                name=name,
                status=ServiceStatus.UNKNOWN,
                message="Service URL not configured.",
            )

        attempts_log: List[dict] = []
        last_result: DependencyStatus | None = None

        for path in paths:
            result = await self._hit_http_endpoint(
                name=name, base_url=base_url, path=path
            )
            attempts_log.append(
                {
                    "path": path,
                    "status": result.status.value,
                    "message": result.message,
                    "checked_at": datetime.now(timezone.utc).isoformat(),
                }
            )

            if result.status != ServiceStatus.DOWN:
                result.details.setdefault("attempts", attempts_log)
                return result

            last_result = result

        if last_result is None:
            return DependencyStatus(
                name=name,
                status=ServiceStatus.UNKNOWN,
                message="Unable to evaluate service health",
            )

        last_result.details.setdefault("attempts", attempts_log)
        return last_result

    async def _hit_http_endpoint(
        self,
        *,
        name: str,
        base_url: str,
        path: str,
    ) -> DependencyStatus:
        url = self._normalize_url(base_url, path)
        start = perf_counter()

        try:
            async with httpx.AsyncClient(timeout=self._http_timeout) as client:
                response = await client.get(url)

            latency_ms = (perf_counter() - start) * 1000
            status_code = response.status_code

            if status_code >= 500:
                status = ServiceStatus.DOWN
            elif status_code >= 400:
                status = ServiceStatus.DEGRADED
            else:
                status = ServiceStatus.UP

            return DependencyStatus(
                name=name,
                status=status,
                message=f"HTTP {status_code}",
                latency_ms=latency_ms,
                details={"url": url, "status_code": status_code},
            )

        except httpx.RequestError as exc:
            latency_ms = (perf_counter() - start) * 1000
            return DependencyStatus(
                name=name,
                status=ServiceStatus.DOWN,
                message=f"HTTP request failed: {exc}",
                latency_ms=latency_ms,
                details={"url": url},
            )

    def _normalize_url(self, base_url: str, path: str) -> str:
        if not path:
            return base_url
        base = base_url if base_url.endswith("/") else f"{base_url}/"
        relative = path.lstrip("/")
        return urljoin(base, relative)
