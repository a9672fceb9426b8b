"""Health check endpoints."""

from collections.abc import Callable
from enum import Enum
from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, Field

from src.api.dependencies import FactoryDep, SettingsDep
from src.infrastructure.factory import InfrastructureFactory

router = APIRouter()


class HealthStatus(str, Enum):
    """Health check status."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class ComponentHealth(BaseModel):
    """Health status of a single component."""

    name: str = Field(description="Component name")
    status: HealthStatus = Field(description="Component health status")
    message: str | None = Field(default=None, description="Additional details")
    latency_ms: float | None = Field(default=None, description="Check latency")


class HealthResponse(BaseModel):
    """Health check response."""

    status: HealthStatus = Field(description="Overall health status")
    version: str = Field(description="Application version")
    environment: str = Field(description="Deployment environment")
    components: list[ComponentHealth] = Field(
        default_factory=list,
        description="Individual component health",
    )


class LivenessResponse(BaseModel):
    """Simple liveness response."""

    status: str = Field(default="ok")


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    ready: bool = Field(description="Whether the service is ready to accept requests")
    checks: dict[str, bool] = Field(
        default_factory=dict,
        description="Individual readiness checks",
    )


async def _check_components(
    factory: InfrastructureFactory,
) -> list[ComponentHealth]:
    """Run each provider's health check."""
    settings = factory.settings
    providers: list[tuple[str, str, Callable[[], Any]]] = [
        ("document_db", settings.document_db.provider, factory.get_document_db),
        ("cache", settings.cache.provider, factory.get_cache),
        ("realtime", settings.realtime.provider, factory.get_realtime_channel),
        ("blob_storage", settings.blob_storage.provider, factory.get_blob_storage),
    ]

    components: list[ComponentHealth] = []
    for name, provider, build in providers:
        try:
            result = await build().health_check()
            components.append(
                ComponentHealth(
                    name=name,
                    status=(
                        HealthStatus.HEALTHY
                        if result.healthy
                        else HealthStatus.UNHEALTHY
                    ),
                    message=result.message or f"Provider: {provider}",
                    latency_ms=round(result.latency_ms, 2),
                )
            )
        except Exception as e:
            components.append(
                ComponentHealth(
                    name=name,
                    status=HealthStatus.UNHEALTHY,
                    message=str(e),
                )
            )
    return components


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Get overall health status of the service and its components.",
)
async def health_check(
    settings: SettingsDep,
    factory: FactoryDep,
) -> HealthResponse:
    """Check health of all service components."""
    components = await _check_components(factory)

    # The record store is required; the others degrade the service
    unhealthy = {c.name for c in components if c.status == HealthStatus.UNHEALTHY}
    if "document_db" in unhealthy:
        overall_status = HealthStatus.UNHEALTHY
    elif unhealthy:
        overall_status = HealthStatus.DEGRADED
    else:
        overall_status = HealthStatus.HEALTHY

    return HealthResponse(
        status=overall_status,
        version=settings.app.version,
        environment=settings.app.environment,
        components=components,
    )


@router.get(
    "/health/live",
    response_model=LivenessResponse,
    summary="Liveness probe",
    description="Simple liveness check for Kubernetes probes.",
)
async def liveness() -> LivenessResponse:
    """Simple liveness check - just verifies the app is running."""
    return LivenessResponse(status="ok")


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
    description="Readiness check for Kubernetes probes.",
)
async def readiness(
    factory: FactoryDep,
) -> ReadinessResponse:
    """Ready when the record store and the real-time channel answer."""
    components = await _check_components(factory)
    checks = {c.name: c.status == HealthStatus.HEALTHY for c in components}
    ready = checks.get("document_db", False) and checks.get("realtime", False)
    return ReadinessResponse(ready=ready, checks=checks)
