"""
Liveness and version endpoints.

The container health probe calls ``/health`` every 30 seconds with a
3 second timeout, so neither endpoint touches GitHub. Use
``/api/v1/github/rate-limit`` to check the upstream connection.
"""

from fastapi import APIRouter

from github import __version__
from github.interfaces.rest.deps import SettingsDep
from github.interfaces.rest.schemas import HealthResponse, VersionResponse

router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness Probe",
    description="Report that the process is up and serving requests.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok")


@router.get(
    "/version",
    response_model=VersionResponse,
    summary="Server Version",
    description="Package version, API version and deployment environment.",
)
async def version(settings: SettingsDep) -> VersionResponse:
    return VersionResponse(version=__version__, api_version="v1", environment=settings.env.value)
