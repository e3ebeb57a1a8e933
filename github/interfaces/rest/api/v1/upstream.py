"""
GitHub Upstream Endpoints.

Direct views on the upstream GitHub API that are not capabilities, used for
readiness checks and operations dashboards.
"""

from fastapi import APIRouter

from github.interfaces.rest.deps import CapabilityServiceDep
from github.interfaces.rest.schemas import ErrorResponse, RateLimitResponse

router = APIRouter()


@router.get(
    "/rate-limit",
    response_model=RateLimitResponse,
    summary="GitHub Rate Limit",
    description="Report the core REST API rate limit of the configured credentials.",
    responses={502: {"model": ErrorResponse, "description": "GitHub unreachable or rejected the token"}},
)
async def rate_limit(service: CapabilityServiceDep) -> RateLimitResponse:
    rate = await service.client.get_rate_limit()
    return RateLimitResponse(limit=rate.limit, remaining=rate.remaining, used=rate.used, reset=rate.reset)
