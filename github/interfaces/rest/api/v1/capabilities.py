"""
Capability Endpoints.

This module lists the capabilities the server offers and invokes them.
Errors raised by the capability layer are translated to HTTP responses by the
registered exception handlers.
"""

from typing import List

from fastapi import APIRouter

from github.interfaces.rest.deps import CapabilityServiceDep
from github.interfaces.rest.schemas import (
    CapabilitySpecResponse,
    ErrorResponse,
    InvocationResponse,
    InvokeRequest,
)

router = APIRouter()


@router.get(
    "",
    response_model=List[CapabilitySpecResponse],
    summary="List Capabilities",
    description="List the capabilities allowed by the server policy.",
)
async def list_capabilities(service: CapabilityServiceDep) -> List[CapabilitySpecResponse]:
    return [CapabilitySpecResponse.model_validate(item) for item in service.describe()]


@router.get(
    "/{name}",
    response_model=CapabilitySpecResponse,
    summary="Describe Capability",
    description="Show the parameters of a single capability.",
    responses={404: {"model": ErrorResponse, "description": "Unknown capability"}},
)
async def get_capability(name: str, service: CapabilityServiceDep) -> CapabilitySpecResponse:
    spec = service.get_spec(name)
    item = spec.to_dict()
    item["enabled"] = service.policy.is_allowed(spec.name) and (spec.read_only or not service.policy.read_only)
    return CapabilitySpecResponse.model_validate(item)


@router.post(
    "/{name}/invoke",
    response_model=InvocationResponse,
    summary="Invoke Capability",
    description="Run a capability with the given arguments.",
    responses={
        403: {"model": ErrorResponse, "description": "Rejected by the server policy"},
        404: {"model": ErrorResponse, "description": "Unknown capability or GitHub resource"},
        422: {"model": ErrorResponse, "description": "Invalid arguments"},
        429: {"model": ErrorResponse, "description": "GitHub rate limit exhausted"},
        502: {"model": ErrorResponse, "description": "GitHub request failed"},
    },
)
async def invoke_capability(name: str, body: InvokeRequest, service: CapabilityServiceDep) -> InvocationResponse:
    """
    Invoke a capability.

    Read-only capabilities may be answered from a short-lived cache; the
    ``cached`` flag says so. Mutating capabilities always reach GitHub.
    """
    result = await service.invoke(name, body.args)
    return InvocationResponse(
        capability=result.capability,
        ok=result.ok,
        output=result.output,
        cached=result.cached,
        duration_ms=result.duration_ms,
    )
