"""
API Schemas.

This module contains Pydantic models used for API request bodies and response validation.
These schemas define the interface contract between the client and the server.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CapabilityParamResponse(BaseModel):
    """Description of one capability argument."""

    name: str
    type: str = Field(..., description="One of str, int, bool, list.")
    required: bool
    description: str = ""
    default: Any = None
    choices: Optional[List[str]] = None
    minimum: Optional[int] = None
    maximum: Optional[int] = None


class CapabilitySpecResponse(BaseModel):
    """
    Public description of a capability.

    ``enabled`` is False when the server policy would reject the capability,
    for example a mutating capability on a read-only server.
    """

    name: str = Field(..., examples=["repo.get"])
    description: str
    read_only: bool = Field(..., description="False when the capability changes state on GitHub.")
    enabled: bool = True
    params: List[CapabilityParamResponse] = Field(default_factory=list)


class InvokeRequest(BaseModel):
    """
    Schema for invoking a capability.

    Argument values may be given as strings; they are coerced to the type the
    capability declares.
    """

    args: Dict[str, Any] = Field(
        default_factory=dict,
        description="Capability arguments by name.",
        examples=[{"owner": "octocat", "repo": "hello-world"}],
    )

    model_config = ConfigDict(
        json_schema_extra={"example": {"args": {"repo": "octocat/hello-world", "state": "open", "limit": 10}}}
    )


class InvocationResponse(BaseModel):
    """Result of a capability invocation."""

    capability: str
    ok: bool
    output: Dict[str, Any]
    cached: bool = Field(default=False, description="True when served from the read-only result cache.")
    duration_ms: float = 0.0


class HealthResponse(BaseModel):
    status: str = "ok"


class VersionResponse(BaseModel):
    version: str
    api_version: str
    environment: str


class RateLimitResponse(BaseModel):
    limit: int
    remaining: int
    used: int
    reset: datetime


class ErrorResponse(BaseModel):
    """Error body returned for capability and GitHub failures."""

    detail: str
    error_type: str
    upstream_status: Optional[int] = None
