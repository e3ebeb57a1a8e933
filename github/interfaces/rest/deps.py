"""
Request Dependencies.

Endpoints reach the capability service and the settings the application was
built with through ``app.state``; ``create_app`` stores both.
"""

from typing import Annotated

from fastapi import Depends, Request

from github.core.config import Settings
from github.service import CapabilityService


def get_capability_service(request: Request) -> CapabilityService:
    return request.app.state.capability_service


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


CapabilityServiceDep = Annotated[CapabilityService, Depends(get_capability_service)]
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
