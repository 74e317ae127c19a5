"""systemd services managed as a resource."""

from __future__ import annotations

from .service import Service, ServiceResource
from .state import ResourceData

SCOPE_KEY = "scope"

SCOPE_SYSTEM = "system"
SCOPE_USER = "user"
SCOPE_GLOBAL = "global"

# Only the system scope is supported for now.
SUPPORTED_SCOPES = (SCOPE_SYSTEM,)
DEFAULT_SCOPE = SCOPE_SYSTEM

UNIT_SUFFIX = ".service"


def validate_service_name(name: str) -> str:
    """Check that a service name is given without the unit suffix."""
    if not isinstance(name, str):
        raise ValueError(f"name of the service must be a string, got {type(name).__name__}")
    if name.endswith(UNIT_SUFFIX):
        raise ValueError("name of the service must not have the suffix `.service`")
    return name


def validate_scope(scope: str) -> str:
    """Check that the scope is one in which services can be managed."""
    if scope not in SUPPORTED_SCOPES:
        raise ValueError(
            f"expected {SCOPE_KEY} to be one of {list(SUPPORTED_SCOPES)}, got {scope}"
        )
    return scope


class SystemdServiceResource(ServiceResource):
    """A systemd service unit, started or stopped and enabled or disabled."""

    def service_from_data(self, data: ResourceData) -> Service:
        validate_service_name(data.get("name") or "")
        validate_scope(data.get(SCOPE_KEY) or DEFAULT_SCOPE)
        service = super().service_from_data(data)
        service.runlevel = ""
        return service

    def store(self, service: Service, data: ResourceData) -> None:
        super().store(service, data)