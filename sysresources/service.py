"""Service resources: the status and activation of a service on a system."""

from __future__ import annotations

import abc
import enum
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from .state import ResourceData, ResourceError

NAME_KEY = "name"
STATUS_KEY = "status"
ENABLED_KEY = "enabled"
RUNLEVEL_KEY = "runlevel"
RESTART_ON_KEY = "restart_on"
RELOAD_ON_KEY = "reload_on"
PRE_STATUS_KEY = "pre_status"
PRE_ENABLED_KEY = "pre_enabled"

STATUS_STARTED = "started"
STATUS_STOPPED = "stopped"
STATUS_VALUES = (STATUS_STARTED, STATUS_STOPPED)

DEFAULT_RUNLEVEL = "default"
DEFAULT_INTERVAL = 5.0


class ServiceStatus(enum.Enum):
    UNDEFINED = "undefined"
    STARTED = "started"
    STOPPED = "stopped"
    STARTING = "starting"
    STOPPING = "stopping"

    @property
    def is_pending(self) -> bool:
        """True while the service is changing between started and stopped."""
        return self in (ServiceStatus.STARTING, ServiceStatus.STOPPING)

    def __str__(self) -> str:
        return self.value


@dataclass
class Service:
    name: str
    status: ServiceStatus | None = None
    enabled: bool | None = None
    runlevel: str = ""


class ServiceNotFoundError(ResourceError):
    """Raised by a service client when the service does not exist."""


class ApplyOption(enum.Enum):
    RELOAD = "reload"
    RESTART = "restart"


class ServiceClient(abc.ABC):
    """Reads and changes services of one service manager."""

    @abc.abstractmethod
    def get(self, name: str, runlevel: str = "") -> Service:
        """Return the current state of a service."""

    @abc.abstractmethod
    def apply(self, service: Service, options: Iterable[ApplyOption] = ()) -> None:
        """Bring the service into the given state, honouring the options."""


def get_service(
    client: ServiceClient,
    name: str,
    runlevel: str = "",
    interval: float = DEFAULT_INTERVAL,
    sleep: Callable[[float], Any] = time.sleep,
) -> Service:
    """Get a service, waiting at a constant interval while its status is pending."""
    while True:
        service = client.get(name, runlevel)
        if service.status is None or not service.status.is_pending:
            return service
        sleep(interval)


def status_to_client(value: str) -> ServiceStatus:
    if value == STATUS_STARTED:
        return ServiceStatus.STARTED
    if value == STATUS_STOPPED:
        return ServiceStatus.STOPPED
    return ServiceStatus.UNDEFINED


def status_from_client(status: ServiceStatus) -> str:
    if status == ServiceStatus.STARTED:
        return STATUS_STARTED
    if status == ServiceStatus.STOPPED:
        return STATUS_STOPPED
    return ""


class ServiceResource:
    """A single service whose status and activation are managed."""

    def __init__(
        self,
        client: ServiceClient,
        interval: float = DEFAULT_INTERVAL,
        sleep: Callable[[float], Any] = time.sleep,
    ) -> None:
        self.client = client
        self.interval = interval
        self.sleep = sleep

    def service_from_data(self, data: ResourceData) -> Service:
        """Build the desired service from the resource attributes."""
        service = Service(name=data.get(NAME_KEY) or "")
        status, ok = data.get_ok(STATUS_KEY)
        if ok:
            if status not in STATUS_VALUES:
                raise ValueError(
                    f"expected {STATUS_KEY} to be one of {list(STATUS_VALUES)}, got {status}"
                )
            service.status = status_to_client(status)
        enabled = data.get(ENABLED_KEY)
        if enabled is not None:
            service.enabled = bool(enabled)
        return service

    def store(self, service: Service, data: ResourceData) -> None:
        """Write the observed service into the resource attributes."""
        data.set(NAME_KEY, service.name)
        if service.status is not None:
            data.set(STATUS_KEY, status_from_client(service.status))
        if service.enabled is not None:
            data.set(ENABLED_KEY, service.enabled)

    def _get(self, service: Service) -> Service:
        return get_service(
            self.client, service.name, service.runlevel, self.interval, self.sleep
        )

    @staticmethod
    def _apply_options(data: ResourceData) -> list[ApplyOption]:
        options = []
        if data.has_change(RELOAD_ON_KEY):
            options.append(ApplyOption.RELOAD)
        if data.has_change(RESTART_ON_KEY):
            options.append(ApplyOption.RESTART)
        return options

    def create(self, data: ResourceData) -> None:
        """Apply the service and remember its status and activation beforehand."""
        service = self.service_from_data(data)
        before = self._get(service)
        if before.enabled is None:
            raise ResourceError(
                "unexpected enabled property: "
                "enabled property could not be determined during create"
            )
        if before.status is None:
            raise ResourceError(
                "unexpected status property: "
                "status property could not be determined during create"
            )

        self.client.apply(service, self._apply_options(data))
        data.resource_id = service.name
        data.set_internal_data(
            {
                PRE_STATUS_KEY: status_from_client(before.status),
                PRE_ENABLED_KEY: before.enabled,
            }
        )
        self.read(data)

    def read(self, data: ResourceData) -> None:
        """Refresh the attributes; a missing service leaves them unchanged."""
        service = self.service_from_data(data)
        try:
            current = self._get(service)
        except ServiceNotFoundError:
            return
        self.store(current, data)

    def update(self, data: ResourceData) -> None:
        service = self.service_from_data(data)
        self.client.apply(service, self._apply_options(data))
        self.read(data)

    def delete(self, data: ResourceData) -> None:
        """Restore the status and activation the service had before creation."""
        service = self.service_from_data(data)
        restored = Service(name=service.name, runlevel=service.runlevel)
        internal = data.internal_data()
        pre_status = internal.get(PRE_STATUS_KEY)
        if pre_status:
            restored.status = status_to_client(pre_status)
        pre_enabled = internal.get(PRE_ENABLED_KEY)
        if pre_enabled is not None:
            restored.enabled = bool(pre_enabled)
        self.client.apply(restored, [])


class OpenrcServiceResource(ServiceResource):
    """An OpenRC service, enabled or disabled within a runlevel."""

    def service_from_data(self, data: ResourceData) -> Service:
        service = super().service_from_data(data)
        service.runlevel = data.get(RUNLEVEL_KEY) or DEFAULT_RUNLEVEL
        return service

    def store(self, service: Service, data: ResourceData) -> None:
        super().store(service, data)
        data.set(RUNLEVEL_KEY, service.runlevel)