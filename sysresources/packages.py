"""Package resources: desired package sets applied through a package client."""

from __future__ import annotations

import abc
import dataclasses
import enum
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from .state import ResourceData, ResourceError

PACKAGE_KEY = "package"
NAME_KEY = "name"
VERSION_KEY = "version"
VERSIONS_KEY = "versions"
INSTALLED_KEY = "installed"
AVAILABLE_KEY = "available"
PRE_INSTALLED_KEY = "pre_installed"

ID_SEPARATOR = "|"

_APK_VERSION_PATTERN = re.compile(r"^(<|<=|=|~|>=|>)")


class PackageState(enum.Enum):
    UNDEFINED = "undefined"
    INSTALLED = "installed"
    NOT_INSTALLED = "not_installed"


@dataclass
class PackageVersion:
    required: str = ""
    installed: str = ""
    available: str = ""


@dataclass
class Package:
    name: str
    manager: str = ""
    state: PackageState = PackageState.UNDEFINED
    version: PackageVersion = field(default_factory=PackageVersion)


class PackageClient(abc.ABC):
    """Reads and changes the packages of one package manager."""

    @abc.abstractmethod
    def get(self) -> list[Package]:
        """Return the packages known to the package manager."""

    @abc.abstractmethod
    def apply(self, packages: list[Package]) -> None:
        """Bring each package into its requested state."""


def package_id(packages: Iterable[Package]) -> str:
    return ID_SEPARATOR.join(pkg.name for pkg in packages)


def package_names_from_id(resource_id: str) -> list[str]:
    return resource_id.split(ID_SEPARATOR)


def filter_by_names(packages: Iterable[Package], names: Iterable[str]) -> list[Package]:
    wanted = set(names)
    return [pkg for pkg in packages if pkg.name in wanted]


def filter_by_state(packages: Iterable[Package], state: PackageState) -> list[Package]:
    return [pkg for pkg in packages if pkg.state == state]


def validate_apk_version(value: str) -> str:
    """Check that an apk version starts with a constraint operator."""
    if not isinstance(value, str) or not _APK_VERSION_PATTERN.match(value):
        raise ValueError("version must begin with a constraint operator")
    return value


def _versions_entry(pkg: Package) -> dict[str, str]:
    versions: dict[str, str] = {}
    if pkg.version.installed:
        versions[INSTALLED_KEY] = pkg.version.installed
    if pkg.version.available:
        versions[AVAILABLE_KEY] = pkg.version.available
    return versions


class PackagesResource:
    """A set of packages managed through one package client."""

    manager = ""

    def __init__(self, client: PackageClient) -> None:
        self.client = client

    def _elements(self, value: Any) -> dict[str, Mapping[str, Any]]:
        if value is None:
            return {}
        if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, Iterable):
            raise ResourceError(
                f"expected a set of packages, got unexpected type {type(value).__name__}"
            )
        elements: dict[str, Mapping[str, Any]] = {}
        for element in value:
            if not isinstance(element, Mapping):
                raise ResourceError(
                    f"expected a mapping, got unexpected type {type(element).__name__}"
                )
            name = element.get(NAME_KEY) or ""
            if not isinstance(name, str):
                raise ResourceError(f"package name must be a string, got {type(name).__name__}")
            if not name:
                raise ResourceError("empty package name not allowed")
            if name in elements:
                raise ResourceError(f"duplicate package name {name}")
            elements[name] = element
        return elements

    def expand(self, value: Any) -> dict[str, Package]:
        """Turn the package set attribute into packages keyed by name."""
        return {
            name: Package(name=name, manager=self.manager)
            for name in self._elements(value)
        }

    def flatten(self, packages: Iterable[Package] | None) -> list[dict[str, Any]] | None:
        """Turn packages into the package set attribute, ordered by name."""
        if packages is None:
            return None
        return [
            {NAME_KEY: pkg.name, VERSIONS_KEY: [_versions_entry(pkg)]}
            for pkg in sorted(packages, key=lambda p: p.name)
        ]

    def desired_packages(self, data: ResourceData) -> list[Package]:
        """Packages to install, and previously managed packages to remove."""
        previous_value, current_value = data.get_change(PACKAGE_KEY)
        current = self.expand(current_value)
        previous = self.expand(previous_value)

        packages = [
            dataclasses.replace(pkg, state=PackageState.INSTALLED)
            for pkg in current.values()
        ]
        packages.extend(
            dataclasses.replace(pkg, state=PackageState.NOT_INSTALLED)
            for name, pkg in previous.items()
            if name not in current
        )
        packages.sort(key=lambda p: p.name)
        return packages

    def apply(self, data: ResourceData) -> list[Package]:
        """Apply the desired packages and remember which were installed before."""
        pre_apply = {pkg.name: pkg for pkg in self.client.get()}
        packages = self.desired_packages(data)
        self.client.apply(packages)

        internal = data.internal_data()
        pre_installed: dict[str, bool] = dict(internal.get(PRE_INSTALLED_KEY) or {})
        for pkg in packages:
            if pkg.state == PackageState.INSTALLED:
                if pkg.name not in pre_installed:
                    before = pre_apply.get(pkg.name)
                    pre_installed[pkg.name] = (
                        before is not None and before.state == PackageState.INSTALLED
                    )
            elif pkg.state == PackageState.NOT_INSTALLED:
                pre_installed.pop(pkg.name, None)

        internal[PRE_INSTALLED_KEY] = dict(sorted(pre_installed.items()))
        data.set_internal_data(internal)
        return packages

    def read(self, data: ResourceData) -> None:
        names = package_names_from_id(data.resource_id)
        packages = filter_by_names(self.client.get(), names)
        packages = filter_by_state(packages, PackageState.INSTALLED)
        data.set(PACKAGE_KEY, self.flatten(packages))

    def create(self, data: ResourceData) -> None:
        packages = self.apply(data)
        data.resource_id = package_id(packages)
        self.read(data)

    def update(self, data: ResourceData) -> None:
        packages = self.apply(data)
        data.resource_id = package_id(packages)
        self.read(data)

    def delete(self, data: ResourceData) -> None:
        """Restore each package to its state before the resource managed it."""
        packages = self.desired_packages(data)
        pre_installed = data.internal_data().get(PRE_INSTALLED_KEY) or {}
        for pkg in packages:
            if pre_installed.get(pkg.name) is True:
                pkg.state = PackageState.INSTALLED
            else:
                pkg.state = PackageState.NOT_INSTALLED
        self.client.apply(packages)


class ApkPackagesResource(PackagesResource):
    """apk packages, with optional version constraints."""

    manager = "apk"

    def expand(self, value: Any) -> dict[str, Package]:
        packages: dict[str, Package] = {}
        for name, element in self._elements(value).items():
            version = element.get(VERSION_KEY) or ""
            if not isinstance(version, str):
                version = ""
            if version:
                validate_apk_version(version)
            packages[name] = Package(
                name=name, manager=self.manager, version=PackageVersion(required=version)
            )
        return packages

    def flatten(self, packages: Iterable[Package] | None) -> list[dict[str, Any]] | None:
        if packages is None:
            return None
        entries = []
        for pkg in sorted(packages, key=lambda p: p.name):
            entry: dict[str, Any] = {NAME_KEY: pkg.name}
            if pkg.version.required:
                entry[VERSION_KEY] = pkg.version.required
            entry[VERSIONS_KEY] = [_versions_entry(pkg)]
            entries.append(entry)
        return entries