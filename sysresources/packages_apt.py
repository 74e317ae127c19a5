"""apt packages managed as one resource."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from .packages import (
    NAME_KEY,
    VERSIONS_KEY,
    Package,
    PackagesResource,
    _versions_entry,
)


class AptPackagesResource(PackagesResource):
    """apt packages; versions are reported but cannot be pinned."""

    manager = "apt"

    def expand(self, value: Any) -> dict[str, Package]:
        """Turn the package set attribute into apt packages keyed by name."""
        return {
            name: Package(name=name, manager=self.manager)
            for name in self._elements(value)
        }

    def flatten(self, packages: Iterable[Package] | None) -> list[dict[str, Any]] | None:
        """Turn apt packages into the package set attribute, ordered by name."""
        if packages is None:
            return None
        return [
            {NAME_KEY: pkg.name, VERSIONS_KEY: [_versions_entry(pkg)]}
            for pkg in sorted(packages, key=lambda p: p.name)
        ]