import base64

import pytest

from sysresources.packages import (
    Package,
    PackageClient,
    PackageState,
    PackageVersion,
)
from sysresources.packages_snap import SnapPackagesResource
from sysresources.state import ResourceData, ResourceError, decode_internal_data


class FakeSnapClient(PackageClient):
    def __init__(self, installed=None, available=True):
        self.installed = dict(installed or {})
        self.available = available

    def _check(self):
        if not self.available:
            raise ResourceError("snap not available")

    def get(self):
        self._check()
        return [
            Package(
                name=name,
                manager="snap",
                state=PackageState.INSTALLED,
                version=PackageVersion(installed=version),
            )
            for name, version in sorted(self.installed.items())
        ]

    def apply(self, packages):
        self._check()
        for pkg in packages:
            if pkg.state == PackageState.INSTALLED:
                self.installed.setdefault(pkg.name, "2.10")
            elif pkg.state == PackageState.NOT_INSTALLED:
                self.installed.pop(pkg.name, None)


def _config(names):
    return [{"name": name} for name in names]


def _create(resource, names):
    data = ResourceData(new={"package": _config(names)})
    resource.create(data)
    return data


def _update(resource, prior, names):
    data = ResourceData(
        new={"package": _config(names), "internal": prior.new["internal"]},
        old=dict(prior.new),
        resource_id=prior.resource_id,
    )
    resource.update(data)
    return data


def _delete(resource, prior):
    data = ResourceData(new=dict(prior.new), old=dict(prior.new), resource_id=prior.resource_id)
    resource.delete(data)


def _encoded(text):
    return base64.b64encode(text.encode()).decode()


def test_create_single():
    client = FakeSnapClient(installed={"core": "16-2.61"})
    resource = SnapPackagesResource(client)
    data = _create(resource, ["hello"])

    packages = data.get("package")
    assert len(packages) == 1
    assert packages[0]["name"] == "hello"
    assert len(packages[0]["versions"]) == 1
    assert packages[0]["versions"][0]["installed"] == "2.10"
    assert packages[0]["versions"][0].get("available", "") == ""
    assert data.get("internal") == _encoded('{"pre_installed":{"hello":false}}')

    _delete(resource, data)
    assert "hello" not in client.installed


def test_create_single_idempotent():
    client = FakeSnapClient(installed={"core": "16-2.61"})
    resource = SnapPackagesResource(client)
    data = _create(resource, ["core"])

    assert data.get("package") == [{"name": "core", "versions": [{"installed": "16-2.61"}]}]
    assert decode_internal_data(data.get("internal")) == {"pre_installed": {"core": True}}

    _delete(resource, data)
    assert client.installed == {"core": "16-2.61"}


def test_multiple():
    client = FakeSnapClient(installed={"core": "16-2.61"})
    resource = SnapPackagesResource(client)
    data = _create(resource, ["hello", "core"])

    assert [p["name"] for p in data.get("package")] == ["core", "hello"]
    assert data.resource_id == "core|hello"
    assert data.get("internal") == _encoded('{"pre_installed":{"core":true,"hello":false}}')

    _delete(resource, data)
    assert client.installed == {"core": "16-2.61"}


def test_update_add_package():
    client = FakeSnapClient()
    resource = SnapPackagesResource(client)
    first = _create(resource, ["hello"])
    assert decode_internal_data(first.get("internal")) == {"pre_installed": {"hello": False}}

    second = _update(resource, first, ["hello", "hello-world"])
    assert [p["name"] for p in second.get("package")] == ["hello", "hello-world"]
    assert second.get("internal") == _encoded(
        '{"pre_installed":{"hello":false,"hello-world":false}}'
    )

    _delete(resource, second)
    assert client.installed == {}


def test_update_remove_package():
    client = FakeSnapClient()
    resource = SnapPackagesResource(client)
    first = _create(resource, ["hello", "hello-world"])
    assert [p["name"] for p in first.get("package")] == ["hello", "hello-world"]

    second = _update(resource, first, ["hello"])
    assert [p["name"] for p in second.get("package")] == ["hello"]
    assert "hello-world" not in client.installed
    assert "hello" in client.installed
    assert second.get("internal") == _encoded('{"pre_installed":{"hello":false}}')


def test_unavailable():
    resource = SnapPackagesResource(FakeSnapClient(available=False))
    with pytest.raises(ResourceError, match="snap not available"):
        _create(resource, ["hello"])


def test_expand_sets_manager():
    resource = SnapPackagesResource(FakeSnapClient())
    assert resource.expand([{"name": "hello"}]) == {"hello": Package(name="hello", manager="snap")}


def test_expand_rejects_duplicate_names():
    resource = SnapPackagesResource(FakeSnapClient())
    with pytest.raises(ResourceError, match="duplicate package name hello"):
        resource.expand([{"name": "hello"}, {"name": "hello", "versions": []}])


def test_expand_rejects_empty_name():
    resource = SnapPackagesResource(FakeSnapClient())
    with pytest.raises(ResourceError, match="empty package name"):
        resource.expand([{"name": ""}])


def test_flatten_orders_by_name():
    resource = SnapPackagesResource(FakeSnapClient())
    assert resource.flatten(None) is None
    flat = resource.flatten(
        [Package(name="hello"), Package(name="core", version=PackageVersion(available="3"))]
    )
    assert flat == [
        {"name": "core", "versions": [{"available": "3"}]},
        {"name": "hello", "versions": [{}]},
    ]