# sysresources

Declarative resources for software packages and services on a system. A
resource compares the desired attributes with the previous ones, applies the
difference through a client that you supply, and records what the system
looked like beforehand so that deleting the resource puts it back.

## Modules

| Module                         | Main classes                                          |
|--------------------------------|-------------------------------------------------------|
| `sysresources.state`           | `ResourceData`, `ResourceError`                       |
| `sysresources.packages`        | `PackagesResource`, `ApkPackagesResource`, `Package`, `PackageClient` |
| `sysresources.packages_apt`    | `AptPackagesResource`                                 |
| `sysresources.packages_snap`   | `SnapPackagesResource`                                |
| `sysresources.service`         | `ServiceResource`, `OpenrcServiceResource`, `Service`, `ServiceClient` |
| `sysresources.service_systemd` | `SystemdServiceResource`                              |

## Resource data

`ResourceData(new, old, resource_id)` holds the current (`new`) and prior
(`old`) attribute values of one resource and its id.

- `get(key)` returns the current value, or `None`.
- `get_ok(key)` returns the value and whether it is set to a non-empty,
  non-zero value.
- `get_change(key)` returns `(old, new)`; `has_change(key)` compares them.
- `set(key, value)` writes a current value.
- `internal_data()` / `set_internal_data(data)` read and write private
  bookkeeping kept under the `internal` attribute.

Internal data is stored as compact JSON, base64 encoded, by
`encode_internal_data`; `None`, empty strings and empty collections are left
out, `False` is kept. `decode_internal_data` reverses it and raises
`ResourceError` on malformed input.

## Packages

A package client implements `PackageClient`:

- `get()` returns a list of `Package` objects (`name`, `manager`, `state`, and
  `version` with `required`, `installed` and `available`);
- `apply(packages)` brings each package into its `PackageState`
  (`INSTALLED` or `NOT_INSTALLED`).

```python
from sysresources.packages import ApkPackagesResource
from sysresources.state import ResourceData

resource = ApkPackagesResource(my_apk_client)
data = ResourceData(
    new={"package": [{"name": "openssl"}, {"name": "grep", "version": "=3.7-r0"}]},
    old={},
    resource_id="",
)
resource.create(data)

data.resource_id        # "grep|openssl"
data.get("package")     # installed packages, each with "versions": [{"installed": ..., "available": ...}]
data.internal_data()    # {"pre_installed": {"grep": False, "openssl": False}}
                        # when neither package was installed beforehand
```

- `create` and `update` install every package in the current set and
  uninstall packages that were in the previous set but not the current one
  (`desired_packages`). The id is the package names, sorted, joined with `|`.
- The first time a package is installed, whether it was already installed is
  recorded under `pre_installed`; uninstalled packages are dropped from it.
- `read` reports only the packages named by the id that the client says are
  installed, ordered by name.
- `delete` returns each package to the recorded state: installed if it was
  installed before, otherwise uninstalled.
- Empty or duplicate package names raise `ResourceError`.

`ApkPackagesResource` also accepts a `version` per package. It must start with
a constraint operator (`<`, `<=`, `=`, `~`, `>=`, `>`); otherwise
`validate_apk_version` raises `ValueError`. `AptPackagesResource` and
`SnapPackagesResource` take names only.

Helpers: `package_id`, `package_names_from_id`, `filter_by_names`,
`filter_by_state`.

## Services

A service client implements `ServiceClient`:

- `get(name, runlevel)` returns a `Service` (`name`, `status`, `enabled`,
  `runlevel`) or raises `ServiceNotFoundError`;
- `apply(service, options)` brings the service into the given state; options
  are `ApplyOption.RELOAD` and `ApplyOption.RESTART`.

```python
from sysresources.service import OpenrcServiceResource
from sysresources.state import ResourceData

resource = OpenrcServiceResource(my_openrc_client)
data = ResourceData(
    new={"name": "httpd", "status": "started", "enabled": True},
    old={},
    resource_id="",
)
resource.create(data)
data.internal_data()    # e.g. {"pre_status": "stopped", "pre_enabled": False}
```

- `status` must be `"started"` or `"stopped"` (`ValueError` otherwise);
  `enabled` is left alone when not given.
- `get_service` polls the client at a constant interval (5 seconds by default)
  while the status is `STARTING` or `STOPPING`. `ServiceResource` takes
  `interval` and `sleep` to change this.
- `create` records the prior status and enablement; it raises `ResourceError`
  if the client cannot report either.
- A change to `reload_on` or `restart_on` passes `RELOAD` or `RESTART` to
  `apply`.
- `read` leaves the attributes unchanged when the service does not exist.
- `delete` applies the recorded status and enablement again.

`OpenrcServiceResource` works within a `runlevel` (default `"default"`).
`SystemdServiceResource` takes a `scope`, of which only `"system"` is
supported (`validate_scope`), and a name without the `.service` suffix
(`validate_service_name`); both raise `ValueError` otherwise.

## What this package does not do

It contains no clients: nothing here runs `apk`, `apt`, `snap`, `rc-service`
or `systemctl`, or connects to a machine. You provide `PackageClient` and
`ServiceClient` implementations. There is no command-line tool and no storage
of resource data beyond the `ResourceData` objects you hold.

## Tests

```
pip install -e .[test]
pytest
```