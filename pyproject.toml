[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sysresources"
version = "0.1.0"
description = "Declarative package (apk, apt, snap) and service (OpenRC, systemd) resources that restore the prior system state on delete"
requires-python = ">=3.10"
dependencies = []
keywords = ["packages", "apk", "apt", "snap", "openrc", "systemd", "services", "configuration-management"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["sysresources"]

[tool.pytest.ini_options]
addopts = "-ra"
