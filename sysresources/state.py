"""Resource attribute data and the encoded internal state attached to it."""

from __future__ import annotations

import base64
import binascii
import json
from collections.abc import Mapping
from typing import Any

INTERNAL_KEY = "internal"


class ResourceError(Exception):
    """Raised when a resource operation cannot be completed."""


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, bytes, dict, list, tuple, set, frozenset)):
        return len(value) == 0
    return False


def encode_internal_data(data: Mapping[str, Any]) -> str:
    """Serialise internal data to compact JSON, base64 encoded.

    Empty fields (None, empty strings and empty collections) are left out;
    False is kept.
    """
    compact = {key: value for key, value in data.items() if not _is_empty(value)}
    text = json.dumps(compact, separators=(",", ":"), ensure_ascii=False)
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def decode_internal_data(value: str | None) -> dict[str, Any]:
    """Decode internal data produced by :func:`encode_internal_data`."""
    if not value:
        return {}
    try:
        raw = base64.b64decode(value, validate=True)
        decoded = json.loads(raw.decode("utf-8"))
    except (binascii.Error, ValueError, UnicodeDecodeError) as exc:
        raise ResourceError(f"invalid internal data: {exc}") from exc
    if not isinstance(decoded, dict):
        raise ResourceError(
            f"invalid internal data: expected an object, got {type(decoded).__name__}"
        )
    return decoded


class ResourceData:
    """Planned and prior attribute values of one resource instance."""

    def __init__(
        self,
        new: Mapping[str, Any] | None = None,
        old: Mapping[str, Any] | None = None,
        resource_id: str = "",
    ) -> None:
        self.new: dict[str, Any] = dict(new or {})
        self.old: dict[str, Any] = dict(old or {})
        self.resource_id = resource_id

    def get(self, key: str) -> Any:
        """Return the current value of an attribute, or None when unset."""
        return self.new.get(key)

    def get_ok(self, key: str) -> tuple[Any, bool]:
        """Return the value and whether it is set to a non-zero value."""
        value = self.new.get(key)
        return value, value is not None and bool(value)

    def get_change(self, key: str) -> tuple[Any, Any]:
        """Return the prior and the current value of an attribute."""
        return self.old.get(key), self.new.get(key)

    def has_change(self, key: str) -> bool:
        old, new = self.get_change(key)
        return old != new

    def set(self, key: str, value: Any) -> None:
        self.new[key] = value

    def internal_data(self) -> dict[str, Any]:
        """Return the decoded internal data of the resource."""
        return decode_internal_data(self.new.get(INTERNAL_KEY))

    def set_internal_data(self, data: Mapping[str, Any]) -> None:
        self.new[INTERNAL_KEY] = encode_internal_data(data)