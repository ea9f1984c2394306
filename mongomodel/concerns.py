"""Parsing of declarative model options: read concern, write concern and indexes."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pymongo.errors import ConfigurationError
from pymongo.read_concern import ReadConcern
from pymongo.write_concern import WriteConcern

from .common import IndexModel
from .errors import ModelSchemaError

_READ_CONCERN_LEVELS = ("local", "majority", "linearizable", "available")
_WRITE_CONCERN_FIELDS = frozenset({"w", "w_timeout", "journal"})
_INDEX_FIELDS = frozenset({"keys", "options"})
_MAX_U32 = 2**32 - 1


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def parse_read_concern(spec: Any) -> ReadConcern | None:
    """Turn a read concern spec into a driver read concern.

    Accepts one of the level names ``local``, ``majority``, ``linearizable``,
    ``available``, or ``{"custom": "<level>"}``. ``None`` means no read concern.
    """
    if spec is None:
        return None
    if isinstance(spec, ReadConcern):
        return spec
    if isinstance(spec, str):
        if spec in _READ_CONCERN_LEVELS:
            return ReadConcern(spec)
        raise ModelSchemaError(
            f"malformed model read concern attribute: unknown level {spec!r}"
        )
    if isinstance(spec, Mapping) and set(spec) == {"custom"}:
        level = spec["custom"]
        if isinstance(level, str):
            return ReadConcern(level)
    raise ModelSchemaError(f"malformed model read concern attribute: {spec!r}")


def _parse_acknowledgment(spec: Any) -> int | str:
    if spec == "majority":
        return "majority"
    if isinstance(spec, Mapping) and len(spec) == 1:
        ((kind, value),) = spec.items()
        if kind == "nodes" and _is_int(value) and 0 <= value <= _MAX_U32:
            return value
        if kind == "custom" and isinstance(value, str):
            return value
    raise ModelSchemaError(
        f"malformed model write concern attribute: invalid acknowledgment {spec!r}"
    )


def parse_write_concern(spec: Any) -> WriteConcern | None:
    """Turn a write concern spec into a driver write concern.

    The spec is a mapping with optional ``w`` (``"majority"``, ``{"nodes": n}``
    or ``{"custom": name}``), ``w_timeout`` (seconds) and ``journal`` (bool).
    ``None`` means no write concern.
    """
    if spec is None:
        return None
    if isinstance(spec, WriteConcern):
        return spec
    if not isinstance(spec, Mapping):
        raise ModelSchemaError(f"malformed model write concern attribute: {spec!r}")
    unknown = set(spec) - _WRITE_CONCERN_FIELDS
    if unknown:
        raise ModelSchemaError(
            "malformed model write concern attribute: unknown field(s) "
            + ", ".join(sorted(map(str, unknown)))
        )

    w = spec.get("w")
    if w is not None:
        w = _parse_acknowledgment(w)

    timeout = spec.get("w_timeout")
    if timeout is not None:
        if not _is_int(timeout) or timeout < 0:
            raise ModelSchemaError(
                f"malformed model write concern attribute: invalid w_timeout {timeout!r}"
            )
        timeout *= 1000

    journal = spec.get("journal")
    if journal is not None and not isinstance(journal, bool):
        raise ModelSchemaError(
            f"malformed model write concern attribute: invalid journal {journal!r}"
        )

    try:
        return WriteConcern(w=w, wtimeout=timeout, j=journal)
    except (ConfigurationError, TypeError, ValueError) as exc:
        raise ModelSchemaError(f"malformed model write concern attribute: {exc}") from exc


def parse_index(spec: Any) -> IndexModel:
    """Turn an index spec ``{"keys": {...}, "options": {...}}`` into an IndexModel."""
    if isinstance(spec, IndexModel):
        return spec
    if not isinstance(spec, Mapping):
        raise ModelSchemaError(f"malformed model index specification: {spec!r}")
    unknown = set(spec) - _INDEX_FIELDS
    if unknown:
        raise ModelSchemaError(
            "malformed model index specification: unknown field(s) "
            + ", ".join(sorted(map(str, unknown)))
        )
    if "keys" not in spec:
        raise ModelSchemaError("malformed model index specification: missing keys")
    keys = spec["keys"]
    if not isinstance(keys, Mapping):
        raise ModelSchemaError(
            f"error parsing index keys, must be a mapping: {keys!r}"
        )
    options = spec.get("options")
    if options is not None and not isinstance(options, Mapping):
        raise ModelSchemaError(
            f"error parsing index options, must be a mapping: {options!r}"
        )
    return IndexModel(keys, options)