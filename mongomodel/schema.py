"""Validation of model declarations and derivation of their configuration."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pymongo.read_concern import ReadConcern
from pymongo.write_concern import WriteConcern

from .common import IndexModel
from .concerns import parse_index, parse_read_concern, parse_write_concern
from .errors import ModelSchemaError

ID_FIELD = "id"
ID_KEY = "_id"

_DUPLICATE_ATTR = "duplicate attr specification"

_UNCOUNTABLE = frozenset(
    {
        "equipment",
        "information",
        "rice",
        "money",
        "species",
        "series",
        "fish",
        "sheep",
        "jeans",
        "police",
    }
)

_IRREGULAR = {
    "person": "people",
    "man": "men",
    "child": "children",
    "sex": "sexes",
    "move": "moves",
    "zombie": "zombies",
}

# Checked in order; the first matching rule wins.
_PLURAL_RULES: tuple[tuple[re.Pattern[str], str], ...] = tuple(
    (re.compile(pattern, re.IGNORECASE), replacement)
    for pattern, replacement in (
        (r"(quiz)$", r"\1zes"),
        (r"^(oxen)$", r"\1"),
        (r"^(ox)$", r"\1en"),
        (r"^(m|l)ice$", r"\1ice"),
        (r"^(m|l)ouse$", r"\1ice"),
        (r"(matr|vert|ind)(?:ix|ex)$", r"\1ices"),
        (r"(x|ch|ss|sh)$", r"\1es"),
        (r"([^aeiouy]|qu)y$", r"\1ies"),
        (r"(hive)$", r"\1s"),
        (r"([lr])f$", r"\1ves"),
        (r"([^f])fe$", r"\1ves"),
        (r"sis$", "ses"),
        (r"([ti])a$", r"\1a"),
        (r"([ti])um$", r"\1a"),
        (r"(buffal|tomat)o$", r"\1oes"),
        (r"(bu)s$", r"\1ses"),
        (r"(alias|status)$", r"\1es"),
        (r"(octop|vir)i$", r"\1i"),
        (r"(octop|vir)us$", r"\1i"),
        (r"^(ax|test)is$", r"\1es"),
        (r"s$", "s"),
        (r"$", "s"),
    )
)


@dataclass
class ModelConfig:
    """Everything a model declaration resolves to."""

    collection_name: str
    indexes: list[IndexModel] = field(default_factory=list)
    read_concern: ReadConcern | None = None
    write_concern: WriteConcern | None = None
    selection_criteria: Callable[[], Any] | None = None
    skip_serde_checks: bool = False
    id_key: str = ID_KEY


def pluralize(word: str) -> str:
    """Return the plural of ``word``; only its last ``_``-separated part changes."""
    if not word:
        return word
    head, sep, last = word.rpartition("_")
    lowered = last.lower()
    if not last or lowered in _UNCOUNTABLE:
        return word
    if lowered in _IRREGULAR:
        plural = _IRREGULAR[lowered]
        if last[0].isupper():
            plural = plural[0].upper() + plural[1:]
        return head + sep + plural
    for pattern, replacement in _PLURAL_RULES:
        if pattern.search(last):
            return head + sep + pattern.sub(replacement, last, count=1)
    return word


def _snake_case(name: str) -> str:
    text = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    text = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", text)
    text = re.sub(r"[^A-Za-z0-9]+", "_", text)
    return text.strip("_").lower()


def table_case(name: str) -> str:
    """Convert a class name to a table name: snake case with a plural last word."""
    return pluralize(_snake_case(name))


def default_collection_name(class_name: str) -> str:
    """The collection name used when a model does not declare one."""
    return pluralize(table_case(class_name))


def check_id_field(field_names: Iterable[str] | Mapping[str, Any], skip_checks: bool = False) -> str:
    """Ensure the model has an ``id`` field and return the document key it is stored under.

    ``field_names`` is either an iterable of names or a mapping of names to
    field metadata. In metadata, ``rename`` must be ``"_id"`` and
    ``skip_if_none`` must be true when given, unless ``skip_checks`` is set.
    """
    if isinstance(field_names, (str, bytes)):
        raise ModelSchemaError("model fields must be given as a collection of names")
    if isinstance(field_names, Mapping):
        fields = dict(field_names)
    else:
        fields = {name: None for name in field_names}

    if ID_FIELD not in fields:
        raise ModelSchemaError("models must have a field `id` holding an optional string ID")

    metadata = fields[ID_FIELD] or {}
    if not isinstance(metadata, Mapping):
        raise ModelSchemaError(f"malformed metadata for the `id` field: {metadata!r}")

    rename = metadata.get("rename", ID_KEY)
    if skip_checks:
        return rename
    if rename != ID_KEY:
        raise ModelSchemaError('the `rename` of model ID fields should be `rename="_id"`')
    if metadata.get("skip_if_none", True) is not True:
        raise ModelSchemaError("model ID fields must be skipped when serializing a missing ID")
    return rename


def _option_pairs(options: Any) -> list[tuple[str, Any]]:
    if options is None:
        return []
    if isinstance(options, Mapping):
        items: Iterable[Any] = options.items()
    elif isinstance(options, (str, bytes)) or not isinstance(options, Iterable):
        raise ModelSchemaError(f"malformed model attributes: {options!r}")
    else:
        items = options
    pairs = []
    for item in items:
        try:
            name, value = item
        except (TypeError, ValueError):
            raise ModelSchemaError(f"malformed model attribute: {item!r}") from None
        if not isinstance(name, str):
            raise ModelSchemaError(f"malformed model attribute name: {name!r}")
        pairs.append((name, value))
    return pairs


def build_model_config(
    class_name: str,
    field_names: Iterable[str] | Mapping[str, Any],
    options: Mapping[str, Any] | Iterable[tuple[str, Any]] | None = None,
) -> ModelConfig:
    """Validate a model declaration and resolve its configuration.

    ``options`` is a mapping, or a sequence of ``(name, value)`` pairs where an
    attribute may appear more than once. Recognised attributes are
    ``collection_name``, ``index``, ``indexes``, ``read_concern``,
    ``selection_criteria``, ``skip_serde_checks`` and ``write_concern``.
    """
    collection_name: str | None = None
    indexes: list[IndexModel] = []
    read_concern: ReadConcern | None = None
    write_concern: WriteConcern | None = None
    selection_criteria: Callable[[], Any] | None = None
    seen: set[str] = set()

    for name, value in _option_pairs(options):
        if name in ("index", "indexes"):
            if name == "index":
                indexes.append(parse_index(value))
            else:
                if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, Iterable):
                    raise ModelSchemaError("`indexes` must be a sequence of index specifications")
                indexes.extend(parse_index(spec) for spec in value)
            continue

        if name not in {
            "collection_name",
            "read_concern",
            "selection_criteria",
            "skip_serde_checks",
            "write_concern",
        }:
            raise ModelSchemaError(f"unrecognized model attribute: {name!r}")
        if name in seen:
            raise ModelSchemaError(f"{_DUPLICATE_ATTR}: {name!r}")
        seen.add(name)

        if name == "collection_name":
            if not isinstance(value, str):
                raise ModelSchemaError("the collection name must be a string")
            if not value:
                raise ModelSchemaError(
                    "model collection names must be at least one character in length"
                )
            collection_name = value
        elif name == "read_concern":
            read_concern = parse_read_concern(value)
        elif name == "write_concern":
            write_concern = parse_write_concern(value)
        elif name == "selection_criteria":
            if not callable(value):
                raise ModelSchemaError(
                    "the selection criteria must be a function producing the criteria"
                )
            selection_criteria = value
        else:
            if not isinstance(value, bool):
                raise ModelSchemaError("`skip_serde_checks` must be given as a boolean")

    skip_checks = bool(dict(_option_pairs(options)).get("skip_serde_checks", False))
    id_key = check_id_field(field_names, skip_checks)

    return ModelConfig(
        collection_name=collection_name or default_collection_name(class_name),
        indexes=indexes,
        read_concern=read_concern,
        write_concern=write_concern,
        selection_criteria=selection_criteria,
        skip_serde_checks=skip_checks,
        id_key=id_key,
    )