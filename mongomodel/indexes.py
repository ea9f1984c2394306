"""Index discovery and synchronisation for model collections."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pymongo.errors import OperationFailure

from .common import IndexModel

logger = logging.getLogger(__name__)

MONGO_ID_INDEX_NAME = "_id_"
MONGO_DIFF_INDEX_BLACKLIST = frozenset({"v", "ns", "key"})

_NAMESPACE_NOT_FOUND = 26
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


def _as_int32(value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        if _INT32_MIN <= value <= _INT32_MAX:
            return int(value)
    return 0


def generate_index_name_from_keys(keys: Mapping[str, Any]) -> str:
    """Generate an index name from its keys, as the index management spec does.

    Each key contributes ``<key>_<order>``; orders that are not 32-bit
    integers (such as ``"text"``) count as ``0``.
    """
    return "_".join(f"{key}_{_as_int32(value)}" for key, value in keys.items())


def build_index_map(list_indexes: Mapping[str, Any]) -> dict[str, IndexModel]:
    """Map generated index names to index models from a ``listIndexes`` reply.

    The default ``_id_`` index, entries without a name and entries without
    keys are left out. The options of each model hold every field of the
    entry except ``v``, ``ns`` and ``key``.
    """
    cursor = list_indexes.get("cursor")
    if not isinstance(cursor, Mapping):
        return {}
    first_batch = cursor.get("firstBatch")
    if not isinstance(first_batch, list):
        return {}

    index_map: dict[str, IndexModel] = {}
    for entry in first_batch:
        if not isinstance(entry, Mapping):
            continue
        name = entry.get("name")
        if not isinstance(name, str) or name == MONGO_ID_INDEX_NAME:
            continue
        keys = entry.get("key")
        if not isinstance(keys, Mapping):
            continue
        options = {
            field: value
            for field, value in entry.items()
            if field not in MONGO_DIFF_INDEX_BLACKLIST
        }
        index_map[generate_index_name_from_keys(keys)] = IndexModel(keys, options)
    return index_map


def get_current_indexes(db: Any, collection: Any) -> dict[str, IndexModel]:
    """Fetch the indexes currently on ``collection``, keyed by generated name.

    A collection or database that does not exist yet has no indexes.
    """
    try:
        reply = db.command({"listIndexes": collection.name})
    except OperationFailure as exc:
        if exc.code != _NAMESPACE_NOT_FOUND:
            raise
        reply = {}
    return build_index_map(reply)


def _aspired_indexes(model_indexes: Iterable[IndexModel]) -> dict[str, IndexModel]:
    aspired: dict[str, IndexModel] = {}
    for model in model_indexes:
        name = generate_index_name_from_keys(model.keys)
        target = IndexModel(model.keys, model.options)
        if target.options is None:
            target.options = {"name": name}
        elif not isinstance(target.options.get("name"), str):
            target.options["name"] = name
        aspired[name] = target
    return aspired


def sync_model_indexes(
    db: Any,
    collection: Any,
    model_indexes: Iterable[IndexModel],
    current_indexes: Mapping[str, IndexModel],
) -> None:
    """Make the indexes of ``collection`` match ``model_indexes``.

    Indexes present on the collection but not declared are dropped; declared
    indexes that are missing are created; indexes whose options differ are
    dropped and created again.
    """
    namespace = getattr(collection, "full_name", collection.name)
    logger.info("Synchronizing indexes for '%s'.", namespace)

    aspired = _aspired_indexes(model_indexes)

    to_drop = [name for name in current_indexes if name not in aspired]
    to_create: dict[str, IndexModel] = {}
    for name, aspired_index in aspired.items():
        current = current_indexes.get(name)
        if current is None:
            to_create[name] = aspired_index
        elif aspired_index.options != current.options:
            to_drop.append(name)
            to_create[name] = aspired_index

    for name in to_drop:
        db.command({"dropIndexes": collection.name, "index": name})

    if to_create:
        db.command(
            {
                "createIndexes": collection.name,
                "indexes": [index.to_document() for index in to_create.values()],
            }
        )

    logger.info("Synchronized indexes for '%s'.", namespace)