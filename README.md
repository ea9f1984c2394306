# mongomodel

Building blocks for a model layer over MongoDB collections. The package
validates a model declaration, turns its read concern, write concern and
index options into `pymongo` objects, derives a collection name from the class
name, and keeps a collection's indexes in line with the indexes a model
declares.

## Installation

```
pip install mongomodel
```

## Declaring a model

`mongomodel.schema.build_model_config(class_name, field_names, options)`
checks a declaration and returns a `ModelConfig` holding `collection_name`,
`indexes`, `read_concern`, `write_concern`, `selection_criteria`,
`skip_serde_checks` and `id_key`.

```python
from mongomodel.schema import build_model_config

config = build_model_config(
    "User",
    ["id", "email"],
    {
        "index": {"keys": {"email": 1}, "options": {"unique": True}},
        "read_concern": "majority",
        "write_concern": {"w": "majority", "w_timeout": 10, "journal": True},
    },
)

config.collection_name   # "users"
config.indexes           # [IndexModel(keys={"email": 1}, options={"unique": True})]
```

`options` is a mapping, or a sequence of `(name, value)` pairs so that an
attribute such as `index` can be given more than once. The recognised
attributes are:

- `collection_name`: a non-empty string. Without it the name is the class
  name in pluralised snake case (`User` becomes `users`, `IndexTest` becomes
  `index_tests`); see `table_case`, `pluralize` and `default_collection_name`.
- `index`: one index specification, `{"keys": {...}, "options": {...}}`;
  `indexes`: a sequence of them.
- `read_concern`: one of `"local"`, `"majority"`, `"linearizable"`,
  `"available"`, or `{"custom": "<level>"}`.
- `write_concern`: a mapping with optional `w` (`"majority"`,
  `{"nodes": n}` or `{"custom": "<name>"}`), `w_timeout` in seconds and
  `journal`.
- `selection_criteria`: a function returning the selection criteria.
- `skip_serde_checks`: a boolean that turns off the checks on the `id` field.

Every attribute except the index ones may appear only once. Unknown or
malformed attributes raise `ModelSchemaError`.

The model must have an `id` field. `field_names` may also be a mapping from
field name to metadata; for `id`, a `rename` other than `"_id"` or a
`skip_if_none` other than `True` is rejected unless `skip_serde_checks` is set
(`check_id_field` does this check on its own).

The parsers are also usable directly, in `mongomodel.concerns`:
`parse_read_concern`, `parse_write_concern` and `parse_index`. A `w_timeout`
of 10 becomes a `pymongo` `WriteConcern` with `wtimeout=10000`.

## Indexes

`mongomodel.common.IndexModel` holds an index's `keys` and optional
`options`; `to_document()` gives the entry used by `createIndexes`.

`mongomodel.indexes` talks to the server through a `pymongo` database and
collection:

```python
from pymongo import MongoClient
from mongomodel.indexes import get_current_indexes, sync_model_indexes

db = MongoClient("mongodb://localhost:27017/")["mydb"]
collection = db[config.collection_name]

current = get_current_indexes(db, collection)
sync_model_indexes(db, collection, config.indexes, current)
```

- `get_current_indexes` runs `listIndexes` and returns a mapping from name to
  `IndexModel`. A collection or database that does not exist yet has no
  indexes. The built-in `_id_` index is left out.
- `sync_model_indexes` drops indexes the model no longer declares, drops and
  rebuilds those whose options differ, and creates the missing ones in a
  single `createIndexes` command.

Indexes are matched by a name generated from their keys
(`generate_index_name_from_keys`): `{"i": -1}` gives `i_-1`, and orders that
are not 32-bit integers, such as `"text"`, count as `0`. A declared index
without a `name` option gets the generated name as its `name`.
`build_index_map` does the conversion of a raw `listIndexes` reply.

## Errors

Every error the package raises derives from `mongomodel.errors.WitherError`.
Declaration problems raise `ModelSchemaError`. The module also defines
`ModelIdRequiredError`, `ModelSerializationError`,
`ServerFailedToReturnUpdatedDocError`, `ServerFailedToReturnIdError` and
`MigrationSetOrUnsetRequiredError` for a model layer built on top of it.

## What the package does not do

There is no model base class here: nothing saves, finds, updates or deletes
documents as model instances, and there is no cursor over typed results.
There is no migration runner either. The package stops at declaration
checking, option parsing and index synchronization; reading and writing
documents is left to `pymongo` itself.

## Running the tests

```
pip install "mongomodel[test]"
pytest
```