"""Exception types raised by the model layer."""

from __future__ import annotations


class WitherError(Exception):
    """Base class for every error raised by this package."""

    default_message = "Model operation failed."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message if message is not None else self.default_message)


class ModelIdRequiredError(WitherError):
    """The operation needs a model instance that already has an ID."""

    default_message = "Model must have an ID for this operation."


class ModelSerializationError(WitherError):
    """A model serialized to something other than a document."""

    def __init__(self, element_type: str) -> None:
        self.element_type = element_type
        super().__init__(
            "Serializing model to BSON failed to produce a document, "
            f"got type {element_type}"
        )


class ServerFailedToReturnUpdatedDocError(WitherError):
    """The server returned no document after a write that should yield one."""

    default_message = (
        "Server failed to return the updated document. Update may have failed."
    )


class ServerFailedToReturnIdError(WitherError):
    """The server returned a document without a usable ID."""

    default_message = "Server failed to return ID of updated document."


class MigrationSetOrUnsetRequiredError(WitherError):
    """A migration defines neither a ``$set`` nor an ``$unset`` document."""

    default_message = "One of '$set' or '$unset' must be specified."


class ModelSchemaError(WitherError):
    """A model declaration or one of its options is malformed."""

    default_message = "Malformed model declaration."