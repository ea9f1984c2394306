"""Shared value types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class IndexModel:
    """An index definition: the indexed keys with their order, plus options."""

    keys: dict[str, Any]
    options: dict[str, Any] | None = None

    def __post_init__(self) -> None:
        self.keys = dict(self.keys)
        if self.options is not None:
            self.options = dict(self.options)

    def to_document(self) -> dict[str, Any]:
        """Build the index specification used by the ``createIndexes`` command."""
        document: dict[str, Any] = {"key": dict(self.keys)}
        if self.options is not None:
            document.update(self.options)
        return document