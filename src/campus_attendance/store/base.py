from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, Sequence

OPERATORS = ("==", "!=", "<", "<=", ">", ">=")


@dataclass(frozen=True)
class Filter:
    """One `where` clause of a scan: field, operator, value."""

    field: str
    op: str
    value: Any

    def __post_init__(self):
        if self.op not in OPERATORS:
            raise ValueError(f"Unsupported filter operator: {self.op!r}")

    def matches(self, data: dict) -> bool:
        if self.field not in data:
            return False
        current = data[self.field]
        if self.op == "==":
            return current == self.value
        if self.op == "!=":
            return current != self.value
        try:
            if self.op == "<":
                return current < self.value
            if self.op == "<=":
                return current <= self.value
            if self.op == ">":
                return current > self.value
            return current >= self.value
        except TypeError:
            return False


def where(field_name: str, op: str, value: Any) -> Filter:
    return Filter(field_name, op, value)


@dataclass(frozen=True)
class Document:
    id: str
    data: dict = field(default_factory=dict)


@dataclass(frozen=True)
class WriteOp:
    kind: str  # "set" | "create" | "update" | "delete"
    collection: str
    doc_id: str
    data: Optional[dict] = None


class WriteBatch:
    """Collects writes; `DocumentStore.commit` applies them all or none."""

    def __init__(self, store: "DocumentStore"):
        self._store = store
        self._ops: list[WriteOp] = []

    def set(self, collection: str, doc_id: str, data: dict) -> "WriteBatch":
        self._ops.append(WriteOp("set", collection, doc_id, dict(data)))
        return self

    def create(self, collection: str, doc_id: str, data: dict) -> "WriteBatch":
        """Insert that fails the whole commit with `DocumentExistsError` if `doc_id` is taken."""
        self._ops.append(WriteOp("create", collection, doc_id, dict(data)))
        return self

    def update(self, collection: str, doc_id: str, fields: dict) -> "WriteBatch":
        self._ops.append(WriteOp("update", collection, doc_id, dict(fields)))
        return self

    def delete(self, collection: str, doc_id: str) -> "WriteBatch":
        self._ops.append(WriteOp("delete", collection, doc_id))
        return self

    def commit(self) -> None:
        if self._ops:
            self._store.commit(self._ops)
        self._ops = []


class DocumentStore(Protocol):
    """Collection/document persistence capability used by every repository.

    Implementations raise `TransientError` when the backend times out or is
    unreachable.
    """

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        raise NotImplementedError

    def set(self, collection: str, doc_id: str, data: dict) -> None:
        raise NotImplementedError

    def create_if_absent(self, collection: str, doc_id: str, data: dict) -> bool:
        """Atomically insert `data` unless `doc_id` exists; False when it already did."""

        raise NotImplementedError

    def update(self, collection: str, doc_id: str, fields: dict) -> bool:
        """Merge `fields` into an existing document; False when it does not exist."""

        raise NotImplementedError

    def compare_and_set(
        self, collection: str, doc_id: str, field_name: str, *, expected: Any, value: Any
    ) -> bool:
        """Set `field_name` to `value` only while it still equals `expected`."""

        raise NotImplementedError

    def increment(self, collection: str, doc_id: str, field_name: str, amount: int = 1) -> bool:
        raise NotImplementedError

    def delete(self, collection: str, doc_id: str) -> bool:
        raise NotImplementedError

    def query(self, collection: str, filters: Sequence[Filter] = ()) -> Sequence[Document]:
        raise NotImplementedError

    def batch(self) -> WriteBatch:
        raise NotImplementedError

    def commit(self, ops: Sequence[WriteOp]) -> None:
        """Apply every op or none; a `create` on an existing id raises `DocumentExistsError`."""

        raise NotImplementedError

    def ping(self) -> bool:
        raise NotImplementedError
