from __future__ import annotations

import copy
import threading
from typing import Optional, Sequence

from ..core.exceptions import DocumentExistsError
from .base import Document, DocumentStore, Filter, WriteBatch, WriteOp


class InMemoryDocumentStore(DocumentStore):
    """Process-local store used for tests and single-process development.

    A single lock serializes every operation, so `create_if_absent`,
    `increment` and `commit` are atomic with respect to each other.
    """

    def __init__(self, seed: Optional[dict[str, dict[str, dict]]] = None):
        self._lock = threading.RLock()
        self._collections: dict[str, dict[str, dict]] = {}
        for collection, docs in (seed or {}).items():
            for doc_id, data in docs.items():
                self._bucket(collection)[doc_id] = copy.deepcopy(data)

    def _bucket(self, collection: str) -> dict[str, dict]:
        return self._collections.setdefault(collection, {})

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        with self._lock:
            data = self._bucket(collection).get(doc_id)
            if data is None:
                return None
            return Document(id=doc_id, data=copy.deepcopy(data))

    def set(self, collection: str, doc_id: str, data: dict) -> None:
        with self._lock:
            self._bucket(collection)[doc_id] = copy.deepcopy(data)

    def create_if_absent(self, collection: str, doc_id: str, data: dict) -> bool:
        with self._lock:
            bucket = self._bucket(collection)
            if doc_id in bucket:
                return False
            bucket[doc_id] = copy.deepcopy(data)
            return True

    def update(self, collection: str, doc_id: str, fields: dict) -> bool:
        with self._lock:
            bucket = self._bucket(collection)
            if doc_id not in bucket:
                return False
            bucket[doc_id].update(copy.deepcopy(fields))
            return True

    def compare_and_set(self, collection: str, doc_id: str, field_name: str, *, expected, value) -> bool:
        with self._lock:
            doc = self._bucket(collection).get(doc_id)
            if doc is None or doc.get(field_name) != expected:
                return False
            doc[field_name] = copy.deepcopy(value)
            return True

    def increment(self, collection: str, doc_id: str, field_name: str, amount: int = 1) -> bool:
        with self._lock:
            bucket = self._bucket(collection)
            if doc_id not in bucket:
                return False
            doc = bucket[doc_id]
            doc[field_name] = int(doc.get(field_name) or 0) + int(amount)
            return True

    def delete(self, collection: str, doc_id: str) -> bool:
        with self._lock:
            return self._bucket(collection).pop(doc_id, None) is not None

    def query(self, collection: str, filters: Sequence[Filter] = ()) -> Sequence[Document]:
        with self._lock:
            return [
                Document(id=doc_id, data=copy.deepcopy(data))
                for doc_id, data in self._bucket(collection).items()
                if all(f.matches(data) for f in filters)
            ]

    def batch(self) -> WriteBatch:
        return WriteBatch(self)

    def commit(self, ops: Sequence[WriteOp]) -> None:
        with self._lock:
            # Apply to a scratch copy first so a failing op leaves nothing behind.
            staged = {name: dict(bucket) for name, bucket in self._collections.items()}
            for op in ops:
                bucket = staged.setdefault(op.collection, {})
                if op.kind == "set":
                    bucket[op.doc_id] = copy.deepcopy(op.data)
                elif op.kind == "create":
                    if op.doc_id in bucket:
                        raise DocumentExistsError(f"{op.collection}/{op.doc_id} already exists")
                    bucket[op.doc_id] = copy.deepcopy(op.data)
                elif op.kind == "update":
                    if op.doc_id not in bucket:
                        raise KeyError(f"{op.collection}/{op.doc_id} does not exist")
                    merged = dict(bucket[op.doc_id])
                    merged.update(copy.deepcopy(op.data))
                    bucket[op.doc_id] = merged
                elif op.kind == "delete":
                    bucket.pop(op.doc_id, None)
                else:
                    raise ValueError(f"Unknown write op: {op.kind!r}")
            self._collections = staged

    def ping(self) -> bool:
        return True
