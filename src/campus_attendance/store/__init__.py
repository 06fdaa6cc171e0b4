from .base import Document, DocumentStore, Filter, WriteBatch, WriteOp, where
from .memory import InMemoryDocumentStore

__all__ = [
    "Document",
    "DocumentStore",
    "Filter",
    "InMemoryDocumentStore",
    "WriteBatch",
    "WriteOp",
    "where",
]
