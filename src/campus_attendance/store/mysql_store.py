from __future__ import annotations

import json
import re
from typing import Any, Optional, Sequence

from mysql.connector import errors as mysql_errors

from ..core.exceptions import DocumentExistsError, TransientError
from .base import Document, DocumentStore, Filter, WriteBatch, WriteOp
from .connection import DatabaseConnection, db_cursor

_FIELD_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_SQL_OPERATORS = {"==": "=", "!=": "<>", "<": "<", "<=": "<=", ">": ">", ">=": ">="}


def _json_path(field_name: str) -> str:
    if not _FIELD_RE.match(field_name):
        raise ValueError(f"Invalid document field name: {field_name!r}")
    return f"$.{field_name}"


def _load(raw: Any) -> dict:
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")
    if isinstance(raw, dict):
        return raw
    return json.loads(raw or "{}")


class MySQLDocumentStore(DocumentStore):
    """Documents stored as JSON rows in a single `documents` table.

    The (collection, doc_id) primary key gives `create_if_absent` its atomicity;
    increments are a single UPDATE so concurrent redemptions do not lose counts.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT doc_id, data FROM documents WHERE collection=%s AND doc_id=%s",
                (collection, doc_id),
            )
            row = cur.fetchone()
            if not row:
                return None
            return Document(id=row["doc_id"], data=_load(row["data"]))

    def set(self, collection: str, doc_id: str, data: dict) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            self._exec_set(cur, collection, doc_id, data)

    def create_if_absent(self, collection: str, doc_id: str, data: dict) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "INSERT INTO documents(collection, doc_id, data) VALUES(%s,%s,%s)",
                    (collection, doc_id, json.dumps(data)),
                )
        except mysql_errors.IntegrityError:
            return False
        return True

    def update(self, collection: str, doc_id: str, fields: dict) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._exec_update(cur, collection, doc_id, fields)

    def compare_and_set(self, collection: str, doc_id: str, field_name: str, *, expected, value) -> bool:
        path = _json_path(field_name)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE documents
                SET data = JSON_SET(data, %s, CAST(%s AS JSON))
                WHERE collection=%s AND doc_id=%s AND JSON_EXTRACT(data, %s) = CAST(%s AS JSON)
                """,
                (path, json.dumps(value), collection, doc_id, path, json.dumps(expected)),
            )
            return cur.rowcount > 0

    def increment(self, collection: str, doc_id: str, field_name: str, amount: int = 1) -> bool:
        path = _json_path(field_name)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE documents
                SET data = JSON_SET(data, %s, COALESCE(JSON_EXTRACT(data, %s), 0) + %s)
                WHERE collection=%s AND doc_id=%s
                """,
                (path, path, int(amount), collection, doc_id),
            )
            return cur.rowcount > 0

    def delete(self, collection: str, doc_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM documents WHERE collection=%s AND doc_id=%s", (collection, doc_id))
            return cur.rowcount > 0

    def query(self, collection: str, filters: Sequence[Filter] = ()) -> Sequence[Document]:
        clauses = ["collection=%s"]
        params: list[object] = [collection]
        for f in filters:
            clauses.append(f"JSON_EXTRACT(data, %s) {_SQL_OPERATORS[f.op]} CAST(%s AS JSON)")
            params.extend([_json_path(f.field), json.dumps(f.value)])

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT doc_id, data FROM documents WHERE {where}", tuple(params))
            rows = cur.fetchall() or []
            return [Document(id=r["doc_id"], data=_load(r["data"])) for r in rows]

    def batch(self) -> WriteBatch:
        return WriteBatch(self)

    def commit(self, ops: Sequence[WriteOp]) -> None:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                self._apply(cur, ops)
        except mysql_errors.IntegrityError as e:
            raise DocumentExistsError("A batched insert collided with an existing document") from e

    def _apply(self, cur, ops: Sequence[WriteOp]) -> None:
        for op in ops:
            if op.kind == "set":
                self._exec_set(cur, op.collection, op.doc_id, op.data or {})
            elif op.kind == "create":
                cur.execute(
                    "INSERT INTO documents(collection, doc_id, data) VALUES(%s,%s,%s)",
                    (op.collection, op.doc_id, json.dumps(op.data or {})),
                )
            elif op.kind == "update":
                if not self._exec_update(cur, op.collection, op.doc_id, op.data or {}):
                    raise KeyError(f"{op.collection}/{op.doc_id} does not exist")
            elif op.kind == "delete":
                cur.execute(
                    "DELETE FROM documents WHERE collection=%s AND doc_id=%s",
                    (op.collection, op.doc_id),
                )
            else:
                raise ValueError(f"Unknown write op: {op.kind!r}")

    def ping(self) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute("SELECT 1 AS ok")
                cur.fetchone()
            return True
        except TransientError:
            return False

    @staticmethod
    def _exec_set(cur, collection: str, doc_id: str, data: dict) -> None:
        cur.execute(
            """
            INSERT INTO documents(collection, doc_id, data) VALUES(%s,%s,%s)
            ON DUPLICATE KEY UPDATE data=VALUES(data)
            """,
            (collection, doc_id, json.dumps(data)),
        )

    @staticmethod
    def _exec_update(cur, collection: str, doc_id: str, fields: dict) -> bool:
        cur.execute(
            """
            UPDATE documents
            SET data = JSON_MERGE_PATCH(data, %s)
            WHERE collection=%s AND doc_id=%s
            """,
            (json.dumps(fields), collection, doc_id),
        )
        return cur.rowcount > 0
