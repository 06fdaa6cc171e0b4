from __future__ import annotations

import logging

from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

DOCUMENTS_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS documents (
    collection VARCHAR(64) NOT NULL,
    doc_id VARCHAR(191) NOT NULL,
    data JSON NOT NULL,
    PRIMARY KEY (collection, doc_id)
) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4 COLLATE=utf8mb4_unicode_ci
"""


def ensure_database_exists(conn_factory: DatabaseConnection) -> None:
    conn = conn_factory.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{conn_factory.config.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(conn_factory: DatabaseConnection) -> None:
    ensure_database_exists(conn_factory)

    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        cur.execute(DOCUMENTS_TABLE_SQL)
        conn.commit()
    finally:
        conn.close()
    logger.info("documents table ready in %s", conn_factory.config.database)


def list_tables(conn_factory: DatabaseConnection) -> list[str]:
    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
