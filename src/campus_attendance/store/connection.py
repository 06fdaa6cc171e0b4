from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass

import mysql.connector
from mysql.connector import errors as mysql_errors
from mysql.connector.constants import ClientFlag

from ..core.exceptions import TransientError


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    timeout_seconds: int = 10

    @classmethod
    def from_dict(cls, db_config: dict, *, timeout_seconds: int = 10) -> "DBConfig":
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "campus_attendance")),
            timeout_seconds=int(timeout_seconds),
        )


class DatabaseConnection:
    """DB connection factory handed to the MySQL store.

    Note: We create short-lived connections per operation (safe for simple Flask apps).
    """

    def __init__(self, config: DBConfig):
        self._config = config

    @property
    def config(self) -> DBConfig:
        return self._config

    def connect(self, *, with_database: bool = True):
        kwargs = dict(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            connection_timeout=int(self._config.timeout_seconds),
            # rowcount should report matched rows, not only changed ones
            client_flags=[ClientFlag.FOUND_ROWS],
            use_pure=True,
        )
        if with_database:
            kwargs["database"] = self._config.database
        try:
            return mysql.connector.connect(**kwargs)
        except (mysql_errors.InterfaceError, mysql_errors.OperationalError) as e:
            raise TransientError("Document store is unavailable") from e


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except (mysql_errors.InterfaceError, mysql_errors.OperationalError) as e:
        conn.rollback()
        raise TransientError("Document store timed out") from e
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
