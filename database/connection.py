"""
Database connection management for the migration jobs.
"""
from __future__ import annotations

import logging
import os
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator, Iterator, Mapping

import psycopg2
from psycopg2 import pool
from psycopg2.extensions import make_dsn
from psycopg2.extras import RealDictCursor
from dotenv import load_dotenv

from pipeline.errors import DatabaseConnectionError, SourceOpenError

logger = logging.getLogger(__name__)

# Load environment variables from project root
ROOT_DIR = Path(__file__).resolve().parents[1]
ENV_PATH = ROOT_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH)

ENV_PREFIX = "MIGRATION"

DEFAULTS = {
    "host": "localhost",
    "port": 5432,
    "dbname": "testdb",
    "user": "postgres",
    "password": "root",
}


def _first_set(*values: Any) -> Any:
    """Return the first value that is not None."""
    for value in values:
        if value is not None:
            return value
    return None


class DatabaseConfig:
    """Configuration for the database connection."""

    def __init__(
        self,
        host: str | None = None,
        port: int | str | None = None,
        dbname: str | None = None,
        user: str | None = None,
        password: str | None = None,
        env_prefix: str = ENV_PREFIX,
    ):
        """
        Resolve each setting from the explicit value, then the environment,
        then DEFAULTS.

        Args:
            env_prefix: Prefix for env vars (e.g. MIGRATION_DB_HOST)
        """
        self.host = _first_set(host, os.getenv(f"{env_prefix}_DB_HOST"), DEFAULTS["host"])
        self.database = _first_set(dbname, os.getenv(f"{env_prefix}_DB_NAME"), DEFAULTS["dbname"])
        self.user = _first_set(user, os.getenv(f"{env_prefix}_DB_USER"), DEFAULTS["user"])
        # An empty password is a real setting (trust or peer auth)
        self.password = _first_set(password, os.getenv(f"{env_prefix}_DB_PASSWORD"), DEFAULTS["password"])

        port = _first_set(port, os.getenv(f"{env_prefix}_DB_PORT"), DEFAULTS["port"])
        try:
            self.port = int(port)
        except (TypeError, ValueError):
            raise ValueError(f"Invalid database port for {env_prefix}: {port!r}")

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any], env_prefix: str = ENV_PREFIX) -> "DatabaseConfig":
        """Build a config from a mapping such as the `database` config section."""
        return cls(
            host=values.get("host"),
            port=values.get("port"),
            dbname=values.get("dbname"),
            user=values.get("user"),
            password=values.get("password"),
            env_prefix=env_prefix,
        )

    def get_connection_string(self) -> str:
        """Get psycopg2 connection string."""
        return make_dsn(
            host=self.host,
            port=self.port,
            dbname=self.database,
            user=self.user,
            password=self.password,
        )


class DatabaseManager:
    """Manages database connections with connection pooling."""

    def __init__(self, config: DatabaseConfig, pool_size: int = 2):
        """
        Initialize database manager with connection pool.

        A job holds one connection for its source cursor and writes through
        another, so the pool needs at least two.

        Args:
            config: Database configuration
            pool_size: Number of connections to maintain in pool
        """
        self.config = config
        try:
            self.pool = psycopg2.pool.SimpleConnectionPool(
                1,  # min connections
                pool_size,  # max connections
                config.get_connection_string(),
            )
        except psycopg2.Error as exc:
            raise DatabaseConnectionError(
                f"Failed to connect to {config.database} on {config.host}:{config.port}: {exc}"
            ) from exc

        logger.info("Connected to %s on %s:%s", config.database, config.host, config.port)

    @contextmanager
    def get_cursor(self, dict_cursor: bool = True) -> Generator:
        """
        Get a cursor directly (context manager).

        The transaction is committed when the block exits cleanly and rolled
        back otherwise.

        Args:
            dict_cursor: If True, return RealDictCursor (rows as dicts)
        """
        conn = self.pool.getconn()
        try:
            cursor_factory = RealDictCursor if dict_cursor else None
            cursor = conn.cursor(cursor_factory=cursor_factory)
            try:
                yield cursor
                conn.commit()
            except Exception:
                conn.rollback()
                raise
            finally:
                cursor.close()
        finally:
            self.pool.putconn(conn)

    def execute(
        self, query: str, params: tuple | dict | None = None, fetch: bool = False
    ) -> list | None:
        """
        Execute a query in its own transaction.

        Args:
            query: SQL query to execute
            params: Query parameters (tuple or dict)
            fetch: Whether to fetch and return results

        Returns:
            List of rows if fetch=True, None otherwise
        """
        with self.get_cursor() as cur:
            cur.execute(query, params)
            if fetch:
                return cur.fetchall()
            return None

    def iter_rows(
        self, query: str, params: tuple | dict | None = None, itersize: int = 2000
    ) -> Iterator[dict]:
        """
        Lazily yield the rows of a query through a server-side cursor.

        Rows are fetched from the server `itersize` at a time, so the whole
        result set is never held in memory.

        Raises:
            SourceOpenError: If the query cannot be started or fails
                while rows are being fetched
        """
        conn = self.pool.getconn()
        try:
            name = f"migration_{uuid.uuid4().hex[:12]}"
            cur = conn.cursor(name=name, cursor_factory=RealDictCursor)
            cur.itersize = itersize
            try:
                cur.execute(query, params)
            except psycopg2.Error as exc:
                raise SourceOpenError(f"Could not read source query: {exc}") from exc
            try:
                for row in cur:
                    yield row
            except psycopg2.Error as exc:
                raise SourceOpenError(f"Reading source query failed: {exc}") from exc
            cur.close()
        finally:
            # The pool rolls back the read transaction on return
            self.pool.putconn(conn)

    def close(self) -> None:
        """Close all connections in the pool."""
        if self.pool:
            self.pool.closeall()
            logger.info("Closed connection pool for %s", self.config.database)


@contextmanager
def connect(config: DatabaseConfig) -> Generator[DatabaseManager, None, None]:
    """
    Open a database manager for the duration of a job.

    Usage:
        with connect(DatabaseConfig()) as db:
            rows = db.execute("SELECT 1", fetch=True)
    """
    manager = DatabaseManager(config)
    try:
        yield manager
    finally:
        manager.close()
