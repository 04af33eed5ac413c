"""Connection configuration and the connection provider.

ConnectionConfig is a Pydantic model for type-safe connection config.
ConnectionManager selects an adapter once, by engine identifier, and hands out
one lazily opened logical connection.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any
from urllib.parse import urlsplit

from pydantic import BaseModel, field_validator

from row_orm.core.enums import DatabaseBackend
from row_orm.core.exceptions import UnsupportedDialectError

logger = logging.getLogger(__name__)


class ConnectionConfig(BaseModel):
    """Configuration for database connections."""

    driver: str
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str = ""
    url: str | None = None
    extra: dict[str, Any] = {}

    @field_validator("driver")
    @classmethod
    def _normalize_driver(cls, value: str) -> str:
        return value.strip().lower()

    @property
    def backend(self) -> DatabaseBackend:
        """The backend named by ``driver``.

        Raises:
            UnsupportedDialectError: If the identifier is not supported.
        """
        return resolve_backend(self.driver)

    @classmethod
    def from_properties(cls, properties: Mapping[str, str]) -> ConnectionConfig:
        """Build a config from ``database.*`` property keys.

        Recognised keys: ``database.type``, ``database.url``,
        ``database.username``, ``database.password`` and ``database.name``.
        A JDBC-style URL (``jdbc:postgresql://host:5432/app``) is split into
        host, port and database.
        """
        driver = properties.get("database.type", "")
        url = properties.get("database.url")
        fields: dict[str, Any] = {
            "driver": driver,
            "user": properties.get("database.username"),
            "password": properties.get("database.password"),
            "database": properties.get("database.name", ""),
        }
        if url:
            parsed = urlsplit(url.removeprefix("jdbc:"))
            if parsed.hostname:
                fields["host"] = parsed.hostname
                fields["port"] = parsed.port
                fields["database"] = parsed.path.lstrip("/") or fields["database"]
            elif parsed.scheme == "sqlite":
                fields["database"] = parsed.path
            else:
                fields["url"] = url.removeprefix("jdbc:")
        return cls(**fields)


def resolve_backend(identifier: str) -> DatabaseBackend:
    """Map an engine identifier to a DatabaseBackend."""
    try:
        return DatabaseBackend(identifier.strip().lower())
    except ValueError:
        raise UnsupportedDialectError(identifier) from None


# Adapter module mapping: backend → (module_path, class_name)
_ADAPTER_MAP: dict[DatabaseBackend, tuple[str, str]] = {
    DatabaseBackend.SQLITE: ("row_orm.adapters.sqlite", "SqliteAdapter"),
    DatabaseBackend.POSTGRESQL: ("row_orm.adapters.postgresql", "PostgresqlAdapter"),
    DatabaseBackend.MYSQL: ("row_orm.adapters.mysql", "MysqlAdapter"),
}


def _load_adapter(backend: DatabaseBackend) -> Any:
    """Load the adapter for a backend."""
    module_path, cls_name = _ADAPTER_MAP[backend]
    module = importlib.import_module(module_path)
    return getattr(module, cls_name)()


class ConnectionManager:
    """Connection provider over a single logical connection.

    The connection is opened on first use and reused until ``close()``.
    """

    def __init__(self, config: ConnectionConfig) -> None:
        self.config = config
        self.backend = config.backend
        self._adapter = _load_adapter(self.backend)
        self._connection: Any = None

    @property
    def adapter(self) -> Any:
        return self._adapter

    def open(self) -> Any:
        """Open the connection if it is not open yet and return it."""
        if self._connection is None:
            logger.debug("Opening %s connection", self.backend.value)
            self._connection = self._adapter.connect(self.config)
        return self._connection

    @contextmanager
    def get_connection(self) -> Iterator[Any]:
        """Get the logical connection as a context manager."""
        yield self.open()

    def close(self) -> None:
        """Close the connection."""
        if self._connection is not None:
            self._adapter.close(self._connection)
            self._connection = None

    def __enter__(self) -> ConnectionManager:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
