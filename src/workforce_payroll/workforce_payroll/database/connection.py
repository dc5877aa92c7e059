from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import mysql.connector


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    connection_timeout: int = 10
    # Seconds a single read or write may block; 0 disables.
    query_timeout: int = 30

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "DBConfig":
        """Build from a settings `DB_CONFIG` dict; missing keys fall back to local defaults."""

        return cls(
            host=str(values.get("host", "localhost")),
            port=int(values.get("port", 3306)),
            user=str(values.get("user", "root")),
            password=str(values.get("password", "")),
            database=str(values.get("database", "workforce_payroll")),
            connection_timeout=int(values.get("connection_timeout", 10)),
            query_timeout=int(values.get("query_timeout", 30)),
        )

    def describe(self) -> str:
        """Connection target without the password, for log lines."""
        return f"{self.user}@{self.host}:{self.port}/{self.database}"


class DatabaseConnection:
    """Process-wide connection factory, one per database target.

    Connections are short-lived, opened per operation. The payroll batch
    runs on a thread pool and every worker opens its own.
    """

    _instances: dict = {}
    _lock = threading.Lock()

    def __init__(self, config: DBConfig):
        self._config = config

    @property
    def config(self) -> DBConfig:
        return self._config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        with cls._lock:
            instance: Optional[DatabaseConnection] = cls._instances.get(config)
            if instance is None:
                instance = DatabaseConnection(config)
                cls._instances[config] = instance
            return instance

    def connect(self, *, with_database: bool = True):
        kwargs = dict(
            host=self._config.host,
            port=self._config.port,
            user=self._config.user,
            password=self._config.password,
            connection_timeout=self._config.connection_timeout,
        )
        if self._config.query_timeout > 0:
            kwargs["read_timeout"] = self._config.query_timeout
            kwargs["write_timeout"] = self._config.query_timeout
        if with_database:
            kwargs["database"] = self._config.database
        return mysql.connector.connect(**kwargs)
