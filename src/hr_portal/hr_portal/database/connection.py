from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import ClassVar, Optional

from mysql.connector import pooling

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    charset: str = "utf8mb4"
    pool_size: int = 5

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        """Build from a settings ``DB_CONFIG`` dict; missing keys fall back to local defaults."""
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "hr_portal")),
            pool_size=int(db_config.get("pool_size", 5)),
        )

    def describe(self) -> str:
        return f"{self.user}@{self.host}:{self.port}/{self.database}"


class DatabaseConnection:
    """Process-wide pool of MySQL connections, one per distinct ``DBConfig``.

    Repositories borrow a connection per operation through ``connect()``;
    closing it hands it back to the pool.
    """

    _instances: ClassVar[dict[DBConfig, "DatabaseConnection"]] = {}
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, config: DBConfig):
        self._config = config
        self._pool: Optional[pooling.MySQLConnectionPool] = None

    @property
    def config(self) -> DBConfig:
        return self._config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        with cls._lock:
            instance = cls._instances.get(config)
            if instance is None:
                instance = cls(config)
                cls._instances[config] = instance
            return instance

    def _get_pool(self) -> pooling.MySQLConnectionPool:
        # created lazily so building the app never needs a reachable server
        with self._lock:
            if self._pool is None:
                logger.info("Opening MySQL pool (%s connections) to %s", self._config.pool_size, self._config.describe())
                self._pool = pooling.MySQLConnectionPool(
                    pool_name=f"hr_portal_{self._config.database}",
                    pool_size=self._config.pool_size,
                    host=self._config.host,
                    port=self._config.port,
                    user=self._config.user,
                    password=self._config.password,
                    database=self._config.database,
                    charset=self._config.charset,
                    autocommit=False,
                )
            return self._pool

    def connect(self):
        return self._get_pool().get_connection()
