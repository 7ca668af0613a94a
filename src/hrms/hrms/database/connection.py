from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from mysql.connector import pooling

from ..core.constants import DEFAULT_POOL_SIZE


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    pool_size: int = DEFAULT_POOL_SIZE
    pool_name: str = "hrms_pool"


class DatabaseConnection:
    """Process-wide connection pool.

    Created once at startup by the container and handed to every repository.
    Connections checked out with connect() go back to the pool on close().
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config
        self._pool: Optional[pooling.MySQLConnectionPool] = None

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    @property
    def config(self) -> DBConfig:
        return self._config

    def _get_pool(self) -> pooling.MySQLConnectionPool:
        # Lazy so the app can start (and tests can build a container) without a live server.
        if self._pool is None:
            self._pool = pooling.MySQLConnectionPool(
                pool_name=self._config.pool_name,
                pool_size=int(self._config.pool_size),
                pool_reset_session=True,
                host=self._config.host,
                port=int(self._config.port),
                user=self._config.user,
                password=self._config.password,
                database=self._config.database,
                autocommit=False,
            )
        return self._pool

    def connect(self):
        return self._get_pool().get_connection()
