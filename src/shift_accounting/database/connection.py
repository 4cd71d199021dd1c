from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional

import mysql.connector


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str


class DatabaseConnection:
    """Process-wide factory for short-lived MySQL connections.

    Ledger mutations open one connection each and commit or roll back before
    closing it, so a connection is never shared between two transactions.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = cls(config)
        return cls._instance

    def connect(self):
        # Explicit transactions: db_cursor decides between commit and rollback.
        return mysql.connector.connect(autocommit=False, **asdict(self._config))
