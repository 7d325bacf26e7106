"""
データアクセス層パッケージ

このパッケージは接続プール管理、スキーママイグレーション、grocery_items の更新操作を提供します。
"""

from .migrations import (
    MIGRATIONS,
    ColumnReport,
    MigrationStep,
    SchemaError,
    describe_columns,
    initialize_database,
)
from .database import Database, create_database_engine, normalize_database_url
from .grocery_items_repository import GroceryItemsRepository, QueryError

__all__ = [
    "MIGRATIONS",
    "ColumnReport",
    "MigrationStep",
    "SchemaError",
    "describe_columns",
    "initialize_database",
    "Database",
    "create_database_engine",
    "normalize_database_url",
    "GroceryItemsRepository",
    "QueryError",
]
