"""
スキーママイグレーション

目的: grocery_items テーブルの作成、不足カラムの追加（冪等）
影響範囲: database.py（Database.initialize）、grocery_items_service.py（リクエスト毎の初期化）、
          scripts/migrate.py、scripts/check_schema.py
前提条件: 接続先データベースが起動している
"""

from dataclasses import dataclass
from typing import Any, Callable, List, Optional
from sqlalchemy import Boolean, false, inspect, text
from sqlalchemy.engine import Connection, Engine, Inspector
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.schema import CreateTable
from sqlalchemy.sql.expression import ColumnElement
from sqlalchemy.types import TypeEngine
from models.grocery_item import GroceryItem
from infrastructure.logger import get_logger

logger = get_logger()

GROCERY_ITEMS_TABLE = GroceryItem.__tablename__

# pg_advisory_xact_lock 用のキー（任意の固定値）
MIGRATION_LOCK_KEY = 7_310_415_001


class SchemaError(Exception):
    """
    スキーマ初期化エラー

    発生条件:
        - データベースに接続できない
        - DDL（CREATE TABLE / ALTER TABLE）が失敗した
    """
    pass


@dataclass(frozen=True)
class MigrationStep:
    """
    マイグレーションの1ステップ

    is_applied は毎回新しい Inspector で評価されるため、
    同一トランザクション内で前のステップが作成したテーブルも参照できる。
    """
    name: str
    is_applied: Callable[[Inspector], bool]
    apply: Callable[[Connection], None]


@dataclass(frozen=True)
class ColumnReport:
    """カラム定義（スキーマ確認用）"""
    name: str
    type: str
    nullable: bool
    default: Optional[str]

    def format(self) -> str:
        line = f"  {self.name}: {self.type}"
        if self.nullable:
            line += " (nullable)"
        if self.default:
            line += f" default: {self.default}"
        return line


def _has_column(inspector: Inspector, table_name: str, column_name: str) -> bool:
    if not inspector.has_table(table_name):
        return False
    return any(column["name"] == column_name for column in inspector.get_columns(table_name))


def _add_column(
    connection: Connection,
    table_name: str,
    column_name: str,
    type_: TypeEngine,
    default: ColumnElement[Any],
) -> None:
    # 型とデフォルト値は方言に合わせてコンパイルする（SQLite では FALSE -> 0）
    # SQLite は ADD COLUMN IF NOT EXISTS 非対応のため、重複時は _apply_step で再判定する
    dialect = connection.dialect
    quote = dialect.identifier_preparer.quote
    if_not_exists = "IF NOT EXISTS " if dialect.name == "postgresql" else ""
    connection.exec_driver_sql(
        f"ALTER TABLE {quote(table_name)} "
        f"ADD COLUMN {if_not_exists}{quote(column_name)} {type_.compile(dialect=dialect)} "
        f"DEFAULT {default.compile(dialect=dialect)}"
    )


def _lock_migrations(connection: Connection) -> None:
    # PostgreSQL: トランザクション終了まで他プロセスのマイグレーションを待たせる
    if connection.dialect.name == "postgresql":
        connection.execute(
            text("SELECT pg_advisory_xact_lock(:key)"),
            {"key": MIGRATION_LOCK_KEY}
        )


def _apply_step(connection: Connection, step: MigrationStep) -> bool:
    """
    ステップを適用する

    Returns:
        bool: True（今回適用した）、False（適用済み、または並行リクエストが先に適用した）
    """
    if step.is_applied(inspect(connection)):
        return False
    try:
        step.apply(connection)
    except SQLAlchemyError:
        if step.is_applied(inspect(connection)):
            logger.info(
                f"Migration step {step.name} was applied concurrently",
                extra={"operation": "initialize_database"}
            )
            return False
        raise
    return True


MIGRATIONS: List[MigrationStep] = [
    MigrationStep(
        name="create_grocery_items_table",
        is_applied=lambda inspector: inspector.has_table(GROCERY_ITEMS_TABLE),
        apply=lambda connection: connection.execute(
            CreateTable(GroceryItem.__table__, if_not_exists=True)
        ),
    ),
    # is_skipped 追加前に作成された既存データベース向け
    MigrationStep(
        name="add_grocery_items_is_skipped",
        is_applied=lambda inspector: _has_column(inspector, GROCERY_ITEMS_TABLE, "is_skipped"),
        apply=lambda connection: _add_column(
            connection, GROCERY_ITEMS_TABLE, "is_skipped", Boolean(), false()
        ),
    ),
]


def initialize_database(engine: Engine, steps: Optional[List[MigrationStep]] = None) -> List[str]:
    """
    スキーマを初期化する（冪等）

    目的:
        - grocery_items テーブルが存在しなければ作成
        - 既存テーブルに不足しているカラムを追加

    影響範囲:
        - grocery_items_service.py: リクエスト毎に呼び出される
        - scripts/migrate.py: マイグレーションコマンド

    前提条件:
        - データベースが起動している

    Args:
        engine (Engine): SQLAlchemy エンジン
        steps (Optional[List[MigrationStep]]): 適用するステップ（省略時は MIGRATIONS）

    Returns:
        List[str]: 今回適用したステップ名（適用済みのみの場合は空リスト）

    Raises:
        SchemaError: 接続失敗、DDL失敗時

    注意:
        - 全ステップを1トランザクションで適用する（失敗時は全体がロールバック）
        - 並行リクエストから同時に呼ばれても失敗しない
          （PostgreSQL: advisory lock で直列化、その他: 適用失敗時に再判定して適用済みならスキップ）
    """
    steps = MIGRATIONS if steps is None else steps
    applied: List[str] = []

    try:
        with engine.begin() as connection:
            _lock_migrations(connection)
            for step in steps:
                if _apply_step(connection, step):
                    applied.append(step.name)
    except SQLAlchemyError as e:
        logger.error(
            f"Schema initialization failed: {e}",
            exc_info=True,
            extra={
                "error_type": "schema_error",
                "severity": "error",
                "applied_steps": applied,
            }
        )
        raise SchemaError("Schema initialization failed") from e

    if applied:
        logger.info(
            f"Applied {len(applied)} migration step(s)",
            extra={
                "operation": "initialize_database",
                "applied_steps": applied,
            }
        )

    return applied


def describe_columns(engine: Engine, table_name: str = GROCERY_ITEMS_TABLE) -> List[ColumnReport]:
    """
    テーブルのカラム定義を取得する（定義順）

    Args:
        engine (Engine): SQLAlchemy エンジン
        table_name (str): テーブル名

    Returns:
        List[ColumnReport]: カラム定義（テーブルが存在しない場合は空リスト）

    Raises:
        SchemaError: 接続失敗時
    """
    try:
        with engine.connect() as connection:
            inspector = inspect(connection)
            if not inspector.has_table(table_name):
                return []
            return [
                ColumnReport(
                    name=column["name"],
                    type=str(column["type"]),
                    nullable=bool(column["nullable"]),
                    default=column.get("default"),
                )
                for column in inspector.get_columns(table_name)
            ]
    except SQLAlchemyError as e:
        raise SchemaError(f"Failed to inspect table {table_name}") from e
