"""
grocery_items テーブルのカラム定義を表示する

使い方:
    grocery-check-schema
    python -m scripts.check_schema

終了コード:
    0: 表示成功
    1: テーブル未作成、またはデータベースに接続できない
"""

import sys
from typing import Optional

from infrastructure.logger import get_logger
from repositories.database import Database
from repositories.migrations import GROCERY_ITEMS_TABLE, SchemaError, describe_columns

logger = get_logger()


def main(database: Optional[Database] = None) -> int:
    database = database or Database.from_settings()
    try:
        columns = describe_columns(database.engine, GROCERY_ITEMS_TABLE)
    except SchemaError as e:
        logger.error(
            f"Schema check failed: {e.__cause__ or e}",
            extra={
                "error_type": "schema_error",
                "severity": "error",
                "operation": "check_schema",
            }
        )
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        database.dispose()

    if not columns:
        print(f"{GROCERY_ITEMS_TABLE} table does not exist", file=sys.stderr)
        return 1

    print(f"{GROCERY_ITEMS_TABLE} table columns:")
    for column in columns:
        print(column.format())
    return 0


if __name__ == "__main__":
    sys.exit(main())
