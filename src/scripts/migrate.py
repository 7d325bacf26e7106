"""
スキーママイグレーションを実行する

使い方:
    grocery-migrate
    python -m scripts.migrate

終了コード:
    0: 成功（適用済みのみの場合も含む）
    1: 失敗（運用ツールが失敗を検知できるよう非0で終了する）
"""

import sys
from typing import Optional

from infrastructure.logger import get_logger
from repositories.database import Database
from repositories.migrations import SchemaError

logger = get_logger()


def main(database: Optional[Database] = None) -> int:
    database = database or Database.from_settings()
    logger.info("Running database migration", extra={"operation": "migrate"})
    try:
        applied = database.initialize()
    except SchemaError:
        logger.error(
            "Migration failed",
            extra={
                "error_type": "schema_error",
                "severity": "error",
                "operation": "migrate",
            }
        )
        return 1
    finally:
        database.dispose()

    logger.info(
        "Database migration completed successfully",
        extra={
            "operation": "migrate",
            "applied_steps": applied,
        }
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
