"""
Datadog APM統合

目的: Datadog APMトレース送信の有効化
影響範囲: すべてのエンドポイント、すべてのデータベースクエリ
前提条件: ddtrace がインストールされている、DD_TRACE_ENABLED=true の場合のみ有効
"""

from ddtrace import patch
from config.settings import settings
from infrastructure.logger import get_logger
import os

logger = get_logger()


def setup_datadog() -> bool:
    """
    Datadog APMを初期化

    目的:
        - FastAPI / SQLAlchemy / psycopg の自動インストルメンテーション有効化
        - サービス名、環境、バージョンを設定

    前提条件:
        - DD_TRACE_ENABLED が true であること（ローカル・テストでは無効）

    Returns:
        bool: True（有効化した）、False（無効のためスキップ）
    """
    if not settings.DD_TRACE_ENABLED:
        logger.info("Datadog APM disabled")
        return False

    # ddtrace が環境変数から読み取る
    os.environ["DD_SERVICE"] = settings.DD_SERVICE
    os.environ["DD_ENV"] = settings.DD_ENV
    os.environ["DD_VERSION"] = settings.DD_VERSION
    os.environ["DD_AGENT_HOST"] = settings.DD_AGENT_HOST
    os.environ.setdefault("DD_TRACE_AGENT_PORT", "8126")

    patch(fastapi=True, sqlalchemy=True, psycopg=True)

    logger.info(
        "Datadog APM initialized",
        extra={
            "operation": "setup_datadog",
        }
    )
    return True
