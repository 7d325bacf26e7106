"""
構造化ログ出力

目的: JSON形式ログ出力、Datadog APM連携、トレースID自動付与
影響範囲: すべてのモジュール
前提条件: LOG_LEVEL環境変数が設定されている
"""

import logging
import json
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from ddtrace import tracer
from config.settings import settings


# extra で渡された場合にそのまま出力するフィールド
EXTRA_FIELDS = (
    "item_id",
    "operation",
    "error_type",
    "severity",
    "status_code",
    "path",
    "applied_steps",
)


class JSONFormatter(logging.Formatter):
    """
    JSON形式のログフォーマッター

    責務:
        - ログレコードをJSON形式に変換
        - Datadog APM トレースID、スパンIDを自動付与
        - ISO 8601形式のタイムスタンプ

    前提条件:
        - ddtrace がインストールされている（トレース無効時はID付与なし）
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        ログレコードをJSON形式に変換

        Args:
            record (logging.LogRecord): ログレコード

        Returns:
            str: JSON形式のログ文字列

        出力例:
            {
                "timestamp": "2026-10-19T10:00:00Z",
                "level": "INFO",
                "message": "Item 5 purchase status set to True",
                "item_id": 5,
                "operation": "update_purchase_status"
            }
        """
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "service": settings.DD_SERVICE,
            "env": settings.DD_ENV,
        }

        # Datadog APM トレースID、スパンID を付与
        span = tracer.current_span()
        if span:
            log_data["dd.trace_id"] = span.trace_id
            log_data["dd.span_id"] = span.span_id

        for field in EXTRA_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        if record.levelname == "ERROR":
            log_data["status"] = "error"

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


def setup_logger(name: str = "grocery-api") -> logging.Logger:
    """
    構造化ログを出力するロガーをセットアップ

    Args:
        name (str): ロガー名（デフォルト: "grocery-api"）

    Returns:
        logging.Logger: 設定済みロガー
    """
    level = getattr(logging, settings.LOG_LEVEL, logging.INFO)

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # 既存のハンドラをクリア（重複防止）
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)

    # ルートロガーと重複しないようにする
    logger.propagate = False

    return logger


# グローバルロガーインスタンス
_logger = None


def get_logger() -> logging.Logger:
    """
    グローバルロガーを取得（シングルトン）

    Returns:
        logging.Logger: 設定済みロガー
    """
    global _logger
    if _logger is None:
        _logger = setup_logger()
    return _logger
