"""
横断的関心事パッケージ

このパッケージはログ、エラーハンドリング、Datadog統合を提供します。
error_handler / datadog_middleware はサービス層・設定に依存するため、
モジュールを直接インポートして使用します（データアクセス層からの循環インポート防止）。
"""

from .logger import setup_logger, get_logger

__all__ = [
    "setup_logger",
    "get_logger",
]
