"""
アプリケーション設定管理

目的: 環境変数から設定を一元管理し、アプリケーション全体で使用
影響範囲: 全モジュール（database.py, logger.py, datadog_middleware.py, scripts/*）
前提条件: 環境変数が設定されていること（.env またはデプロイ先の環境設定）
"""

import os


TRUE_VALUES = ("1", "true", "yes", "on")


class Settings:
    """
    アプリケーション設定クラス

    責務:
        - 環境変数から設定を読み込み
        - デフォルト値の提供
        - 設定の型安全な取得

    影響範囲:
        - database.py: DATABASE_URL, DB_POOL_SIZE, DB_MAX_OVERFLOW, DB_CONNECT_TIMEOUT
        - logger.py: LOG_LEVEL
        - datadog_middleware.py: DD_SERVICE, DD_ENV, DD_VERSION, DD_TRACE_ENABLED

    前提条件:
        - POSTGRES_URL / DATABASE_URL または DB_HOST/DB_PORT/DB_USER/DB_PASSWORD/DB_NAME
        - APP_ENV: production の場合 TLS 必須で接続
    """

    def __init__(self) -> None:
        # Database設定
        self.DATABASE_URL: str = self._build_database_url()
        self.APP_ENV: str = os.getenv("APP_ENV", "development")
        self.DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "10"))
        self.DB_MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", "0"))
        self.DB_CONNECT_TIMEOUT: int = int(os.getenv("DB_CONNECT_TIMEOUT", "5"))

        # Datadog設定
        self.DD_SERVICE: str = os.getenv("DD_SERVICE", "grocery-api")
        self.DD_ENV: str = os.getenv("DD_ENV", "local")
        self.DD_VERSION: str = os.getenv("DD_VERSION", "1.0.0")
        self.DD_AGENT_HOST: str = os.getenv("DD_AGENT_HOST", "datadog-agent")
        self.DD_TRACE_ENABLED: bool = os.getenv("DD_TRACE_ENABLED", "false").lower() in TRUE_VALUES

        # アプリケーション設定
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    @staticmethod
    def _build_database_url() -> str:
        # POSTGRES_URL > DATABASE_URL > 個別の DB_* 変数の順で採用
        for name in ("POSTGRES_URL", "DATABASE_URL"):
            if os.getenv(name):
                return os.getenv(name)

        db_host = os.getenv("DB_HOST", "localhost")
        db_port = os.getenv("DB_PORT", "5432")
        db_user = os.getenv("DB_USER", "grocery")
        db_password = os.getenv("DB_PASSWORD", "grocery")
        db_name = os.getenv("DB_NAME", "grocery")

        return f"postgresql://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}"

    @property
    def is_production(self) -> bool:
        """
        本番環境かどうか

        Returns:
            bool: APP_ENV が production の場合 True（TLS 必須で接続）
        """
        return self.APP_ENV.lower() == "production"


# シングルトンインスタンス
settings = Settings()
