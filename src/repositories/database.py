"""
データベース接続管理

目的: PostgreSQLへの接続プール管理とセッション提供
影響範囲: 全Repository、全Controller（FastAPI Dependency Injection）、運用スクリプト
前提条件: DATABASE_URLが正しく設定されている
"""

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session
from typing import Any, Dict, List, Optional
from config.settings import Settings, settings as default_settings
from infrastructure.logger import get_logger
from repositories.migrations import initialize_database

logger = get_logger()


def normalize_database_url(database_url: str) -> str:
    """
    postgres:// 形式のURLを SQLAlchemy が解釈できる postgresql:// に変換

    Args:
        database_url (str): 接続URL

    Returns:
        str: 正規化済みURL
    """
    if database_url.startswith("postgres://"):
        return "postgresql://" + database_url[len("postgres://"):]
    return database_url


def create_database_engine(
    database_url: str,
    production: bool = False,
    pool_size: int = 10,
    max_overflow: int = 0,
    connect_timeout: int = 5,
) -> Engine:
    """
    接続プール付きのエンジンを作成

    目的:
        - PostgreSQL: 接続プール上限、接続タイムアウト、TLS設定
        - SQLite: ローカル開発・テスト用（スレッド間共有を許可）

    Args:
        database_url (str): 接続URL
        production (bool): True の場合 sslmode=require で接続
        pool_size (int): 常時維持する接続数
        max_overflow (int): プール上限超過時の追加接続数
        connect_timeout (int): 接続タイムアウト（秒）

    Returns:
        Engine: SQLAlchemy エンジン

    注意:
        - URL に sslmode が指定されている場合はそちらを優先する
    """
    url = make_url(normalize_database_url(database_url))

    if url.get_backend_name() == "sqlite":
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            echo=False,
        )

    return create_engine(
        url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=True,    # 接続前にヘルスチェック（切断検知）
        echo=False,
        connect_args=build_connect_args(url, production, connect_timeout),
    )


def build_connect_args(url: URL, production: bool, connect_timeout: int) -> Dict[str, Any]:
    """
    PostgreSQL ドライバへ渡す接続引数

    Returns:
        dict: connect_timeout、sslmode（URL に sslmode がある場合は含めない）
    """
    connect_args: Dict[str, Any] = {"connect_timeout": connect_timeout}
    if "sslmode" not in url.query:
        connect_args["sslmode"] = "require" if production else "prefer"
    return connect_args


class Database:
    """
    接続プールとセッションファクトリを保持する

    責務:
        - エンジン（接続プール）の所有
        - セッションの生成
        - スキーマ初期化、疎通確認、プールの解放

    影響範囲:
        - main.py: app.state.database として注入
        - scripts/check_schema.py, scripts/migrate.py

    前提条件:
        - エンジンは create_database_engine() またはテスト側で作成済み
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=engine
        )

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "Database":
        """
        設定からデータベースを構築

        Args:
            settings (Optional[Settings]): 設定（省略時はグローバル設定）

        Returns:
            Database: 構築済みインスタンス
        """
        settings = settings or default_settings
        engine = create_database_engine(
            settings.DATABASE_URL,
            production=settings.is_production,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            connect_timeout=settings.DB_CONNECT_TIMEOUT,
        )
        return cls(engine)

    def session(self) -> Session:
        return self.SessionLocal()

    def initialize(self) -> List[str]:
        """
        スキーマを初期化する（冪等）

        Returns:
            List[str]: 今回適用したマイグレーション名

        Raises:
            SchemaError: 接続失敗、DDL失敗時
        """
        return initialize_database(self.engine)

    def check_connection(self) -> bool:
        """
        データベース接続を確認する（ヘルスチェック用）

        Returns:
            bool: True（接続成功）、False（接続失敗）
        """
        try:
            with self.engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error(
                f"DB connection check failed: {e}",
                exc_info=True,
                extra={
                    "error_type": "db_connection_check_failed",
                    "severity": "error"
                }
            )
            return False

    def dispose(self) -> None:
        """接続プール内の全接続をクローズ"""
        self.engine.dispose()
