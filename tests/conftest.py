"""
pytest 共通 fixtures

tmp_path 上の SQLite ファイルを使用し、テスト毎に独立したデータベースを作成する。
"""

import os

# main / config.settings のインポート前に設定する
os.environ.setdefault("POSTGRES_URL", "sqlite://")
os.environ["DD_TRACE_ENABLED"] = "false"

from typing import Callable, Generator, Optional

import pytest
from fastapi.testclient import TestClient

from main import create_app
from models.grocery_item import GroceryItem
from repositories.database import Database, create_database_engine
from repositories.grocery_items_repository import GroceryItemsRepository


@pytest.fixture
def database(tmp_path) -> Generator[Database, None, None]:
    """未初期化のデータベース"""
    db = Database(create_database_engine(f"sqlite:///{tmp_path / 'grocery.db'}"))
    try:
        yield db
    finally:
        db.dispose()


@pytest.fixture
def initialized_database(database: Database) -> Database:
    """スキーマ初期化済みのデータベース"""
    database.initialize()
    return database


@pytest.fixture
def unreachable_database(tmp_path) -> Generator[Database, None, None]:
    """接続できないデータベース（存在しないディレクトリ上のファイル）"""
    db = Database(create_database_engine(f"sqlite:///{tmp_path / 'missing' / 'grocery.db'}"))
    try:
        yield db
    finally:
        db.dispose()


@pytest.fixture
def client(database: Database) -> TestClient:
    return TestClient(create_app(database))


@pytest.fixture
def seed_item(initialized_database: Database) -> Callable[..., int]:
    """項目を作成して ID を返す"""
    def _seed(is_purchased: bool = False, is_skipped: bool = False) -> int:
        session = initialized_database.session()
        try:
            item = GroceryItemsRepository(session).create(
                is_purchased=is_purchased,
                is_skipped=is_skipped
            )
            return item.id
        finally:
            session.close()

    return _seed


@pytest.fixture
def load_item(database: Database) -> Callable[[int], Optional[GroceryItem]]:
    """データベースから項目を直接読み出す"""
    def _load(item_id: int) -> Optional[GroceryItem]:
        session = database.session()
        try:
            return session.get(GroceryItem, item_id)
        finally:
            session.close()

    return _load
