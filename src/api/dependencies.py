"""
共通 API 依存関係

目的: app.state に注入された Database からセッションを提供（FastAPI Dependency Injection）
影響範囲: 全Controller
前提条件: main.create_app() で app.state.database が設定されている
"""

from typing import Generator
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from repositories.database import Database


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_db(database: Database = Depends(get_database)) -> Generator[Session, None, None]:
    """
    データベースセッションを取得する

    リクエスト終了時に自動的にセッションをクローズする。

    Yields:
        Session: SQLAlchemy セッション

    使用例:
        @router.patch("/api/items")
        def update_item(db: Session = Depends(get_db)):
            ...
    """
    db = database.session()
    try:
        yield db
    finally:
        db.close()
