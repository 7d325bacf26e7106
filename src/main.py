"""
FastAPI アプリケーションエントリーポイント

目的: FastAPIアプリケーション初期化、ルーティング設定、Datadog APM統合
影響範囲: アプリケーション全体
前提条件: 全モジュールが実装されている
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from infrastructure.datadog_middleware import setup_datadog
from infrastructure.error_handler import register_error_handlers
from infrastructure.logger import get_logger
from repositories.database import Database

# Controllersインポート
from api.controllers import health_controller
from api.controllers import items_controller

# Datadog APM初期化（アプリケーション起動前に実行）
setup_datadog()

# ロガー初期化
logger = get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    アプリケーション起動・停止時処理

    スキーマ初期化はリクエスト毎に行うため、起動時には実行しない。
    停止時に接続プールを解放する。
    """
    logger.info("Application starting up")
    yield
    logger.info("Application shutting down")
    app.state.database.dispose()


def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    FastAPIアプリケーションを構築

    Args:
        database (Optional[Database]): 注入するデータベース（省略時は設定から構築）

    Returns:
        FastAPI: 構築済みアプリケーション
    """
    app = FastAPI(
        title="grocery-api",
        description="Grocery list API - purchase/skip status updates",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # 接続プール（Dependency Injection 用）
    app.state.database = database or Database.from_settings()

    # 画面（データ管理UI）は別オリジンから呼び出される
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    app.include_router(health_controller.router, tags=["Health Check"])
    app.include_router(items_controller.router, tags=["Items"])

    @app.get("/")
    def root():
        """
        ルートエンドポイント

        Returns:
            dict: アプリケーション情報
        """
        return {
            "message": "grocery-api is running",
            "version": "1.0.0",
            "docs": "/docs"
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    # Uvicorn起動（開発環境用）
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8080,
        reload=True,  # 開発環境のみ
        log_level="info"
    )
