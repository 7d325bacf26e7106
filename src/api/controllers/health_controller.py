"""
ヘルスチェックコントローラー

目的: ロードバランサ、外形監視からのアプリケーション→データベース疎通確認
影響範囲: ヘルスチェックエンドポイント
前提条件: app.state.database（DB接続）
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from datetime import datetime, timezone
from ddtrace import tracer

from api.dependencies import get_database
from repositories.database import Database

router = APIRouter()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@router.get("/health")
def health_check(database: Database = Depends(get_database)):
    """
    サービスレベルヘルスチェック

    Returns:
        dict: ヘルスチェック結果
            - status: "ok" | "error"
            - database: "connected" | "disconnected"
            - timestamp: ISO 8601形式

    ステータスコード:
        - 200: 正常
        - 503: DB接続失敗時
    """
    span = tracer.current_span()
    if span:
        span.set_tag("operation", "health_check")

    # 接続失敗のエラーログは Database.check_connection が出力する
    if not database.check_connection():
        return JSONResponse(
            status_code=503,
            content={
                "status": "error",
                "database": "disconnected",
                "timestamp": _now()
            }
        )

    return {
        "status": "ok",
        "database": "connected",
        "timestamp": _now()
    }
