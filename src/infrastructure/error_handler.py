"""
エラーハンドリングミドルウェア

目的: 例外の一元キャッチ、エラーログ出力、適切なHTTPステータス返却
影響範囲: すべてのエンドポイント
前提条件: logger.py（構造化ログ）、ddtrace（Datadog APM）

レスポンス形式:
    {"error": "<クライアント向けメッセージ>"}
    内部エラーの詳細（SQL、接続先情報など）はログのみに出力し、レスポンスには含めない。
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from ddtrace import tracer
from infrastructure.logger import get_logger
from services.grocery_items_service import (
    ItemNotFoundError,
    ItemOperationError,
    ItemValidationError,
)

logger = get_logger()

INVALID_REQUEST_MESSAGE = "Invalid request"
INVALID_ITEM_ID_MESSAGE = "Invalid item ID"
NOT_FOUND_MESSAGE = "Item not found"
INTERNAL_ERROR_MESSAGE = "Internal server error"


def _tag_error_span(error_type: str, message: str) -> None:
    # Datadog APM にエラートレースを送信
    span = tracer.current_span()
    if span:
        span.set_tag("error", True)
        span.set_tag("error.type", error_type)
        span.set_tag("error.message", message)


def register_error_handlers(app: FastAPI) -> None:
    """
    FastAPIアプリケーションにエラーハンドラを登録

    目的:
        - 例外の一元キャッチ
        - エラーログ出力（構造化ログ、JSON形式）
        - 適切なHTTPステータスコードとエラーメッセージを返却

    Args:
        app (FastAPI): FastAPIアプリケーションインスタンス
    """

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError):
        """
        不正なJSON、パスパラメータの型不一致

        ステータスコード: 400 Bad Request
        """
        logger.warning(
            f"Request validation error: {exc.errors()}",
            extra={
                "error_type": "request_validation_error",
                "severity": "warning",
                "path": str(request.url)
            }
        )

        if any(tuple(error.get("loc", ()))[:1] == ("path",) for error in exc.errors()):
            message = INVALID_ITEM_ID_MESSAGE
        else:
            message = INVALID_REQUEST_MESSAGE

        return JSONResponse(status_code=400, content={"error": message})

    @app.exception_handler(ItemValidationError)
    async def item_validation_error_handler(request: Request, exc: ItemValidationError):
        """
        リクエストボディ検証エラー

        ステータスコード: 400 Bad Request
        """
        logger.warning(
            f"Validation error: {exc}",
            extra={
                "error_type": "validation_error",
                "severity": "warning",
                "path": str(request.url)
            }
        )

        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(ItemNotFoundError)
    async def item_not_found_error_handler(request: Request, exc: ItemNotFoundError):
        """
        項目未存在エラー

        ステータスコード: 404 Not Found
        """
        logger.warning(
            f"Item not found: {exc}",
            extra={
                "error_type": "item_not_found",
                "severity": "warning",
                "path": str(request.url)
            }
        )

        return JSONResponse(status_code=404, content={"error": NOT_FOUND_MESSAGE})

    @app.exception_handler(ItemOperationError)
    async def item_operation_error_handler(request: Request, exc: ItemOperationError):
        """
        データベース操作失敗（接続失敗、スキーマ初期化失敗、SQLエラー）

        ステータスコード: 500 Internal Server Error
        """
        cause = exc.__cause__ or exc
        logger.error(
            f"{exc}: {cause}",
            exc_info=cause,
            extra={
                "error_type": type(cause).__name__,
                "severity": "error",
                "path": str(request.url)
            }
        )
        _tag_error_span(type(cause).__name__, str(exc))

        return JSONResponse(status_code=500, content={"error": str(exc)})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """
        HTTPExceptionハンドラ（未定義ルート、許可されていないメソッド等）

        ステータスコード: 例外で指定されたステータスコード
        """
        logger.warning(
            f"HTTP exception: {exc.detail}",
            extra={
                "error_type": "http_exception",
                "severity": "warning",
                "status_code": exc.status_code,
                "path": str(request.url)
            }
        )

        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """
        一般例外ハンドラ（予期しない例外）

        ステータスコード: 500 Internal Server Error
        """
        logger.error(
            f"Unexpected error: {exc}",
            exc_info=True,
            extra={
                "error_type": "unexpected_error",
                "severity": "error",
                "path": str(request.url)
            }
        )
        _tag_error_span("unexpected_error", str(exc))

        return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR_MESSAGE})
