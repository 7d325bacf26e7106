"""
買い物リスト項目コントローラー

目的: 購入/スキップ状態の更新、項目状態の取得
影響範囲: APIエンドポイント（/api/items）
前提条件: GroceryItemsService
"""

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, ValidationError
from typing import Any, Optional, Type, TypeVar
from ddtrace import tracer

from api.dependencies import get_db
from services.grocery_items_service import (
    STATUS_REQUIRED_MESSAGE,
    GroceryItemsService,
    ItemValidationError,
)
from infrastructure.logger import get_logger

logger = get_logger()
router = APIRouter()

PURCHASE_STATUS_REQUIRED_MESSAGE = "itemId (number) and isPurchased (boolean) are required"
UPDATED_MESSAGE = "Item updated successfully"

RequestModel = TypeVar("RequestModel", bound=BaseModel)


class ItemPurchaseStatusRequest(BaseModel):
    """購入状態更新リクエスト（型変換なしで検証）"""
    model_config = ConfigDict(populate_by_name=True)

    item_id: StrictInt = Field(..., alias="itemId", description="項目ID")
    is_purchased: StrictBool = Field(..., alias="isPurchased", description="購入済みかどうか")


class ItemStatusRequest(BaseModel):
    """購入/スキップ状態更新リクエスト"""
    model_config = ConfigDict(populate_by_name=True)

    is_purchased: Optional[StrictBool] = Field(None, alias="isPurchased", description="購入済みかどうか")
    is_skipped: Optional[StrictBool] = Field(None, alias="isSkipped", description="スキップしたかどうか")


class MessageResponse(BaseModel):
    """更新成功レスポンス"""
    message: str


class ItemResponse(BaseModel):
    """項目状態レスポンス"""
    id: int
    isPurchased: bool
    isSkipped: bool


def parse_body(model: Type[RequestModel], body: Any, error_message: str) -> RequestModel:
    """
    リクエストボディを検証する

    FastAPI 標準の 422 ではなく、固定メッセージの 400 を返すために
    エンドポイント内で検証する。

    Raises:
        ItemValidationError: 検証失敗時
    """
    try:
        return model.model_validate(body)
    except ValidationError as e:
        raise ItemValidationError(error_message) from e


def _tag_span(operation: str, item_id: Optional[int] = None) -> None:
    # Datadog カスタムタグ設定
    span = tracer.current_span()
    if span:
        span.set_tag("operation", operation)
        if item_id is not None:
            span.set_tag("item.id", item_id)


@router.patch("/api/items", response_model=MessageResponse)
def update_item_purchase_status(body: Any = Body(None), db: Session = Depends(get_db)):
    """
    購入状態更新

    目的:
        - 買い物中のチェック操作（購入済み/未購入の切り替え）

    Args:
        body: {"itemId": int, "isPurchased": bool}
        db (Session): データベースセッション

    Returns:
        MessageResponse: {"message": "Item updated successfully"}

    Raises:
        ItemValidationError(400): itemId が整数でない、isPurchased が真偽値でない
        ItemNotFoundError(404): 項目未存在
        ItemOperationError(500): データベース操作失敗
    """
    request = parse_body(ItemPurchaseStatusRequest, body, PURCHASE_STATUS_REQUIRED_MESSAGE)
    _tag_span("update_purchase_status", request.item_id)

    GroceryItemsService(db).update_purchase_status(request.item_id, request.is_purchased)

    logger.info(
        f"Item {request.item_id} purchase status set to {request.is_purchased}",
        extra={
            "item_id": request.item_id,
            "operation": "update_purchase_status"
        }
    )

    return {"message": UPDATED_MESSAGE}


@router.patch("/api/items/{item_id}", response_model=MessageResponse)
def update_item_status(item_id: int, body: Any = Body(None), db: Session = Depends(get_db)):
    """
    購入/スキップ状態更新

    Args:
        item_id (int): 項目ID
        body: {"isPurchased"?: bool, "isSkipped"?: bool}
        db (Session): データベースセッション

    Returns:
        MessageResponse: {"message": "Item updated successfully"}

    Raises:
        ItemValidationError(400): フラグ未指定、真偽値以外
        ItemNotFoundError(404): 項目未存在
        ItemOperationError(500): データベース操作失敗
    """
    request = parse_body(ItemStatusRequest, body, STATUS_REQUIRED_MESSAGE)
    _tag_span("update_item_status", item_id)

    GroceryItemsService(db).update_item_status(
        item_id,
        is_purchased=request.is_purchased,
        is_skipped=request.is_skipped
    )

    logger.info(
        f"Item {item_id} status updated",
        extra={
            "item_id": item_id,
            "operation": "update_item_status"
        }
    )

    return {"message": UPDATED_MESSAGE}


@router.get("/api/items/{item_id}", response_model=ItemResponse)
def get_item(item_id: int, db: Session = Depends(get_db)):
    """
    項目状態取得

    Raises:
        ItemNotFoundError(404): 項目未存在
        ItemOperationError(500): データベース操作失敗
    """
    _tag_span("get_item", item_id)

    item = GroceryItemsService(db).get_item(item_id)
    return item.to_dict()
