"""
買い物リスト項目ビジネスロジックサービス

目的: 購入/スキップ状態の更新、ビジネスルール適用、エラーの公開用メッセージへの変換
影響範囲: items_controller.py
前提条件: GroceryItemsRepository が提供されている
"""

from sqlalchemy.orm import Session
from repositories.grocery_items_repository import GroceryItemsRepository, QueryError
from repositories.migrations import SchemaError, initialize_database
from models.grocery_item import GroceryItem
from typing import Optional


class ItemValidationError(ValueError):
    """
    リクエスト検証エラー（400）

    発生条件:
        - itemId が整数でない、isPurchased / isSkipped が真偽値でない
        - 更新対象のフラグが1つも指定されていない
    """
    pass


class ItemNotFoundError(Exception):
    """
    項目未存在エラー（404）

    発生条件:
        - 指定されたIDの項目が存在しない
    """
    pass


class ItemOperationError(Exception):
    """
    データベース操作失敗エラー（500）

    メッセージはクライアントにそのまま返すため、内部情報を含めない。
    原因となった SchemaError / QueryError は __cause__ に保持される。
    """
    pass


UPDATE_FAILED_MESSAGE = "Failed to update item"
FETCH_FAILED_MESSAGE = "Failed to fetch item"
STATUS_REQUIRED_MESSAGE = "Either isPurchased (boolean) or isSkipped (boolean) is required"


class GroceryItemsService:
    """
    買い物リスト項目ビジネスロジックサービス

    責務:
        - スキーマ初期化（リクエスト毎、冪等）
        - 購入/スキップフラグの更新
        - 未存在IDの検出（404）

    影響範囲:
        - items_controller.py（APIエンドポイント）

    前提条件:
        - セッションがエンジンにバインドされている
    """

    def __init__(self, db: Session):
        """
        Service初期化

        Args:
            db (Session): SQLAlchemy セッション
        """
        self.db = db
        self.repository = GroceryItemsRepository(db)

    def ensure_schema(self) -> None:
        initialize_database(self.db.get_bind())

    def get_item(self, item_id: int) -> GroceryItem:
        """
        ID別に項目を取得

        Args:
            item_id (int): 項目ID

        Returns:
            GroceryItem: 項目

        Raises:
            ItemNotFoundError: 項目が存在しない場合
            ItemOperationError: データベース操作失敗時
        """
        try:
            self.ensure_schema()
            item = self.repository.find_by_id(item_id)
        except (SchemaError, QueryError) as e:
            raise ItemOperationError(FETCH_FAILED_MESSAGE) from e

        if item is None:
            raise ItemNotFoundError(f"Item {item_id} not found")
        return item

    def update_purchase_status(self, item_id: int, is_purchased: bool) -> None:
        """
        購入済みフラグを更新

        目的: 買い物中のチェック操作
        影響範囲: items_controller.py（PATCH /api/items）

        Args:
            item_id (int): 項目ID
            is_purchased (bool): 購入済みかどうか

        Raises:
            ItemNotFoundError: 項目が存在しない場合
            ItemOperationError: データベース操作失敗時
        """
        self.update_item_status(item_id, is_purchased=is_purchased)

    def update_item_status(
        self,
        item_id: int,
        is_purchased: Optional[bool] = None,
        is_skipped: Optional[bool] = None
    ) -> None:
        """
        購入済み/スキップフラグを更新

        目的: 買い物中のチェック操作、スキップ操作
        影響範囲: items_controller.py（PATCH /api/items, PATCH /api/items/{item_id}）

        Args:
            item_id (int): 項目ID
            is_purchased (Optional[bool]): 購入済みかどうか（None の場合は変更しない）
            is_skipped (Optional[bool]): スキップしたかどうか（None の場合は変更しない）

        Raises:
            ItemValidationError: フラグが1つも指定されていない場合
            ItemNotFoundError: 項目が存在しない場合
            ItemOperationError: データベース操作失敗時

        ビジネスルール:
            - 同じ値での再更新は成功扱い（冪等）
        """
        flags = {}
        if is_purchased is not None:
            flags["is_purchased"] = is_purchased
        if is_skipped is not None:
            flags["is_skipped"] = is_skipped

        if not flags:
            raise ItemValidationError(STATUS_REQUIRED_MESSAGE)

        try:
            self.ensure_schema()
            updated = self.repository.update_flags(item_id, **flags)
        except (SchemaError, QueryError) as e:
            raise ItemOperationError(UPDATE_FAILED_MESSAGE) from e

        if not updated:
            raise ItemNotFoundError(f"Item {item_id} not found")
