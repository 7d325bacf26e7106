"""
grocery_items テーブル Repository

目的: grocery_itemsテーブルへのデータアクセス、SQLインジェクション対策
影響範囲: grocery_items_service.py（ビジネスロジック）
前提条件: database.pyでセッションが提供されている、スキーマが初期化済み
"""

from sqlalchemy.orm import Session
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from models.grocery_item import GroceryItem
from typing import Optional


class QueryError(Exception):
    """
    クエリ実行エラー

    発生条件:
        - データベースに接続できない
        - UPDATE / SELECT / INSERT が失敗した
    """
    pass


class GroceryItemsRepository:
    """
    grocery_items テーブルの操作を提供

    責務:
        - 購入/スキップフラグの更新（単一UPDATE文、行ロックはデータベースに委譲）
        - SQLインジェクション対策（パラメータ化クエリ使用）

    影響範囲:
        - grocery_items_service.py: ビジネスロジックで使用

    前提条件:
        - database.py でセッションが提供されている
    """

    def __init__(self, db: Session):
        """
        Repository初期化

        Args:
            db (Session): SQLAlchemy セッション
        """
        self.db = db

    def find_by_id(self, item_id: int) -> Optional[GroceryItem]:
        """
        ID別に項目を取得

        Args:
            item_id (int): 項目ID

        Returns:
            Optional[GroceryItem]: 項目（未存在の場合 None）

        Raises:
            QueryError: クエリ失敗時
        """
        try:
            return self.db.get(GroceryItem, item_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise QueryError(f"Failed to load grocery item {item_id}") from e

    def create(self, is_purchased: bool = False, is_skipped: bool = False) -> GroceryItem:
        """
        項目を作成（シード・テスト用）

        Returns:
            GroceryItem: 作成された項目

        Raises:
            QueryError: INSERT失敗時
        """
        item = GroceryItem(is_purchased=is_purchased, is_skipped=is_skipped)
        try:
            self.db.add(item)
            self.db.commit()
            self.db.refresh(item)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise QueryError("Failed to create grocery item") from e
        return item

    def update_flags(self, item_id: int, **flags: bool) -> bool:
        """
        指定IDの行のフラグを更新（1文で更新）

        Args:
            item_id (int): 項目ID
            **flags: is_purchased / is_skipped

        Returns:
            bool: True（更新成功）、False（該当行なし）

        Raises:
            QueryError: UPDATE失敗時

        注意:
            - 同一行への同時更新は後勝ち
        """
        statement = (
            update(GroceryItem)
            .where(GroceryItem.id == item_id)
            .values(**flags)
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.db.execute(statement)
            updated = result.rowcount > 0
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise QueryError(f"Failed to update grocery item {item_id}") from e

        return updated

    def update_purchase_status(self, item_id: int, is_purchased: bool) -> bool:
        return self.update_flags(item_id, is_purchased=is_purchased)

    def update_skip_status(self, item_id: int, is_skipped: bool) -> bool:
        return self.update_flags(item_id, is_skipped=is_skipped)
