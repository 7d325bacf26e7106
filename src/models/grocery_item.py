"""
grocery_items テーブル SQLAlchemy Model

目的: 買い物リスト項目の購入/スキップ状態の永続化
影響範囲: grocery_items_repository.py（更新操作）、migrations.py（スキーマ作成）
前提条件: PostgreSQL（ローカル・テストでは SQLite）が利用可能
"""

from sqlalchemy import Column, Integer, Boolean, false
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class GroceryItem(Base):
    """
    grocery_items テーブルのエンティティ定義

    責務:
        - 購入済みフラグ、スキップフラグの永続化

    影響範囲:
        - grocery_items_repository.py: 更新・取得で使用
        - grocery_items_service.py: ビジネスロジックで使用
        - items_controller.py: APIレスポンスで使用

    前提条件:
        - 行の作成は取り込み処理（本サービス外）で行われる
    """

    __tablename__ = 'grocery_items'

    # プライマリキー
    id = Column(Integer, primary_key=True, autoincrement=True, comment='項目ID')

    # 状態フラグ
    is_purchased = Column(
        Boolean,
        nullable=True,
        default=False,
        server_default=false(),
        comment='購入済みフラグ'
    )
    is_skipped = Column(
        Boolean,
        nullable=True,
        default=False,
        server_default=false(),
        comment='スキップフラグ'
    )

    def __repr__(self) -> str:
        return (
            f"<GroceryItem(id={self.id}, is_purchased={self.is_purchased}, "
            f"is_skipped={self.is_skipped})>"
        )

    def to_dict(self) -> dict:
        """
        エンティティを辞書形式に変換（API レスポンス用）

        Returns:
            dict: {
                "id": int,
                "isPurchased": bool,
                "isSkipped": bool
            }
        """
        return {
            "id": self.id,
            "isPurchased": bool(self.is_purchased),
            "isSkipped": bool(self.is_skipped),
        }
