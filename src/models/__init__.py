"""
SQLAlchemy Model パッケージ

このパッケージはデータベーステーブルのエンティティ定義を含みます。
"""

from .grocery_item import Base, GroceryItem

__all__ = ["Base", "GroceryItem"]
