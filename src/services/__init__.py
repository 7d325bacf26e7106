"""
ビジネスロジック層パッケージ

このパッケージはビジネスロジックとドメインルールを提供します。
"""

from .grocery_items_service import (
    GroceryItemsService,
    ItemNotFoundError,
    ItemOperationError,
    ItemValidationError,
)

__all__ = [
    "GroceryItemsService",
    "ItemNotFoundError",
    "ItemOperationError",
    "ItemValidationError",
]
