"""
/api/items エンドポイントのテスト
"""

import pytest
from fastapi.testclient import TestClient

from main import create_app
from repositories.migrations import describe_columns


PURCHASE_STATUS_REQUIRED = {"error": "itemId (number) and isPurchased (boolean) are required"}


class TestUpdatePurchaseStatus:
    """PATCH /api/items"""

    def test_marks_item_purchased(self, client, seed_item, load_item):
        item_id = seed_item()

        response = client.patch("/api/items", json={"itemId": item_id, "isPurchased": True})

        assert response.status_code == 200
        assert response.json() == {"message": "Item updated successfully"}
        assert load_item(item_id).is_purchased is True

    def test_repeated_update_is_idempotent(self, client, seed_item, load_item):
        item_id = seed_item()
        payload = {"itemId": item_id, "isPurchased": True}

        first = client.patch("/api/items", json=payload)
        second = client.patch("/api/items", json=payload)

        assert first.status_code == 200
        assert second.status_code == 200
        assert load_item(item_id).is_purchased is True

    def test_unmarks_purchased_item(self, client, seed_item, load_item):
        item_id = seed_item(is_purchased=True)

        response = client.patch("/api/items", json={"itemId": item_id, "isPurchased": False})

        assert response.status_code == 200
        assert load_item(item_id).is_purchased is False

    def test_leaves_skip_flag_untouched(self, client, seed_item, load_item):
        item_id = seed_item(is_skipped=True)

        client.patch("/api/items", json={"itemId": item_id, "isPurchased": True})

        assert load_item(item_id).is_skipped is True

    def test_unknown_item_returns_404(self, client, initialized_database):
        response = client.patch("/api/items", json={"itemId": 999, "isPurchased": True})

        assert response.status_code == 404
        assert response.json() == {"error": "Item not found"}

    def test_initializes_schema_on_first_request(self, client, database):
        response = client.patch("/api/items", json={"itemId": 1, "isPurchased": True})

        assert response.status_code == 404
        assert [column.name for column in describe_columns(database.engine)] == [
            "id", "is_purchased", "is_skipped"
        ]

    @pytest.mark.parametrize("payload", [
        {"itemId": "5", "isPurchased": True},
        {"itemId": 5, "isPurchased": "true"},
        {"itemId": 5, "isPurchased": 1},
        {"itemId": True, "isPurchased": True},
        {"itemId": 5.5, "isPurchased": True},
        {"itemId": 5},
        {"isPurchased": True},
        {},
        [5, True],
    ])
    def test_invalid_payload_returns_400_without_touching_database(self, client, database, payload):
        response = client.patch("/api/items", json=payload)

        assert response.status_code == 400
        assert response.json() == PURCHASE_STATUS_REQUIRED
        # スキーマ初期化も行われていないこと
        assert describe_columns(database.engine) == []

    def test_missing_body_returns_400(self, client):
        response = client.patch("/api/items")

        assert response.status_code == 400
        assert response.json() == PURCHASE_STATUS_REQUIRED

    def test_malformed_json_returns_400(self, client):
        response = client.patch(
            "/api/items",
            content="{not json",
            headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request"}

    def test_unreachable_database_returns_generic_500(self, unreachable_database):
        client = TestClient(create_app(unreachable_database))

        response = client.patch("/api/items", json={"itemId": 5, "isPurchased": True})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to update item"}
        assert "unable to open" not in response.text


class TestUpdateItemStatus:
    """PATCH /api/items/{item_id}"""

    def test_marks_item_skipped(self, client, seed_item, load_item):
        item_id = seed_item()

        response = client.patch(f"/api/items/{item_id}", json={"isSkipped": True})

        assert response.status_code == 200
        assert response.json() == {"message": "Item updated successfully"}
        item = load_item(item_id)
        assert item.is_skipped is True
        assert item.is_purchased is False

    def test_updates_both_flags(self, client, seed_item, load_item):
        item_id = seed_item()

        response = client.patch(
            f"/api/items/{item_id}",
            json={"isPurchased": True, "isSkipped": False}
        )

        assert response.status_code == 200
        item = load_item(item_id)
        assert item.is_purchased is True
        assert item.is_skipped is False

    def test_requires_at_least_one_flag(self, client, seed_item):
        item_id = seed_item()

        response = client.patch(f"/api/items/{item_id}", json={})

        assert response.status_code == 400
        assert response.json() == {
            "error": "Either isPurchased (boolean) or isSkipped (boolean) is required"
        }

    def test_rejects_non_boolean_flag(self, client, seed_item):
        item_id = seed_item()

        response = client.patch(f"/api/items/{item_id}", json={"isSkipped": "yes"})

        assert response.status_code == 400

    def test_non_boolean_flag_rejects_whole_body(self, client, seed_item, load_item):
        item_id = seed_item()

        response = client.patch(
            f"/api/items/{item_id}", json={"isPurchased": "yes", "isSkipped": True}
        )

        assert response.status_code == 400
        item = load_item(item_id)
        assert item.is_purchased is False
        assert item.is_skipped is False

    def test_non_numeric_id_returns_400(self, client):
        response = client.patch("/api/items/abc", json={"isSkipped": True})

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid item ID"}

    def test_unknown_item_returns_404(self, client, initialized_database):
        response = client.patch("/api/items/42", json={"isSkipped": True})

        assert response.status_code == 404


class TestGetItem:
    """GET /api/items/{item_id}"""

    def test_returns_item_flags(self, client, seed_item):
        item_id = seed_item(is_purchased=True)

        response = client.get(f"/api/items/{item_id}")

        assert response.status_code == 200
        assert response.json() == {"id": item_id, "isPurchased": True, "isSkipped": False}

    def test_unknown_item_returns_404(self, client, initialized_database):
        response = client.get("/api/items/7")

        assert response.status_code == 404
        assert response.json() == {"error": "Item not found"}

    def test_unreachable_database_returns_generic_500(self, unreachable_database):
        client = TestClient(create_app(unreachable_database))

        response = client.get("/api/items/7")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch item"}

    def test_non_numeric_id_returns_400(self, client):
        response = client.get("/api/items/abc")

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid item ID"}


def test_unknown_route_uses_error_payload(client):
    response = client.get("/api/unknown")

    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}
