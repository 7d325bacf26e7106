"""
スキーママイグレーション（initialize_database / describe_columns）のテスト
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import text

from repositories.migrations import (
    MIGRATIONS,
    MigrationStep,
    SchemaError,
    describe_columns,
    initialize_database,
)


class TestInitializeDatabase:

    def test_creates_grocery_items_table(self, database):
        applied = initialize_database(database.engine)

        assert applied == ["create_grocery_items_table"]
        columns = {column.name: column for column in describe_columns(database.engine)}
        assert list(columns) == ["id", "is_purchased", "is_skipped"]
        assert columns["id"].nullable is False
        assert columns["is_purchased"].nullable is True
        assert columns["is_purchased"].default is not None
        assert columns["is_skipped"].nullable is True
        assert columns["is_skipped"].default is not None

    def test_second_run_is_a_no_op(self, database):
        initialize_database(database.engine)
        before = describe_columns(database.engine)

        applied = initialize_database(database.engine)

        assert applied == []
        assert describe_columns(database.engine) == before

    def test_adds_is_skipped_to_legacy_table(self, database, load_item):
        with database.engine.begin() as connection:
            connection.execute(text(
                "CREATE TABLE grocery_items ("
                "id INTEGER NOT NULL PRIMARY KEY, "
                "is_purchased BOOLEAN DEFAULT 0)"
            ))
            connection.execute(text("INSERT INTO grocery_items (id, is_purchased) VALUES (1, 1)"))

        applied = initialize_database(database.engine)

        assert applied == ["add_grocery_items_is_skipped"]
        assert [column.name for column in describe_columns(database.engine)] == [
            "id", "is_purchased", "is_skipped"
        ]
        item = load_item(1)
        assert item.is_purchased is True
        assert item.is_skipped is False

    def test_unreachable_database_raises_schema_error(self, unreachable_database):
        with pytest.raises(SchemaError):
            initialize_database(unreachable_database.engine)

    def test_failing_step_raises_schema_error(self, database):
        broken = MigrationStep(
            name="broken",
            is_applied=lambda inspector: False,
            apply=lambda connection: connection.execute(text("SELECT * FROM no_such_table")),
        )

        with pytest.raises(SchemaError) as excinfo:
            initialize_database(database.engine, steps=[broken])

        assert excinfo.value.__cause__ is not None

    def test_steps_are_ordered_table_first(self):
        assert [step.name for step in MIGRATIONS] == [
            "create_grocery_items_table",
            "add_grocery_items_is_skipped",
        ]


class TestDescribeColumns:

    def test_missing_table_returns_empty_list(self, database):
        assert describe_columns(database.engine) == []

    def test_formats_report_line(self, initialized_database):
        lines = [column.format() for column in describe_columns(initialized_database.engine)]

        assert lines[0] == "  id: INTEGER"
        assert lines[1].startswith("  is_purchased: BOOLEAN (nullable) default: ")
        assert lines[2].startswith("  is_skipped: BOOLEAN (nullable) default: ")


def _stale_first_check(step: MigrationStep) -> MigrationStep:
    """最初の判定だけ「未適用」を返すステップ（判定と適用の間に別リクエストが適用した状況）"""
    calls = []

    def is_applied(inspector):
        calls.append(True)
        if len(calls) == 1:
            return False
        return step.is_applied(inspector)

    return MigrationStep(name=step.name, is_applied=is_applied, apply=step.apply)


def _create_legacy_table(database):
    with database.engine.begin() as connection:
        connection.execute(text(
            "CREATE TABLE grocery_items ("
            "id INTEGER NOT NULL PRIMARY KEY, "
            "is_purchased BOOLEAN DEFAULT 0)"
        ))


def _initialize_concurrently(database, workers=6):
    barrier = threading.Barrier(workers)

    def run():
        barrier.wait()
        return initialize_database(database.engine)

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(run) for _ in range(workers)]
        # 例外があれば result() で再送出される
        return [future.result() for future in futures]


class TestConcurrentInitialization:

    def test_column_added_between_check_and_apply(self, initialized_database):
        steps = [MIGRATIONS[0], _stale_first_check(MIGRATIONS[1])]

        applied = initialize_database(initialized_database.engine, steps=steps)

        assert applied == []
        assert [column.name for column in describe_columns(initialized_database.engine)] == [
            "id", "is_purchased", "is_skipped"
        ]

    def test_table_created_between_check_and_apply(self, initialized_database, seed_item, load_item):
        item_id = seed_item(is_purchased=True)

        initialize_database(
            initialized_database.engine,
            steps=[_stale_first_check(MIGRATIONS[0]), MIGRATIONS[1]],
        )

        assert load_item(item_id).is_purchased is True

    def test_concurrent_first_requests_on_empty_database(self, database):
        _initialize_concurrently(database)

        assert [column.name for column in describe_columns(database.engine)] == [
            "id", "is_purchased", "is_skipped"
        ]
        assert initialize_database(database.engine) == []

    def test_concurrent_first_requests_on_legacy_table(self, database):
        _create_legacy_table(database)

        results = _initialize_concurrently(database)

        assert [column.name for column in describe_columns(database.engine)] == [
            "id", "is_purchased", "is_skipped"
        ]
        # ALTER TABLE が成功するのは1リクエストのみ
        assert sum(result.count("add_grocery_items_is_skipped") for result in results) == 1
