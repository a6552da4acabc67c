"""Tests for ``simpledb.sql`` -- the statement builder over SQLite."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from conftest import count_articles
from records import Article
from simpledb.errors import (
    BindingError,
    NoGeneratedKeyError,
    QueryExecutionError,
    ResultShapeError,
    StatementStateError,
)
from simpledb.statement import StatementType


def _register_field_function(db) -> None:
    """Provide MySQL's FIELD(value, a, b, ...) ordering helper on SQLite."""

    def field(value, *options):
        return options.index(value) + 1 if value in options else 0

    db.adapter.get_connection().create_function("FIELD", -1, field)


class TestBuilding:
    def test_fragments_joined_with_single_space(self, db):
        sql = db.gen_sql().append("SELECT id").append("FROM article").append("WHERE id = ?", 1)
        assert sql.sql == "SELECT id FROM article WHERE id = ?"
        assert sql.params == (1,)

    def test_list_expansion(self, db):
        sql = db.gen_sql().append("SELECT id FROM article").append("WHERE id IN (?)", [1, 2, 3])
        assert sql.sql == "SELECT id FROM article WHERE id IN (?, ?, ?)"
        assert sql.params == (1, 2, 3)

    def test_statement_type(self, db):
        assert db.gen_sql().append("  delete FROM article").statement_type is StatementType.DELETE

    def test_binding_error_at_append(self, db):
        with pytest.raises(BindingError):
            db.gen_sql().append("SELECT * FROM article WHERE id = ? AND title = ?", 1)

    def test_empty_list_rejected(self, db):
        with pytest.raises(BindingError):
            db.gen_sql().append_in("WHERE id IN (?)", [])

    def test_repr(self, db):
        assert "open" in repr(db.gen_sql().append("SELECT 1"))


class TestInsert:
    def test_returns_generated_key(self, db):
        now = datetime.now()
        new_id = (
            db.gen_sql()
            .append("INSERT INTO article (created_date, modified_date, title, body)")
            .append("VALUES (?, ?, ?, ?)", now, now, "title7", "body7")
            .insert()
        )
        assert new_id == 7
        assert count_articles(db) == 7

    def test_no_row_inserted_returns_none(self, db):
        result = (
            db.gen_sql()
            .append("INSERT INTO article (created_date, modified_date, title, body)")
            .append("SELECT created_date, modified_date, title, body FROM article WHERE id = ?", 99)
            .insert()
        )
        assert result is None

    def test_require_key(self, db):
        with pytest.raises(NoGeneratedKeyError):
            (
                db.gen_sql()
                .append("INSERT INTO article (created_date, modified_date, title, body)")
                .append("SELECT created_date, modified_date, title, body FROM article WHERE 0")
                .insert(require_key=True)
            )

    def test_insert_on_select_is_shape_error(self, db):
        with pytest.raises(ResultShapeError):
            db.gen_sql().append("SELECT * FROM article").insert()


class TestUpdateDelete:
    def test_update_counts_matched_rows(self, db):
        updated = (
            db.gen_sql()
            .append("UPDATE article SET title = ?", "changed")
            .append("WHERE id IN (?)", [0, 1, 2, 3])
            .update()
        )
        assert updated == 3

    def test_update_nothing(self, db):
        assert db.gen_sql().append("UPDATE article SET body = '' WHERE id = ?", 99).update() == 0

    def test_delete(self, db):
        deleted = db.gen_sql().append("DELETE FROM article").append_in("WHERE id IN (?)", (5, 6)).delete()
        assert deleted == 2
        assert count_articles(db) == 4

    def test_update_on_select_is_shape_error(self, db):
        with pytest.raises(ResultShapeError):
            db.gen_sql().append("SELECT 1").update()

    def test_update_on_insert_does_not_run(self, db):
        with pytest.raises(ResultShapeError):
            (
                db.gen_sql()
                .append("INSERT INTO article (created_date, modified_date, title, body)")
                .append("VALUES (datetime('now'), datetime('now'), ?, ?)", "t", "b")
                .update()
            )
        assert count_articles(db) == 6


class TestScalarSelects:
    def test_select_long(self, db):
        assert db.gen_sql().append("SELECT COUNT(*) FROM article WHERE is_blind = ?", True).select_long() == 3

    def test_select_long_empty(self, db):
        assert db.gen_sql().append("SELECT id FROM article WHERE id = ?", 99).select_long() is None

    def test_select_longs(self, db):
        assert db.gen_sql().append("SELECT id FROM article ORDER BY id DESC LIMIT 3").select_longs() == [6, 5, 4]

    def test_select_longs_empty(self, db):
        assert db.gen_sql().append("SELECT id FROM article WHERE 0").select_longs() == []

    def test_select_string(self, db):
        title = db.gen_sql().append("SELECT title FROM article WHERE id = ?", 2).select_string()
        assert title == "title2"

    def test_select_strings(self, db):
        titles = db.gen_sql().append("SELECT title FROM article WHERE id < ? ORDER BY id", 3).select_strings()
        assert titles == ["title1", "title2"]

    def test_select_boolean(self, db):
        assert db.gen_sql().append("SELECT is_blind FROM article WHERE id = ?", 5).select_boolean() is True
        assert db.gen_sql().append("SELECT is_blind FROM article WHERE id = ?", 1).select_boolean() is False

    def test_select_datetime(self, db):
        value = db.gen_sql().append("SELECT datetime('now', 'localtime')").select_datetime()
        assert isinstance(value, datetime)
        assert abs(datetime.now() - value) < timedelta(minutes=1)

    def test_select_datetime_column(self, db):
        value = db.gen_sql().append("SELECT created_date FROM article WHERE id = 1").select_datetime()
        assert isinstance(value, datetime)

    def test_first_column_of_first_row(self, db):
        assert db.gen_sql().append("SELECT id, title FROM article ORDER BY id DESC").select_long() == 6

    def test_non_numeric_long_is_shape_error(self, db):
        with pytest.raises(ResultShapeError):
            db.gen_sql().append("SELECT title FROM article WHERE id = 1").select_long()

    def test_select_on_update_is_shape_error(self, db):
        with pytest.raises(ResultShapeError):
            db.gen_sql().append("UPDATE article SET body = ''").select_long()
        assert db.gen_sql().append("SELECT body FROM article WHERE id = 1").select_string() == "body1"

    def test_select_on_delete_leaves_rows(self, db):
        sql = db.gen_sql().append("DELETE FROM article")
        with pytest.raises(ResultShapeError, match="select_long"):
            sql.select_long()
        assert count_articles(db) == 6
        assert "open" in repr(sql)


class TestRowSelects:
    def test_select_row(self, db):
        row = db.gen_sql().append("SELECT id, title, body FROM article WHERE id = ?", 3).select_row()
        assert row == {"id": 3, "title": "title3", "body": "body3"}
        assert list(row) == ["id", "title", "body"]

    def test_select_row_empty(self, db):
        assert db.gen_sql().append("SELECT * FROM article WHERE id = ?", 99).select_row() == {}

    def test_select_row_typed(self, db):
        article = db.gen_sql().append("SELECT * FROM article WHERE id = ?", 4).select_row(Article)
        assert isinstance(article, Article)
        assert article.id == 4
        assert article.title == "title4"
        assert article.is_blind is True
        assert isinstance(article.created_date, datetime)

    def test_select_row_typed_empty(self, db):
        assert db.gen_sql().append("SELECT * FROM article WHERE id = ?", 99).select_row(Article) is None

    def test_select_rows(self, db):
        rows = db.gen_sql().append("SELECT id FROM article WHERE is_blind = ? ORDER BY id", False).select_rows()
        assert rows == [{"id": 1}, {"id": 2}, {"id": 3}]

    def test_select_rows_typed_partial_columns(self, db):
        articles = db.gen_sql().append("SELECT id, title FROM article ORDER BY id").select_rows(Article)
        assert [a.title for a in articles] == [f"title{no}" for no in range(1, 7)]
        assert all(a.body == "" for a in articles)

    def test_like_with_bound_value(self, db):
        titles = (
            db.gen_sql()
            .append("SELECT title FROM article")
            .append("WHERE body LIKE ('%' || ? || '%')", "dy1")
            .select_strings()
        )
        assert titles == ["title1"]

    def test_field_ordering_with_list_expansion(self, db):
        _register_field_function(db)
        ids = [4, 1, 6]
        result = (
            db.gen_sql()
            .append("SELECT id FROM article")
            .append_in("WHERE id IN (?)", ids)
            .append_in("ORDER BY FIELD (id, ?)", ids)
            .select_longs()
        )
        assert result == ids

    def test_show_like_statements_return_rows(self, db):
        rows = db.gen_sql().append("PRAGMA table_info(article)").select_rows()
        assert [row["name"] for row in rows][:2] == ["id", "created_date"]


class TestSingleUse:
    def test_terminal_twice(self, db):
        sql = db.gen_sql().append("SELECT 1")
        sql.select_long()
        with pytest.raises(StatementStateError):
            sql.select_long()

    def test_append_after_terminal(self, db):
        sql = db.gen_sql().append("SELECT 1")
        sql.select_long()
        with pytest.raises(StatementStateError):
            sql.append("UNION SELECT 2")

    def test_consumed_even_when_execution_fails(self, db):
        sql = db.gen_sql().append("SELECT * FROM missing_table")
        with pytest.raises(QueryExecutionError):
            sql.select_rows()
        assert "consumed" in repr(sql)


class TestExecutionErrors:
    def test_error_carries_sql(self, db):
        with pytest.raises(QueryExecutionError) as exc_info:
            db.gen_sql().append("SELECT nope FROM article WHERE id = ?", 1).select_long()
        assert exc_info.value.sql == "SELECT nope FROM article WHERE id = ?"
        assert "SELECT nope" in str(exc_info.value)
