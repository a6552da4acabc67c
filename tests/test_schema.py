"""Tests for ``simpledb.schema`` -- DDL generation and comparison."""

from __future__ import annotations

import pytest

from records import Article, Comment
from simpledb.dialect import MySQLDialect, SQLiteDialect
from simpledb.errors import SchemaMismatchError
from simpledb.schema import ColumnDescriptor, SchemaConverter
from simpledb.shape import record_shape


def _columns(*names: str) -> list[ColumnDescriptor]:
    return [ColumnDescriptor(name, "TEXT", nullable=False) for name in names]


@pytest.fixture
def mysql() -> SchemaConverter:
    return SchemaConverter(MySQLDialect())


@pytest.fixture
def sqlite() -> SchemaConverter:
    return SchemaConverter(SQLiteDialect())


class TestBuildCreate:
    def test_mysql_article(self, mysql):
        assert mysql.build_create(record_shape(Article), "article") == (
            "CREATE TABLE article (\n"
            "    id INT UNSIGNED NOT NULL AUTO_INCREMENT,\n"
            "    PRIMARY KEY(id),\n"
            "    created_date DATETIME NOT NULL,\n"
            "    modified_date DATETIME NOT NULL,\n"
            "    title VARCHAR(100) NOT NULL,\n"
            "    body TEXT NOT NULL,\n"
            "    is_blind BIT(1) NOT NULL\n"
            ")"
        )

    def test_sqlite_article(self, sqlite):
        assert sqlite.build_create(record_shape(Article)) == (
            "CREATE TABLE article (\n"
            "    id INTEGER PRIMARY KEY AUTOINCREMENT,\n"
            "    created_date DATETIME NOT NULL,\n"
            "    modified_date DATETIME NOT NULL,\n"
            "    title VARCHAR(100) NOT NULL,\n"
            "    body TEXT NOT NULL,\n"
            "    is_blind BOOLEAN NOT NULL\n"
            ")"
        )

    def test_nullable_field_has_no_not_null(self, mysql):
        sql = mysql.build_create(record_shape(Comment))
        assert sql.endswith("    score DOUBLE\n)")
        assert "preview" not in sql

    def test_table_name_defaults_to_shape(self, mysql):
        assert mysql.build_create(record_shape(Comment)).startswith(
            "CREATE TABLE article_comment ("
        )

    def test_table_name_override(self, sqlite):
        assert sqlite.build_create(record_shape(Article), "post").startswith("CREATE TABLE post (")


class TestSimpleStatements:
    def test_build_drop(self, mysql):
        assert mysql.build_drop("article") == "DROP TABLE IF EXISTS article"

    def test_build_describe(self, mysql, sqlite):
        assert mysql.build_describe("article") == "DESC article"
        assert sqlite.build_describe("article") == "PRAGMA table_info(article)"


class TestBuildUpdate:
    def test_nothing_missing(self, mysql):
        columns = _columns("id", "created_date", "modified_date", "title", "body", "is_blind")
        assert mysql.build_update(record_shape(Article), columns, "article") == []

    def test_mysql_single_statement(self, mysql):
        columns = _columns("id", "created_date", "modified_date", "title")
        assert mysql.build_update(record_shape(Article), columns, "article") == [
            "ALTER TABLE article\n"
            "ADD COLUMN body TEXT NOT NULL,\n"
            "ADD COLUMN is_blind BIT(1) NOT NULL"
        ]

    def test_sqlite_one_statement_per_column(self, sqlite):
        columns = _columns("id", "created_date", "modified_date", "title")
        assert sqlite.build_update(record_shape(Article), columns, "article") == [
            "ALTER TABLE article ADD COLUMN body TEXT NOT NULL DEFAULT ''",
            "ALTER TABLE article ADD COLUMN is_blind BOOLEAN NOT NULL DEFAULT 0",
        ]

    def test_nullable_added_without_default(self, sqlite):
        columns = _columns("id", "article_id", "content")
        assert sqlite.build_update(record_shape(Comment), columns) == [
            "ALTER TABLE article_comment ADD COLUMN score REAL"
        ]

    def test_extra_columns_ignored(self, mysql):
        columns = _columns(
            "id", "created_date", "modified_date", "title", "body", "is_blind", "legacy"
        )
        assert mysql.build_update(record_shape(Article), columns) == []


class TestMissingFields:
    def test_declaration_order(self, mysql):
        missing = mysql.missing_fields(record_shape(Article), _columns("id", "title"))
        assert [f.name for f in missing] == ["created_date", "modified_date", "body", "is_blind"]

    def test_name_match_is_exact(self, mysql):
        missing = mysql.missing_fields(record_shape(Comment), _columns("ID", "article_id", "content", "score"))
        assert [f.name for f in missing] == ["id"]


class TestValidate:
    def test_matching_count_passes(self, mysql):
        mysql.validate(record_shape(Article), _columns("a", "b", "c", "d", "e", "f"))

    def test_count_mismatch(self, mysql):
        with pytest.raises(SchemaMismatchError) as exc_info:
            mysql.validate(record_shape(Article), _columns("id", "title", "body", "x", "y"), "article")
        assert exc_info.value.expected == 6
        assert exc_info.value.actual == 5
        assert exc_info.value.context.table == "article"

    def test_more_columns_than_fields(self, sqlite):
        with pytest.raises(SchemaMismatchError):
            sqlite.validate(record_shape(Comment), _columns("a", "b", "c", "d", "e"))
