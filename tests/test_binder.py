"""Tests for ``simpledb.binder`` -- ``?`` binding with list expansion."""

from __future__ import annotations

import pytest

from simpledb.binder import Fragment, bind, is_list_value, join
from simpledb.errors import BindingError


class TestScalarBinding:
    def test_no_placeholders_no_values(self):
        assert bind("SELECT * FROM article") == Fragment("SELECT * FROM article", ())

    def test_scalars_keep_text_and_order(self):
        fragment = bind("WHERE id BETWEEN ? AND ? AND title = ?", [1, 3, "x"])
        assert fragment.text == "WHERE id BETWEEN ? AND ? AND title = ?"
        assert fragment.params == (1, 3, "x")

    def test_none_and_bool_are_scalars(self):
        fragment = bind("SET a = ?, b = ?", [None, True])
        assert fragment.params == (None, True)

    def test_string_is_not_expanded(self):
        fragment = bind("WHERE title = ?", ["abc"])
        assert fragment.text == "WHERE title = ?"
        assert fragment.params == ("abc",)


class TestListBinding:
    def test_list_expands_single_marker(self):
        fragment = bind("WHERE id IN (?)", [[1, 2, 3]])
        assert fragment.text == "WHERE id IN (?, ?, ?)"
        assert fragment.params == (1, 2, 3)

    def test_single_element_list(self):
        fragment = bind("WHERE id IN (?)", [(7,)])
        assert fragment.text == "WHERE id IN (?)"
        assert fragment.params == (7,)

    def test_mixed_scalars_and_lists_keep_position(self):
        fragment = bind("WHERE a = ? AND id IN (?) AND b = ?", ["x", [4, 5], "y"])
        assert fragment.text == "WHERE a = ? AND id IN (?, ?) AND b = ?"
        assert fragment.params == ("x", 4, 5, "y")

    def test_marker_count_grows_by_list_length(self):
        values = list(range(10))
        fragment = bind("ORDER BY FIELD (id, ?)", [values])
        assert fragment.text.count("?") == 10
        assert fragment.params == tuple(values)

    def test_input_values_untouched(self):
        ids = [2, 3, 1]
        bind("WHERE id IN (?)", [ids])
        assert ids == [2, 3, 1]


class TestBindingErrors:
    def test_too_few_values(self):
        with pytest.raises(BindingError) as exc_info:
            bind("WHERE a = ? AND b = ?", [1])
        assert exc_info.value.placeholders == 2
        assert exc_info.value.values == 1
        assert exc_info.value.context.sql == "WHERE a = ? AND b = ?"

    def test_too_many_values(self):
        with pytest.raises(BindingError):
            bind("WHERE a = ?", [1, 2])

    def test_values_without_placeholders(self):
        with pytest.raises(BindingError):
            bind("SELECT 1", [1])

    def test_empty_list(self):
        with pytest.raises(BindingError, match="empty"):
            bind("WHERE id IN (?)", [[]])


class TestHelpers:
    @pytest.mark.parametrize("value", [[1], (1,), {1}, frozenset({1}), range(2)])
    def test_list_like_values(self, value):
        assert is_list_value(value) is True

    @pytest.mark.parametrize("value", ["abc", b"abc", 1, None, 1.5])
    def test_scalar_values(self, value):
        assert is_list_value(value) is False

    def test_join_separates_with_one_space(self):
        joined = join([bind("SELECT id"), bind("FROM article"), bind("WHERE id = ?", [1])])
        assert joined.text == "SELECT id FROM article WHERE id = ?"
        assert joined.params == (1,)

    def test_join_empty(self):
        assert join([]) == Fragment("", ())
