# easydb — placeholder-driven SQL helpers for MySQL
# Copyright (C) 2024-2026 Dr Horst Herb
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""Tests for easydb.operations — query helpers and CRUD builders."""

from __future__ import annotations

import pytest

from easydb.errors import ParamCountError, QueryError
from easydb.operations import (
    delete,
    get_all,
    get_all_keyed,
    get_assoc,
    get_column,
    get_one,
    get_pairs,
    get_row,
    insert,
    insert_update,
    multi_insert,
    multi_query,
    query,
    raw_query,
    update,
)
from easydb.quoting import Expression

PRODUCTS = [("001", "Cup"), ("002", "Plate")]


class TestQuery:
    def test_substitutes_before_execute(self, conn):
        query(conn, "SELECT * FROM test WHERE code = ? AND id IN (?a)", "001", [1, 2])
        assert conn.executed == ["SELECT * FROM test WHERE code = '001' AND id IN (1,2)"]

    def test_write_result_is_freed(self, conn):
        res = query(conn, "DELETE FROM test")
        assert res.freed
        assert conn.cursors[-1].closed

    def test_param_count_checked_before_execute(self, conn):
        with pytest.raises(ParamCountError):
            query(conn, "SELECT ? + ?", 1)
        assert conn.executed == []

    def test_query_error_propagates(self, conn):
        conn.fail("test2", code=1146, message="Table 'testdb.test2' doesn't exist")
        with pytest.raises(QueryError) as excinfo:
            query(conn, "INSERT INTO test2 (code) VALUES (?)", "003")
        assert excinfo.value.code == 1146
        assert excinfo.value.sql == "INSERT INTO test2 (code) VALUES ('003')"

    def test_raw_query_is_not_substituted(self, conn):
        raw_query(conn, "SELECT '?' AS q")
        assert conn.executed == ["SELECT '?' AS q"]

    def test_multi_query(self, conn):
        multi_query(conn, "DELETE FROM a; DELETE FROM b")
        assert conn.executed == ["DELETE FROM a", "DELETE FROM b"]

    def test_multi_query_stops_at_failure(self, conn):
        conn.fail("name1", code=1054, message="Unknown column 'name1'")
        with pytest.raises(QueryError) as excinfo:
            multi_query(conn, "SELECT * FROM test; SELECT name1 FROM test; SELECT code FROM test")
        assert excinfo.value.sql == "SELECT name1 FROM test"
        assert conn.executed == ["SELECT * FROM test", "SELECT name1 FROM test"]


class TestSelectionHelpers:
    def test_get_one(self, conn):
        conn.respond(["name"], [("Cup",)])
        assert get_one(conn, "SELECT name FROM test WHERE id = ?i", 1) == "Cup"
        assert conn.executed == ["SELECT name FROM test WHERE id = 1"]

    def test_get_one_not_exists(self, conn):
        conn.respond(["name"], [])
        assert get_one(conn, "SELECT name FROM test WHERE id = 100") is None

    def test_get_row(self, conn):
        conn.respond(["code", "name"], PRODUCTS)
        assert get_row(conn, "SELECT code, name FROM test") == ("001", "Cup")
        assert conn.cursors[-1].closed

    def test_get_assoc(self, conn):
        conn.respond(["code", "name"], PRODUCTS[:1])
        assert get_assoc(conn, "SELECT code, name FROM test WHERE id = 1") == {
            "code": "001",
            "name": "Cup",
        }
        assert conn.cursors[-1].closed

    def test_get_assoc_not_exists(self, conn):
        conn.respond(["code", "name"], [])
        assert get_assoc(conn, "SELECT code, name FROM test WHERE id = 100") is None

    def test_get_all(self, conn):
        conn.respond(["code", "name"], PRODUCTS)
        assert get_all(conn, "SELECT code, name FROM test") == [
            {"code": "001", "name": "Cup"},
            {"code": "002", "name": "Plate"},
        ]

    def test_get_all_empty(self, conn):
        conn.respond(["code", "name"], [])
        assert get_all(conn, "SELECT code, name FROM test WHERE id = 100") == []

    def test_get_column(self, conn):
        conn.respond(["code"], [("001",), ("002",)])
        assert get_column(conn, "SELECT code FROM test") == ["001", "002"]

    def test_get_pairs(self, conn):
        conn.respond(["code", "name"], PRODUCTS)
        assert get_pairs(conn, "SELECT code, name FROM test") == {"001": "Cup", "002": "Plate"}

    def test_get_all_keyed(self, conn):
        conn.respond(["code", "name", "price"], [("001", "Cup", "20.00"), ("002", "Plate", "30.50")])
        assert get_all_keyed(conn, "SELECT code, name, price FROM test") == {
            "001": {"name": "Cup", "price": "20.00"},
            "002": {"name": "Plate", "price": "30.50"},
        }


class TestInsert:
    def test_sql_and_returned_id(self, conn):
        conn.respond(insert_id=3, affected=1)
        data = {"code": "003", "name": "Pan", "price": "22.9", "order": 1}
        new_id = insert(conn, "test", data)
        assert new_id == 3
        assert conn.executed == [
            "INSERT INTO `test` SET `code` = '003', `name` = 'Pan', `price` = '22.9', `order` = 1"
        ]

    def test_no_auto_increment_returns_true(self, conn):
        conn.respond(insert_id=0, affected=1)
        assert insert(conn, "test_no_ai", {"code": "003"}) is True

    def test_ignore(self, conn):
        insert(conn, "test", {"id": 1, "code": "003"}, ignore=True)
        assert conn.executed == ["INSERT IGNORE INTO `test` SET `id` = 1, `code` = '003'"]

    def test_expression_value(self, conn):
        insert(conn, "log", {"created": Expression("NOW()")})
        assert conn.executed == ["INSERT INTO `log` SET `created` = NOW()"]

    def test_identifiers_quoted(self, conn):
        insert(conn, "test`_ident", {"ide`nt": "test"})
        assert conn.executed == ["INSERT INTO `test``_ident` SET `ide``nt` = 'test'"]

    def test_value_escaped(self, conn):
        insert(conn, "t", {"name": "O'Brien"})
        assert conn.executed == ["INSERT INTO `t` SET `name` = 'O\\'Brien'"]

    def test_empty_fields_rejected(self, conn):
        with pytest.raises(ValueError):
            insert(conn, "t", {})
        assert conn.executed == []


class TestUpdate:
    def test_with_where(self, conn):
        conn.respond(affected=1)
        num = update(conn, "test", {"name": "Pan", "order": 2}, {"id": 2})
        assert num == 1
        assert conn.executed == ["UPDATE `test` SET `name` = 'Pan', `order` = 2 WHERE `id` = 2"]

    def test_multiple_where(self, conn):
        update(conn, "test", {"name": "Pan"}, {"id": 2, "code": "002", "order": 0})
        assert conn.executed == [
            "UPDATE `test` SET `name` = 'Pan' WHERE `id` = 2 AND `code` = '002' AND `order` = 0"
        ]

    def test_empty_where_updates_all(self, conn):
        conn.respond(affected=2)
        assert update(conn, "test", {"name": "Pan"}) == 2
        assert conn.executed == ["UPDATE `test` SET `name` = 'Pan'"]

    def test_where_identifier_quoted(self, conn):
        update(conn, "test`_ident", {"ide`nt": "order"}, {"ide`nt": "pass"})
        assert conn.executed == [
            "UPDATE `test``_ident` SET `ide``nt` = 'order' WHERE `ide``nt` = 'pass'"
        ]


class TestInsertUpdate:
    def test_update_defaults_to_insert_fields(self, conn):
        conn.respond(affected=1)
        res = insert_update(conn, "test", {"id": 3, "code": "003"})
        assert res == 1
        assert conn.executed == [
            "INSERT INTO `test` SET `id` = 3, `code` = '003'"
            " ON DUPLICATE KEY UPDATE `id` = 3, `code` = '003'"
        ]

    def test_separate_update_fields(self, conn):
        conn.respond(affected=2)
        res = insert_update(conn, "test", {"id": 3, "code": "003"}, {"price": 5, "order": 1})
        assert res == 2
        assert conn.executed == [
            "INSERT INTO `test` SET `id` = 3, `code` = '003'"
            " ON DUPLICATE KEY UPDATE `price` = 5, `order` = 1"
        ]


class TestMultiInsert:
    def test_sequence_rows(self, conn):
        conn.respond(affected=2)
        res = multi_insert(conn, "test", ["code", "name", "order"], [["003", "Pan", 7], ["004", "Spoon", 8]])
        assert res == 2
        assert conn.executed == [
            "INSERT INTO `test` (`code`, `name`, `order`)"
            " VALUES ('003', 'Pan', 7), ('004', 'Spoon', 8)"
        ]

    def test_mapping_rows(self, conn):
        rows = [{"id": 2, "ide`nt": "first"}, {"ide`nt": "second", "id": 3}]
        multi_insert(conn, "test`_ident", ["id", "ide`nt"], rows)
        assert conn.executed == [
            "INSERT INTO `test``_ident` (`id`, `ide``nt`) VALUES (2, 'first'), (3, 'second')"
        ]

    def test_ignore(self, conn):
        multi_insert(conn, "t", ["a"], [[None]], ignore=True)
        assert conn.executed == ["INSERT IGNORE INTO `t` (`a`) VALUES (null)"]

    def test_empty_rows_sends_nothing(self, conn):
        assert multi_insert(conn, "t", ["a"], []) == 0
        assert conn.executed == []

    def test_wrong_width_rejected(self, conn):
        with pytest.raises(ValueError, match="2 field"):
            multi_insert(conn, "t", ["a", "b"], [[1]])
        assert conn.executed == []

    def test_missing_mapping_field_rejected(self, conn):
        with pytest.raises(ValueError, match="missing field"):
            multi_insert(conn, "t", ["a", "b"], [{"a": 1}])

    def test_no_fields_rejected(self, conn):
        with pytest.raises(ValueError):
            multi_insert(conn, "t", [], [[1]])

    def test_collection_value_rejected(self, conn):
        with pytest.raises(TypeError, match=r"use \?a"):
            multi_insert(conn, "t", ["a", "b"], [[1, [2, 3]]])
        assert conn.executed == []


class TestDelete:
    def test_with_where(self, conn):
        conn.respond(affected=1)
        assert delete(conn, "test`_ident", {"id": 2, "ide`nt": "first"}) == 1
        assert conn.executed == ["DELETE FROM `test``_ident` WHERE `id` = 2 AND `ide``nt` = 'first'"]

    def test_empty_where_deletes_all(self, conn):
        conn.respond(affected=2)
        assert delete(conn, "test") == 2
        assert conn.executed == ["DELETE FROM `test`"]

    def test_null_where(self, conn):
        delete(conn, "test", {"price": None})
        assert conn.executed == ["DELETE FROM `test` WHERE `price` IS NULL"]
