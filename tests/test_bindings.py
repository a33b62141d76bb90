"""Unit tests for build_with_bindings() / to_sql() (placeholder emission)."""

from __future__ import annotations

from duckql import CompiledSQL, QueryBuilder, raw


def _pg() -> QueryBuilder:
    return QueryBuilder("postgres")


def test_default_dialect_uses_question_marks():
    compiled = QueryBuilder().from_("users").where("id", 1).where("name", "Ann").build_with_bindings()
    assert isinstance(compiled, CompiledSQL)
    assert compiled.sql == "SELECT *\nFROM users\nWHERE (id = ? AND name = ?)"
    assert compiled.bindings == [1, "Ann"]
    assert compiled.dialect == "duckdb"


def test_postgres_numbered_placeholders():
    compiled = _pg().from_("orders").where_between("amount", 100, 500).to_sql()
    assert compiled.sql == "SELECT *\nFROM orders\nWHERE amount BETWEEN $1 AND $2"
    assert compiled.bindings == [100, 500]
    assert compiled.dialect == "postgres"


def test_in_list_binds_each_member():
    compiled = _pg().from_("users").where_in("id", [1, 2, 3]).to_sql()
    assert compiled.sql.endswith("WHERE id IN ($1, $2, $3)")
    assert compiled.bindings == [1, 2, 3]


def test_empty_in_binds_nothing():
    compiled = _pg().from_("users").where_in("id", []).to_sql()
    assert compiled.sql.endswith("WHERE 1 = 0")
    assert compiled.bindings == []


def test_null_tests_bind_nothing():
    assert _pg().from_("users").where_null("email").bindings() == []


def test_bindings_follow_textual_order_across_subqueries():
    cte = _pg().select("id").from_("users").where("role", "admin")
    sub = _pg().select("user_id").from_("orders").where("total", ">", 100)
    compiled = (
        _pg()
        .with_("admins", cte)
        .from_("admins")
        .where_in("id", sub)
        .where("active", True)
        .having_raw("COUNT(*) > ?", [2])
        .to_sql()
    )
    assert compiled.sql == (
        "WITH admins AS (SELECT id\nFROM users\nWHERE role = $1)\n"
        "SELECT *\nFROM admins\n"
        "WHERE (id IN (SELECT user_id\nFROM orders\nWHERE total > $2) AND active = $3)\n"
        "HAVING COUNT(*) > $4"
    )
    assert compiled.bindings == ["admin", 100, True, 2]


def test_union_members_share_bindings():
    q2 = _pg().select("id").from_("b").where("x", 2)
    compiled = _pg().select("id").from_("a").where("x", 1).union_all(q2).to_sql()
    assert compiled.sql == (
        "SELECT id\nFROM a\nWHERE x = $1\nUNION ALL\nSELECT id\nFROM b\nWHERE x = $2"
    )
    assert compiled.bindings == [1, 2]


def test_raw_value_is_inlined_but_its_bindings_are_bound():
    compiled = _pg().from_("events").where("ts", ">", raw("NOW() - ?::INTERVAL", ["1 day"])).to_sql()
    assert compiled.sql.endswith("WHERE ts > NOW() - $1::INTERVAL")
    assert compiled.bindings == ["1 day"]


def test_limit_and_offset_are_inlined():
    compiled = _pg().from_("users").where("id", ">", 5).limit(10).offset(20).to_sql()
    assert compiled.sql.endswith("LIMIT 10\nOFFSET 20")
    assert compiled.bindings == [5]


def test_build_with_bindings_is_repeatable():
    q = _pg().from_("users").where("id", 1)
    assert q.to_sql() == q.to_sql()
    assert q.bindings() == [1]


def test_inlined_and_bound_forms_agree():
    q = _pg().from_("users").where("name", "O'Brien").or_where_in("id", [1, 2])
    assert q.build() == "SELECT *\nFROM users\nWHERE (name = 'O''Brien' OR id IN (1, 2))"
    assert q.to_sql().sql == "SELECT *\nFROM users\nWHERE (name = $1 OR id IN ($2, $3))"
