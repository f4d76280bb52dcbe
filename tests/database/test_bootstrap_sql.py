from __future__ import annotations

from pathlib import Path

from org_hierarchy.database.bootstrap import _iter_sql_statements, _strip_create_db_and_use

REPO_ROOT = Path(__file__).resolve().parents[2]


def test_splitter_respects_quotes_and_comments():
    sql = "CREATE TABLE a (x INT); -- note; here\nINSERT INTO a VALUES ('x;y', \"q;\", 'it\\'s;');"

    assert list(_iter_sql_statements(sql)) == [
        "CREATE TABLE a (x INT)",
        "INSERT INTO a VALUES ('x;y', \"q;\", 'it\\'s;')",
    ]


def test_splitter_keeps_trailing_statement_without_semicolon():
    assert list(_iter_sql_statements("SELECT 1;\n\nSELECT 2")) == ["SELECT 1", "SELECT 2"]


def test_create_database_and_use_are_stripped():
    sql = "CREATE DATABASE IF NOT EXISTS foo;\nUSE foo;\nCREATE TABLE t (id INT);\n"

    assert list(_iter_sql_statements(_strip_create_db_and_use(sql))) == ["CREATE TABLE t (id INT)"]


def test_bundled_schema_and_seed_parse():
    schema = list(_iter_sql_statements(_strip_create_db_and_use((REPO_ROOT / "database" / "schema.sql").read_text())))
    seed = list(_iter_sql_statements((REPO_ROOT / "database" / "seed.sql").read_text()))

    assert any("CREATE TABLE" in s and "employees" in s for s in schema)
    assert any(s.upper().startswith("INSERT") for s in seed)
