"""Unit tests for FilterEngine.filter_contains() free-text search."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy import select

from gridfilter.core.filters import FilterEngine
from gridfilter.schemas import ColumnSpec
from tests.helpers import User, render, where_sql


def search(term, columns=(), relations=None, query=None, schema=None):
    """Run filter_contains() on a fresh case-sensitive engine and return the select."""
    engine = FilterEngine(
        query if query is not None else select(User), schema, case_insensitive=False
    )
    engine.with_search(term).with_columns(list(columns))
    if relations is not None:
        engine.with_relation_search(relations)
    return engine.filter_contains().query


@pytest.fixture
def name_column():
    return ColumnSpec(field="name", searchable=True)


def test_empty_search_is_noop(filter_engine, users_query, name_column):
    """Test that an empty term leaves the query untouched."""
    result = filter_engine.with_search("").with_columns([name_column]).filter_contains()

    assert result is filter_engine
    assert result.query is users_query


def test_search_single_column(name_column):
    """Test searching one searchable column of the base table."""
    stmt = search("foo", [name_column])

    assert where_sql(stmt) == "users.name LIKE '%foo%'"


def test_search_columns_are_ored(name_column):
    """Test that column predicates share one OR group."""
    stmt = search("foo", [name_column, ColumnSpec(field="email", searchable=True)])

    assert where_sql(stmt) == "users.name LIKE '%foo%' OR users.email LIKE '%foo%'"


def test_search_group_is_anded_with_filters(name_column):
    """Test that the search group is combined with existing filters."""
    engine = FilterEngine(select(User), case_insensitive=False)
    engine.with_filters({"select": {"status": "active"}}).with_search("foo").with_columns(
        [name_column, ColumnSpec(field="email", searchable=True)]
    )
    engine.filter()
    stmt = engine.filter_contains().query

    assert where_sql(stmt) == (
        "users.status = 'active' AND (users.name LIKE '%foo%' OR users.email LIKE '%foo%')"
    )


def test_search_skips_non_searchable_columns():
    """Test that only searchable columns are searched."""
    stmt = search("foo", [ColumnSpec(field="name")])

    assert stmt.whereclause is None


def test_search_uses_data_field_override():
    """Test that data_field takes precedence over field."""
    stmt = search("foo", [ColumnSpec(field="display_name", data_field="email", searchable=True)])

    assert where_sql(stmt) == "users.email LIKE '%foo%'"


def test_search_accepts_column_mappings():
    """Test that plain mappings are accepted as column specs."""
    stmt = search("foo", [{"field": "label", "dataField": "name", "searchable": True}])

    assert where_sql(stmt) == "users.name LIKE '%foo%'"


def test_search_skips_columns_missing_from_schema():
    """Test that columns the schema does not know are skipped."""
    stmt = search("foo", [ColumnSpec(field="nickname", searchable=True)])

    assert stmt.whereclause is None


def test_search_dotted_field_on_joined_table():
    """Test that table.column searches the joined table."""
    query = select(User).join(User.orders)
    stmt = search("foo", [ColumnSpec(field="orders.status", searchable=True)], query=query)

    assert where_sql(stmt) == "orders.status LIKE '%foo%'"


def test_search_dotted_field_checks_schema():
    """Test that the schema decides whether a dotted column is searched."""
    schema = MagicMock()
    schema.has_column.return_value = False
    query = select(User).join(User.orders)

    stmt = search(
        "foo", [ColumnSpec(field="orders.status", searchable=True)], query=query, schema=schema
    )

    assert stmt.whereclause is None
    schema.has_column.assert_called_once_with("orders", "status")


def test_search_case_insensitive_by_default(name_column):
    """Test that search uses ILIKE semantics by default."""
    engine = FilterEngine(select(User)).with_search("Foo").with_columns([name_column])
    stmt = engine.filter_contains().query

    assert where_sql(stmt) == "lower(users.name) LIKE lower('%Foo%')"


# Relation search


def test_relation_search_columns():
    """Test one EXISTS per related column."""
    stmt = search("x", relations={"posts": ["title", "body"]})
    sql = render(stmt)

    assert sql.count("EXISTS") == 2
    assert "posts.title LIKE '%x%'" in sql
    assert "posts.body LIKE '%x%'" in sql


def test_relation_search_ored_with_columns(name_column):
    """Test that relation predicates join the column OR group."""
    stmt = search("x", [name_column], relations={"posts": ["title"]})
    sql = render(stmt)

    assert "WHERE users.name LIKE '%x%' OR " in sql
    assert "EXISTS" in sql


def test_relation_search_two_levels():
    """Test a nested relation search."""
    stmt = search("x", relations={"posts": {"comments": ["text"]}})
    sql = render(stmt)

    assert sql.count("EXISTS") == 2
    assert "comments.text LIKE '%x%'" in sql


def test_relation_search_scalar_mapping_values():
    """Test that scalar values in a mapping are columns on the relation."""
    stmt = search("x", relations={"posts": {"0": "title"}})

    assert "posts.title LIKE '%x%'" in render(stmt)


@pytest.mark.parametrize(
    "relations",
    [
        {"likes": ["title"]},
        {"posts": {"likes": ["text"]}},
        {"posts": ["rating"]},
    ],
)
def test_relation_search_unresolvable_is_skipped(relations):
    """Test that unknown relations and columns add nothing."""
    stmt = search("x", relations=relations)

    assert stmt.whereclause is None


def test_relation_search_skips_only_unresolvable_entry():
    """Test that an unknown relation does not stop later entries."""
    stmt = search("x", relations={"likes": ["title"], "orders": ["status"]})

    assert "orders.status LIKE '%x%'" in render(stmt)


def test_relation_search_malformed_entry_aborts_remaining():
    """Test that a malformed entry stops processing of later entries."""
    stmt = search("x", relations={"orders": ["status"], "broken": 5, "posts": ["title"]})
    sql = render(stmt)

    assert "orders.status LIKE '%x%'" in sql
    assert "posts.title" not in sql


@pytest.mark.parametrize(
    "broken",
    [
        {"comments": {"deep": ["text"]}},
        {"comments": None},
        {"comments": [1]},
        [1],
        [None],
    ],
)
def test_relation_search_malformed_columns_abort_remaining(broken):
    """Test that non-string column names stop processing without raising."""
    stmt = search("x", relations={"posts": broken, "orders": ["status"]})

    assert stmt.whereclause is None


def test_relation_search_requires_search_term():
    """Test that relation search is skipped without a term."""
    stmt = search("", relations={"posts": ["title"]})

    assert stmt.whereclause is None
