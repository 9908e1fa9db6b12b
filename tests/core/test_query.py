"""Unit tests for the filter/sort query engine."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from snippetbox.core.models import Snippet, Tag
from snippetbox.core.query import FilterSpec, distinct_authors, query, visible_tags

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_snippet(
    sid: str,
    name: str = "",
    *,
    minutes: int = 0,
    created_minutes: int = 0,
    author: str = "ann@example.com",
    description: str = "",
    category: str | None = None,
    tags: list[str] | None = None,
) -> Snippet:
    return Snippet(
        id=sid,
        name=name or sid,
        code="function X() {}",
        created_at=T0 + timedelta(minutes=created_minutes),
        updated_at=T0 + timedelta(minutes=max(minutes, created_minutes)),
        author=author,
        description=description,
        category=category,
        tags=tags or [],
    )


def ids(snippets: list[Snippet]) -> list[str]:
    return [s.id for s in snippets]


@pytest.fixture
def collection() -> list[Snippet]:
    return [
        make_snippet("a", "Alpha Button", minutes=30, author="ann@example.com", category="x", tags=["t1"]),
        make_snippet("b", "beta card", minutes=10, author="Bob", category="y", tags=["t2", "t3"],
                     description="A card with a chart"),
        make_snippet("c", "Gamma", minutes=20, author="carol@example.com", tags=[]),
    ]


class TestFilterComposition:
    """AND across fields, OR within a field."""

    def test_and_across_fields(self) -> None:
        """Category of one snippet and tag of another match nothing."""
        all_snippets = [
            make_snippet("A", category="x", tags=["t1"]),
            make_snippet("B", category="y", tags=["t2"]),
        ]
        spec = FilterSpec(categories=frozenset({"x"}), tags=frozenset({"t2"}))
        assert query(all_snippets, spec) == []

    def test_or_within_categories(self, collection: list[Snippet]) -> None:
        spec = FilterSpec(categories=frozenset({"x", "y"}))
        assert ids(query(collection, spec)) == ["a", "b"]

    def test_uncategorized_never_matches_category_set(self, collection: list[Snippet]) -> None:
        spec = FilterSpec(categories=frozenset({"x", "y", "z"}))
        assert "c" not in ids(query(collection, spec))

    def test_tags_intersect(self, collection: list[Snippet]) -> None:
        spec = FilterSpec(tags=frozenset({"t3", "missing"}))
        assert ids(query(collection, spec)) == ["b"]

    def test_dangling_tag_ids_are_harmless(self) -> None:
        """Ids of deleted tags simply stop matching."""
        snippet = make_snippet("d", tags=["deleted-tag"])
        assert query([snippet], FilterSpec(tags=frozenset({"live"}))) == []
        assert ids(query([snippet], FilterSpec(tags=frozenset({"deleted-tag"})))) == ["d"]

    def test_authors_filter(self, collection: list[Snippet]) -> None:
        spec = FilterSpec(authors=frozenset({"Bob", "carol@example.com"}))
        assert ids(query(collection, spec)) == ["c", "b"]

    def test_empty_sets_are_absent(self, collection: list[Snippet]) -> None:
        spec = FilterSpec.from_params(categories=[], tags="", authors=[" "])
        assert len(query(collection, spec)) == 3


class TestSearch:
    """Case-insensitive substring over name, description and author."""

    def test_matches_name_case_insensitive(self, collection: list[Snippet]) -> None:
        assert ids(query(collection, FilterSpec(search="ALPHA"))) == ["a"]

    def test_matches_description(self, collection: list[Snippet]) -> None:
        assert ids(query(collection, FilterSpec(search="chart"))) == ["b"]

    def test_matches_author(self, collection: list[Snippet]) -> None:
        assert ids(query(collection, FilterSpec(search="carol"))) == ["c"]

    def test_whitespace_term_is_absent(self, collection: list[Snippet]) -> None:
        assert len(query(collection, FilterSpec(search="   "))) == 3

    def test_term_is_trimmed(self, collection: list[Snippet]) -> None:
        assert ids(query(collection, FilterSpec(search="  gamma "))) == ["c"]

    def test_search_combines_with_filters(self, collection: list[Snippet]) -> None:
        spec = FilterSpec(search="a", authors=frozenset({"Bob"}))
        assert ids(query(collection, spec)) == ["b"]


class TestSorting:
    """Sort keys, direction and stability."""

    def test_empty_spec_sorts_by_updated_desc(self, collection: list[Snippet]) -> None:
        result = query(collection, FilterSpec())
        assert ids(result) == ["a", "c", "b"]
        assert len(result) == len(collection)

    def test_none_spec_same_as_empty(self, collection: list[Snippet]) -> None:
        assert query(collection, None) == query(collection, FilterSpec())

    def test_name_ascending_case_insensitive(self, collection: list[Snippet]) -> None:
        spec = FilterSpec(sort_by="name", sort_direction="asc")
        assert ids(query(collection, spec)) == ["a", "b", "c"]

    def test_author_descending(self, collection: list[Snippet]) -> None:
        spec = FilterSpec(sort_by="author", sort_direction="desc")
        assert ids(query(collection, spec)) == ["c", "b", "a"]

    def test_created_at_ascending(self) -> None:
        snippets = [
            make_snippet("late", created_minutes=5),
            make_snippet("early", created_minutes=1),
        ]
        spec = FilterSpec(sort_by="createdAt", sort_direction="asc")
        assert ids(query(snippets, spec)) == ["early", "late"]

    def test_ties_keep_input_order_desc(self) -> None:
        """Equal updatedAt keys keep their relative input order."""
        snippets = [make_snippet(sid, minutes=5) for sid in ("first", "second", "third")]
        assert ids(query(snippets, FilterSpec())) == ["first", "second", "third"]

    def test_ties_keep_input_order_asc(self) -> None:
        snippets = [make_snippet(sid, minutes=5) for sid in ("first", "second")]
        spec = FilterSpec(sort_direction="asc")
        assert ids(query(snippets, spec)) == ["first", "second"]


class TestEngineContract:
    """Purity and edge cases."""

    def test_empty_collection(self) -> None:
        spec = FilterSpec(search="x", categories=frozenset({"y"}), sort_by="name")
        assert query([], spec) == []

    def test_input_not_mutated(self, collection: list[Snippet]) -> None:
        before = list(collection)
        query(collection, FilterSpec(sort_by="name", sort_direction="asc", search="a"))
        assert collection == before

    def test_returns_new_list(self, collection: list[Snippet]) -> None:
        assert query(collection) is not collection


class TestFilterSpecParams:
    """Building specs from request parameters."""

    def test_comma_separated_values(self) -> None:
        spec = FilterSpec.from_params(categories="x, y", tags=["t1,t2", "t3"])
        assert spec.categories == frozenset({"x", "y"})
        assert spec.tags == frozenset({"t1", "t2", "t3"})

    def test_snake_case_sort_alias(self) -> None:
        assert FilterSpec.from_params(sort_by="created_at").sort_by == "createdAt"

    def test_defaults(self) -> None:
        spec = FilterSpec.from_params()
        assert spec.sort_by == "updatedAt"
        assert spec.sort_direction == "desc"

    def test_unknown_sort_field_rejected(self) -> None:
        with pytest.raises(ValueError, match="sort field"):
            FilterSpec.from_params(sort_by="popularity")

    def test_unknown_direction_rejected(self) -> None:
        with pytest.raises(ValueError, match="sort direction"):
            FilterSpec(sort_direction="sideways")


class TestDisplayHelpers:
    def test_visible_tags_skip_deleted(self) -> None:
        live = [
            Tag(id="t1", name="forms", created_by="ann", created_at=T0),
            Tag(id="t3", name="charts", created_by="ann", created_at=T0),
        ]
        snippet = make_snippet("s", tags=["t1", "gone", "t3"])
        assert [t.name for t in visible_tags(snippet, live)] == ["forms", "charts"]

    def test_distinct_authors(self, collection: list[Snippet]) -> None:
        extra = make_snippet("d", author="Bob")
        assert distinct_authors(collection + [extra]) == ["ann@example.com", "Bob", "carol@example.com"]
