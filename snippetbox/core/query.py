"""Filter/sort query engine over a snapshot of the snippet collection.

Predicates combine with AND across fields and OR within a multi-valued
field. The engine never mutates its input and always returns a fully
materialized list.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Sequence, Union

from snippetbox.core.models import Snippet, Tag

SORT_FIELDS = ("updatedAt", "createdAt", "name", "author")
SORT_DIRECTIONS = ("asc", "desc")

DEFAULT_SORT_BY = "updatedAt"
DEFAULT_SORT_DIRECTION = "desc"

_SORT_KEYS: dict[str, Callable[[Snippet], Any]] = {
    "updatedAt": lambda s: s.updated_at.timestamp(),
    "createdAt": lambda s: s.created_at.timestamp(),
    "name": lambda s: s.name.casefold(),
    "author": lambda s: s.author.casefold(),
}

_SORT_ALIASES = {
    "updated_at": "updatedAt",
    "created_at": "createdAt",
}


def _as_set(values: Union[None, str, Iterable[str]]) -> Optional[frozenset[str]]:
    """Turn a raw multi-value parameter into a set; empty means absent."""
    if values is None:
        return None
    if isinstance(values, str):
        items = values.split(",")
    else:
        items = [part for value in values for part in str(value).split(",")]
    cleaned = frozenset(item.strip() for item in items if item.strip())
    return cleaned or None


@dataclass(frozen=True)
class FilterSpec:
    """Search term, category/tag/author sets and sort directive.

    Every field is optional; an absent (or empty) field imposes no constraint.
    """

    search: Optional[str] = None
    categories: Optional[frozenset[str]] = None
    tags: Optional[frozenset[str]] = None
    authors: Optional[frozenset[str]] = None
    sort_by: str = DEFAULT_SORT_BY
    sort_direction: str = DEFAULT_SORT_DIRECTION

    def __post_init__(self) -> None:
        if self.sort_by not in SORT_FIELDS:
            raise ValueError(f"Unknown sort field: {self.sort_by} (expected one of {', '.join(SORT_FIELDS)})")
        if self.sort_direction not in SORT_DIRECTIONS:
            raise ValueError(f"Unknown sort direction: {self.sort_direction} (expected asc or desc)")

    @classmethod
    def from_params(
        cls,
        search: Optional[str] = None,
        categories: Union[None, str, Iterable[str]] = None,
        tags: Union[None, str, Iterable[str]] = None,
        authors: Union[None, str, Iterable[str]] = None,
        sort_by: Optional[str] = None,
        sort_direction: Optional[str] = None,
    ) -> FilterSpec:
        """Build a FilterSpec from raw request parameters.

        Multi-valued fields accept lists and/or comma-separated strings.
        Sort values accept both camelCase and snake_case spellings.

        Raises:
            ValueError: If the sort field or direction is unknown
        """
        sort_by = sort_by or DEFAULT_SORT_BY
        return cls(
            search=search,
            categories=_as_set(categories),
            tags=_as_set(tags),
            authors=_as_set(authors),
            sort_by=_SORT_ALIASES.get(sort_by, sort_by),
            sort_direction=(sort_direction or DEFAULT_SORT_DIRECTION).lower(),
        )

    @property
    def search_term(self) -> Optional[str]:
        """Lower-cased trimmed search term, None when blank."""
        if self.search is None:
            return None
        term = self.search.strip().casefold()
        return term or None


def _matches_search(snippet: Snippet, term: str) -> bool:
    return any(
        term in value.casefold()
        for value in (snippet.name, snippet.description, snippet.author)
        if value
    )


def _predicates(spec: FilterSpec) -> list[Callable[[Snippet], bool]]:
    predicates: list[Callable[[Snippet], bool]] = []

    term = spec.search_term
    if term is not None:
        predicates.append(lambda s: _matches_search(s, term))
    if spec.categories:
        categories = spec.categories
        predicates.append(lambda s: s.category is not None and s.category in categories)
    if spec.tags:
        tags = spec.tags
        predicates.append(lambda s: not tags.isdisjoint(s.tags))
    if spec.authors:
        authors = spec.authors
        predicates.append(lambda s: s.author in authors)

    return predicates


def query(all_snippets: Sequence[Snippet], spec: Optional[FilterSpec] = None) -> list[Snippet]:
    """Filter and order a snapshot of snippets.

    Args:
        all_snippets: Snapshot of the collection (not modified)
        spec: Filter and sort directive; None behaves like FilterSpec()

    Returns:
        New list of matching snippets. Sorting is stable, so snippets with
        equal keys keep their input order in both directions.
    """
    spec = spec or FilterSpec()
    predicates = _predicates(spec)

    matched = [s for s in all_snippets if all(p(s) for p in predicates)]

    # sorted(reverse=True) keeps equal elements in their original order
    return sorted(
        matched,
        key=_SORT_KEYS[spec.sort_by],
        reverse=spec.sort_direction == "desc",
    )


def visible_tags(snippet: Snippet, live_tags: Iterable[Tag]) -> list[Tag]:
    """Resolve a snippet's tag ids to live tags, skipping deleted ones."""
    by_id = {tag.id: tag for tag in live_tags}
    return [by_id[tag_id] for tag_id in snippet.tags if tag_id in by_id]


def distinct_authors(snippets: Iterable[Snippet]) -> list[str]:
    """Return each author once, ordered case-insensitively."""
    return sorted({s.author for s in snippets}, key=lambda a: (a.casefold(), a))
