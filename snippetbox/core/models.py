"""Snippet, Category and Tag entities.

Entities are plain dataclasses built from store documents. Store documents
use snake_case keys and always carry ``id``, ``created_at`` and ``updated_at``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

UNKNOWN_AUTHOR = "Unknown"

SNIPPETS = "snippets"
CATEGORIES = "categories"
TAGS = "tags"


def _as_datetime(value: Any) -> datetime:
    """Coerce a store timestamp (datetime or ISO string) to an aware datetime."""
    if isinstance(value, datetime):
        result = value
    elif isinstance(value, str):
        result = datetime.fromisoformat(value)
    else:
        raise TypeError(f"Unsupported timestamp value: {value!r}")
    if result.tzinfo is None:
        result = result.replace(tzinfo=timezone.utc)
    return result


def unique_ids(ids: Iterable[str]) -> list[str]:
    """Drop duplicate ids, keeping the first occurrence of each."""
    seen: set[str] = set()
    result: list[str] = []
    for item in ids:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


@dataclass
class Snippet:
    """A stored unit of component source plus gallery metadata.

    Attributes:
        id: Store-assigned identifier
        name: Display label
        code: Normalized source text
        author: Creator identity; legacy records default to "Unknown"
        description: Optional free text
        category: Optional single Category id
        tags: Tag ids, duplicate-free
        created_at: Fixed at creation
        updated_at: Refreshed on every mutation
    """

    id: str
    name: str
    code: str
    created_at: datetime
    updated_at: datetime
    author: str = UNKNOWN_AUTHOR
    description: str = ""
    category: Optional[str] = None
    tags: list[str] = field(default_factory=list)

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> Snippet:
        return cls(
            id=str(doc["id"]),
            name=doc.get("name") or "",
            code=doc.get("code") or "",
            created_at=_as_datetime(doc["created_at"]),
            updated_at=_as_datetime(doc["updated_at"]),
            author=doc.get("author") or UNKNOWN_AUTHOR,
            description=doc.get("description") or "",
            category=doc.get("category") or None,
            tags=unique_ids(doc.get("tags") or []),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "code": self.code,
            "author": self.author,
            "category": self.category,
            "tags": list(self.tags),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass
class Category:
    """Flat gallery category with a display colour."""

    id: str
    name: str
    color: str
    created_by: str
    created_at: datetime

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> Category:
        return cls(
            id=str(doc["id"]),
            name=doc.get("name") or "",
            color=doc.get("color") or "",
            created_by=doc.get("created_by") or UNKNOWN_AUTHOR,
            created_at=_as_datetime(doc["created_at"]),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class Tag:
    """Free-form label; many-to-many with Snippet through ``Snippet.tags``."""

    id: str
    name: str
    created_by: str
    created_at: datetime

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> Tag:
        return cls(
            id=str(doc["id"]),
            name=doc.get("name") or "",
            created_by=doc.get("created_by") or UNKNOWN_AUTHOR,
            created_at=_as_datetime(doc["created_at"]),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat(),
        }
