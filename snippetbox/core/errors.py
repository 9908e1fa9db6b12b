"""Domain exceptions raised by the snippet services."""

from __future__ import annotations


class SnippetBoxError(Exception):
    """Base class for all domain errors."""


class SnippetRejected(SnippetBoxError):
    """Submitted input failed admission; ``reason`` is shown to the user verbatim."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class NotFoundError(SnippetBoxError):
    """A document addressed by id does not exist."""

    def __init__(self, collection: str, doc_id: str) -> None:
        super().__init__(f"{collection}/{doc_id} not found")
        self.collection = collection
        self.doc_id = doc_id


class PermissionDenied(SnippetBoxError):
    """The caller lacks the capability for the requested action."""

    def __init__(self, action: str) -> None:
        super().__init__(f"not permitted: {action}")
        self.action = action


class AuthenticationRequired(PermissionDenied):
    """The action needs a signed-in identity."""
