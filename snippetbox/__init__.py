"""SnippetBox: shareable UI-component snippets served through a sandboxed runtime."""

__version__ = "0.1.0"
