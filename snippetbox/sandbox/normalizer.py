"""Canonicalization of stored snippet source.

normalize() is total and idempotent. It is applied once on submission and
again on every view, so already-normalized text must pass through unchanged.
"""

from __future__ import annotations

import re
from typing import Optional

import structlog

from snippetbox.sandbox.validator import has_default_export, trim_code

logger = structlog.get_logger()

# Entry-point name the sandbox bootstrap falls back to.
DEFAULT_ENTRY_SYMBOL = "App"

# Known upstream truncation artifact: the leading 'f' of a function declaration is lost.
TRUNCATED_FUNCTION_PREFIX = "unction "

_IDENT = r"([A-Za-z_$][\w$]*)"

# Priority-ordered, first match wins.
ENTRY_SYMBOL_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("function_declaration", re.compile(rf"\bfunction\s+{_IDENT}\s*[(<]")),
    (
        "const_binding",
        re.compile(
            rf"\bconst\s+{_IDENT}\s*=\s*"
            r"(?:\(|async\b|function\b|[A-Za-z_$][\w$]*\s*=>"
            r"|(?:React\.)?memo\s*[(<]|(?:React\.)?forwardRef\s*[(<])"
        ),
    ),
    ("default_exported_function", re.compile(rf"\bexport\s+default\s+function\s+{_IDENT}")),
)


def repair_truncation(code: str) -> str:
    """Restore the dropped 'f' of a leading function declaration."""
    if code.startswith(TRUNCATED_FUNCTION_PREFIX):
        logger.debug("normalizer_repaired_truncation")
        return "f" + code
    return code


def find_entry_symbol(code: str) -> Optional[str]:
    """Return the component name the default export should reference.

    Args:
        code: Trimmed source text

    Returns:
        Name from the first matching pattern, or None if nothing matched
    """
    for kind, pattern in ENTRY_SYMBOL_PATTERNS:
        match = pattern.search(code)
        if match:
            logger.debug("entry_symbol_found", kind=kind, name=match.group(1))
            return match.group(1)
    return None


def normalize(code: str) -> str:
    """Return canonical source ready for packaging into a sandbox manifest.

    Steps: trim, repair the truncated-declaration artifact, then append
    ``export default <Name>;`` when no default export exists. When no entry
    symbol can be resolved the name falls back to ``App``; the snippet then
    fails inside the sandbox runtime, not here.
    """
    text = repair_truncation(trim_code(code))

    if has_default_export(text):
        return text

    name = find_entry_symbol(text)
    if name is None:
        logger.info("entry_symbol_fallback", name=DEFAULT_ENTRY_SYMBOL)
        name = DEFAULT_ENTRY_SYMBOL

    export_line = f"export default {name};"
    return f"{text}\n\n{export_line}" if text else export_line
