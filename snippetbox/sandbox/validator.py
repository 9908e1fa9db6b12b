"""Admission checks for submitted UI-component snippets.

The validator is a bounded heuristic, not a parser: it rejects a narrow
class of obviously malformed submissions before they reach the external
sandbox runtime. Isolation itself belongs to that runtime.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional

import structlog

logger = structlog.get_logger()

REASON_EMPTY = "code must not be empty"
REASON_NO_COMPONENT = "no component definition found"
REASON_UNBALANCED = "unbalanced braces"

# Embedded markup produces slightly asymmetric brace counts in some
# expression patterns, so a small difference is tolerated.
BRACE_TOLERANCE = 2

_FUNCTION_DECL = re.compile(r"\bfunction\b")
_CONST_DECL = re.compile(r"\bconst\b")
_ARROW = "=>"
_DEFAULT_EXPORT = re.compile(r"\bexport\s+default\b|\bexport\s*\{[^}]*\bas\s+default\b")
_EDGE_BLANKS = re.compile(r"^[\s\ufeff]+|[\s\ufeff]+$")

# Detected but never fatal. Kept as an inspection point for future policy.
SENSITIVE_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("eval", re.compile(r"\beval\s*\(")),
    ("function_constructor", re.compile(r"\bnew\s+Function\s*\(")),
    ("set_timeout", re.compile(r"\bsetTimeout\s*\(")),
    ("set_interval", re.compile(r"\bsetInterval\s*\(")),
    ("document_cookie", re.compile(r"\bdocument\.cookie\b")),
    ("local_storage", re.compile(r"\blocalStorage\b")),
    ("session_storage", re.compile(r"\bsessionStorage\b")),
    ("fetch", re.compile(r"\bfetch\s*\(")),
    ("xml_http_request", re.compile(r"\bXMLHttpRequest\b")),
)


@dataclass
class ValidationResult:
    """Result of snippet validation.

    Attributes:
        valid: Whether the code passed every admission check
        reason: Human-readable rejection reason, None when valid
        flagged: Names of sensitive patterns found (informational only)
    """

    valid: bool
    reason: Optional[str] = None
    flagged: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {"valid": self.valid, "reason": self.reason, "flagged": list(self.flagged)}


def trim_code(code: str) -> str:
    """Strip surrounding whitespace and byte-order marks."""
    return _EDGE_BLANKS.sub("", code)


def has_default_export(code: str) -> bool:
    """Return True if the text contains an explicit default-export statement."""
    return _DEFAULT_EXPORT.search(code) is not None


def scan_sensitive_patterns(code: str) -> list[str]:
    """Return the names of all sensitive-API patterns present in the code."""
    return [name for name, pattern in SENSITIVE_PATTERNS if pattern.search(code)]


class SnippetValidator:
    """Validates submitted component source before it is stored.

    Checks run in order and stop at the first failure:
    1. Non-empty after trimming
    2. Some component marker present (function, const, arrow, default export)
    3. A default export or a function/constant definition present
    4. Brace counts differ by at most BRACE_TOLERANCE
    5. Sensitive-pattern scan (reported, never rejects)

    Pure and deterministic; safe to share between requests.
    """

    def __init__(self, brace_tolerance: int = BRACE_TOLERANCE) -> None:
        self._brace_tolerance = brace_tolerance

    def validate(self, code: str) -> ValidationResult:
        """Run every admission check against the submitted source.

        Args:
            code: Raw submitted source text

        Returns:
            ValidationResult with the verdict and any flagged patterns
        """
        # Check 1: empty input
        if not trim_code(code):
            logger.warning("validation_failed_empty")
            return ValidationResult(valid=False, reason=REASON_EMPTY)

        has_function = _FUNCTION_DECL.search(code) is not None
        has_const = _CONST_DECL.search(code) is not None
        has_arrow = _ARROW in code
        has_export = has_default_export(code)

        # Check 2: any plausible component marker
        if not (has_function or has_const or has_arrow or has_export):
            logger.warning("validation_failed_no_component", check="marker")
            return ValidationResult(valid=False, reason=REASON_NO_COMPONENT)

        # Check 3: export or definition
        if not has_export and not (has_function or has_const or has_arrow):
            logger.warning("validation_failed_no_component", check="definition")
            return ValidationResult(valid=False, reason=REASON_NO_COMPONENT)

        # Check 4: brace balance (heuristic)
        open_braces = code.count("{")
        close_braces = code.count("}")
        if abs(open_braces - close_braces) > self._brace_tolerance:
            logger.warning(
                "validation_failed_braces",
                open=open_braces,
                close=close_braces,
                tolerance=self._brace_tolerance,
            )
            return ValidationResult(valid=False, reason=REASON_UNBALANCED)

        # Check 5: sensitive APIs, non-fatal
        flagged = scan_sensitive_patterns(code)
        if flagged:
            logger.info("validation_sensitive_patterns", patterns=flagged)

        logger.debug("validation_success", length=len(code))
        return ValidationResult(valid=True, flagged=flagged)


_default_validator = SnippetValidator()


def validate(code: str) -> ValidationResult:
    """Validate code with the default tolerance."""
    return _default_validator.validate(code)
