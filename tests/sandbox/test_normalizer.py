"""Tests for the normalizer: truncation repair and export inference."""

from __future__ import annotations

import re

import pytest

from snippetbox.sandbox.normalizer import (
    DEFAULT_ENTRY_SYMBOL,
    find_entry_symbol,
    normalize,
    repair_truncation,
)
from snippetbox.sandbox.validator import validate


def count_default_exports(code: str) -> int:
    return len(re.findall(r"\bexport\s+default\b|\bexport\s*\{[^}]*\bas\s+default\b", code))


VALID_SAMPLES = [
    "function Foo(){ return null }",
    "   const Card = () => <div>card</div>;   ",
    "const Memo = React.memo(function Inner() { return null; });",
    "const Input = React.forwardRef((props, ref) => <input ref={ref} />);",
    "export default function Page() { return <main />; }",
    "(props) => <div>{props.label}</div>",
    "const List = <T,>(props) => null;\nfunction helper(x) { return x; }",
    "const Greeting = name => <p>Hi {name}</p>;",
    "function Foo() { return null; }\nexport { Foo as default };",
    "\ufeffconst Bom = () => null;",
]

# Truncated text fails validation but must still normalize idempotently.
SAMPLES = VALID_SAMPLES + ["unction Foo(){ return null }"]


class TestTruncationRepair:
    """The dropped leading 'f' of a function declaration is restored."""

    def test_repairs_prefix(self) -> None:
        """normalize() output starts with the repaired declaration."""
        assert normalize("unction Foo(){ return null }").startswith("function Foo")

    def test_repair_after_trim(self) -> None:
        """Leading whitespace is trimmed before the prefix check."""
        assert normalize("\n   unction Foo() { return null }").startswith("function Foo")

    def test_repair_is_literal(self) -> None:
        """Other misspellings are left alone."""
        assert repair_truncation("nction Foo() {}") == "nction Foo() {}"
        assert repair_truncation("unctional Foo") == "unctional Foo"

    def test_repair_not_reapplied(self) -> None:
        """Repaired text no longer matches the artifact prefix."""
        once = repair_truncation("unction Foo() {}")
        assert repair_truncation(once) == once


class TestEntrySymbol:
    """Priority-ordered entry-symbol resolution."""

    def test_function_declaration(self) -> None:
        assert find_entry_symbol("function Foo() {}") == "Foo"

    def test_generic_function_declaration(self) -> None:
        assert find_entry_symbol("function Table<T>(props: Props<T>) {}") == "Table"

    def test_const_arrow(self) -> None:
        assert find_entry_symbol("const Card = () => null;") == "Card"

    def test_const_single_param_arrow(self) -> None:
        assert find_entry_symbol("const Greeting = name => null;") == "Greeting"

    def test_const_function_expression(self) -> None:
        assert find_entry_symbol("const Legacy = function () { return null; };") == "Legacy"

    def test_const_memo_wrapper(self) -> None:
        assert find_entry_symbol("const Fast = React.memo(Inner);") == "Fast"
        assert find_entry_symbol("const Fast = memo(Inner);") == "Fast"

    def test_const_forward_ref_wrapper(self) -> None:
        assert find_entry_symbol("const Field = forwardRef((p, r) => null);") == "Field"

    def test_const_plain_value_ignored(self) -> None:
        """A constant that is not a component does not resolve."""
        assert find_entry_symbol("const LIMIT = 10;") is None

    def test_function_pattern_wins_over_const(self) -> None:
        """First pattern in priority order wins, regardless of position."""
        code = "const App = () => <Row />;\nfunction Row() { return null; }"
        assert find_entry_symbol(code) == "Row"

    def test_default_exported_function_resolves(self) -> None:
        assert find_entry_symbol("export default function Page() {}") == "Page"


class TestExportInference:
    """A default export is appended when missing."""

    def test_appends_export(self) -> None:
        result = normalize("function Foo() { return null; }")
        assert result == "function Foo() { return null; }\n\nexport default Foo;"

    def test_existing_export_untouched(self) -> None:
        code = "function Foo() { return null; }\nexport default Foo;"
        assert normalize(code) == code

    def test_export_clause_untouched(self) -> None:
        """An `export { X as default }` clause is not doubled."""
        code = "function Foo() { return null; }\nexport { Foo as default };"
        assert normalize(code) == code

    def test_byte_order_mark_trimmed(self) -> None:
        assert normalize("\ufeffconst Bom = () => null;") == "const Bom = () => null;\n\nexport default Bom;"

    def test_fallback_to_app(self) -> None:
        """Unresolvable entry symbols fall back to App."""
        result = normalize("(props) => <div>{props.label}</div>")
        assert result.endswith(f"export default {DEFAULT_ENTRY_SYMBOL};")

    def test_trims_surrounding_whitespace(self) -> None:
        result = normalize("\n\n  const Card = () => null;  \n")
        assert result.startswith("const Card")
        assert result.endswith("export default Card;")


class TestNormalizerProperties:
    """Idempotence and the single-export invariant."""

    @pytest.mark.parametrize("code", SAMPLES)
    def test_idempotent(self, code: str) -> None:
        """normalize(normalize(x)) == normalize(x)."""
        once = normalize(code)
        assert normalize(once) == once

    @pytest.mark.parametrize("code", VALID_SAMPLES)
    def test_exactly_one_default_export(self, code: str) -> None:
        """Every accepted snippet ends up with exactly one default export."""
        assert validate(code).valid
        assert count_default_exports(normalize(code)) == 1

    def test_empty_input_is_total(self) -> None:
        """Never raises, even on input the validator would reject."""
        result = normalize("   ")
        assert result == "export default App;"
        assert normalize(result) == result
