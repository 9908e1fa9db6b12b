"""Tests for sandbox manifest assembly."""

from __future__ import annotations

from snippetbox.sandbox.manifest import (
    BOOTSTRAP_FILE,
    DEFAULT_CSS_FRAMEWORK_URL,
    ENTRY_FILE,
    ManifestOptions,
    build_manifest,
    render_bootstrap,
)
from snippetbox.sandbox.normalizer import normalize


CODE = normalize("function Hello() { return <h1>Hello</h1>; }")


class TestFiles:
    """Virtual file set."""

    def test_entry_file_is_verbatim(self) -> None:
        manifest = build_manifest(CODE)
        assert manifest.files[ENTRY_FILE] == CODE

    def test_bootstrap_loads_css_then_mounts(self) -> None:
        bootstrap = build_manifest(CODE).files[BOOTSTRAP_FILE]
        assert DEFAULT_CSS_FRAMEWORK_URL in bootstrap
        assert "import App from './App'" in bootstrap
        assert "script.onerror = () => resolve()" in bootstrap
        assert bootstrap.index("loadCssFramework().then") < bootstrap.index("root.render")

    def test_bootstrap_load_is_idempotent(self) -> None:
        """The loader skips injection when the framework is already present."""
        bootstrap = render_bootstrap("https://cdn.example/css.js")
        assert "if (window.tailwind || document.querySelector" in bootstrap
        assert "https://cdn.example/css.js" in bootstrap

    def test_custom_css_url(self) -> None:
        manifest = build_manifest(CODE, ManifestOptions(css_framework_url="https://cdn.example/x.js"))
        assert "https://cdn.example/x.js" in manifest.files[BOOTSTRAP_FILE]


class TestDependencies:
    """Pinned dependency table."""

    def test_runtime_pins_present(self) -> None:
        deps = build_manifest(CODE).dependencies
        assert deps["react"] == "^18.2.0"
        assert deps["react-dom"] == "^18.2.0"
        assert deps["lucide-react"] == "^0.294.0"

    def test_extra_dependencies_added(self) -> None:
        manifest = build_manifest(CODE, ManifestOptions(dependencies={"date-fns": "^3.0.0"}))
        assert manifest.dependencies["date-fns"] == "^3.0.0"

    def test_runtime_pins_cannot_be_overridden(self) -> None:
        manifest = build_manifest(CODE, ManifestOptions(dependencies={"react": "^16.0.0"}))
        assert manifest.dependencies["react"] == "^18.2.0"


class TestDisplayFlags:
    """Preview-only layout."""

    def test_defaults_hide_all_chrome(self) -> None:
        flags = build_manifest(CODE).options
        assert flags["layout"] == "preview"
        assert flags["editorHeight"] == 0
        assert flags["editorWidthPercentage"] == 0
        assert flags["showTabs"] is False
        assert flags["showNavigator"] is False
        assert flags["showRefreshButton"] is False

    def test_editor_flag_changes_layout(self) -> None:
        flags = build_manifest(CODE, ManifestOptions(show_editor=True, show_tabs=True)).options
        assert flags["layout"] == "preview-with-editor"
        assert flags["showTabs"] is True

    def test_locked_resets_chrome_keeps_dependencies(self) -> None:
        options = ManifestOptions(show_editor=True, show_tabs=True, dependencies={"zod": "^3.22.0"})
        locked = options.locked()
        assert locked.show_editor is False
        assert locked.show_tabs is False
        assert locked.dependencies == {"zod": "^3.22.0"}


class TestDeterminism:
    def test_same_inputs_equal_manifests(self) -> None:
        first = build_manifest(CODE)
        second = build_manifest(CODE)
        assert first is not second
        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_to_dict_shape(self) -> None:
        data = build_manifest(CODE).to_dict()
        assert data["template"] == "react"
        assert set(data["files"]) == {ENTRY_FILE, BOOTSTRAP_FILE}
        assert "dependencies" in data["customSetup"]
