"""Declarative manifest assembly for the external sandbox runtime.

The builder performs no validation: it trusts that its input already went
through the validator and the normalizer.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Optional

DEFAULT_CSS_FRAMEWORK_URL = "https://cdn.tailwindcss.com"

TEMPLATE = "react"
THEME = "light"
ENTRY_FILE = "/App.js"
BOOTSTRAP_FILE = "/index.js"

# Runtime library and its renderer, pinned by semver range.
RUNTIME_DEPENDENCIES: dict[str, str] = {
    "react": "^18.2.0",
    "react-dom": "^18.2.0",
}

# Available to every snippet without declaring it.
DEFAULT_EXTRA_DEPENDENCIES: dict[str, str] = {
    "lucide-react": "^0.294.0",
}

_BOOTSTRAP_TEMPLATE = """import React from 'react';
import ReactDOM from 'react-dom/client';
import App from './App';

const loadCssFramework = () => {
  return new Promise((resolve) => {
    if (window.tailwind || document.querySelector('script[data-css-framework]')) {
      resolve();
      return;
    }
    const script = document.createElement('script');
    script.src = '__CSS_URL__';
    script.setAttribute('data-css-framework', 'true');
    script.onload = () => resolve();
    script.onerror = () => resolve();
    document.head.appendChild(script);
  });
};

loadCssFramework().then(() => {
  const root = ReactDOM.createRoot(document.getElementById('root'));
  root.render(React.createElement(App));
});
"""


@dataclass(frozen=True)
class ManifestOptions:
    """Runtime options for a manifest build.

    The defaults are the locked-down preview layout used by the public
    view route: no editor, no tabs, no navigator, a single full-viewport
    preview pane.
    """

    dependencies: dict[str, str] = field(default_factory=dict)
    show_editor: bool = False
    show_tabs: bool = False
    show_navigator: bool = False
    show_line_numbers: bool = False
    show_inline_errors: bool = True
    show_refresh_button: bool = False
    closable_tabs: bool = False
    wrap_content: bool = True
    css_framework_url: str = DEFAULT_CSS_FRAMEWORK_URL

    def locked(self) -> ManifestOptions:
        """Return a copy with every chrome flag forced to the preview-only layout.

        Only the dependency table and the CSS source survive.
        """
        return replace(
            ManifestOptions(),
            dependencies=dict(self.dependencies),
            css_framework_url=self.css_framework_url,
        )


@dataclass
class SandboxManifest:
    """Virtual file set, dependency pins and display flags for one snippet."""

    template: str
    files: dict[str, str]
    dependencies: dict[str, str]
    options: dict[str, Any]
    theme: str = THEME

    def to_dict(self) -> dict[str, Any]:
        return {
            "template": self.template,
            "theme": self.theme,
            "files": dict(self.files),
            "customSetup": {"dependencies": dict(self.dependencies)},
            "options": dict(self.options),
        }


def render_bootstrap(css_framework_url: str) -> str:
    """Return the bootstrap entry that loads the CSS framework then mounts App."""
    return _BOOTSTRAP_TEMPLATE.replace("__CSS_URL__", css_framework_url)


def _display_flags(options: ManifestOptions) -> dict[str, Any]:
    if options.show_editor:
        editor = {"editorHeight": None, "editorWidthPercentage": 50, "layout": "preview-with-editor"}
    else:
        editor = {"editorHeight": 0, "editorWidthPercentage": 0, "layout": "preview"}
    return {
        "showNavigator": options.show_navigator,
        "showTabs": options.show_tabs,
        "showLineNumbers": options.show_line_numbers,
        "showInlineErrors": options.show_inline_errors,
        "showRefreshButton": options.show_refresh_button,
        "closableTabs": options.closable_tabs,
        "wrapContent": options.wrap_content,
        **editor,
    }


def build_manifest(normalized_code: str, options: Optional[ManifestOptions] = None) -> SandboxManifest:
    """Assemble the manifest handed to the sandbox runtime.

    Args:
        normalized_code: Output of normalize(), placed verbatim in the entry file
        options: Runtime options; defaults to the locked-down preview layout

    Returns:
        A fresh SandboxManifest. Same inputs always give an equal manifest.
    """
    options = options or ManifestOptions()

    dependencies = dict(DEFAULT_EXTRA_DEPENDENCIES)
    dependencies.update(options.dependencies)
    # The runtime pins always win over snippet-declared versions.
    dependencies.update(RUNTIME_DEPENDENCIES)

    return SandboxManifest(
        template=TEMPLATE,
        files={
            ENTRY_FILE: normalized_code,
            BOOTSTRAP_FILE: render_bootstrap(options.css_framework_url),
        },
        dependencies=dependencies,
        options=_display_flags(options),
    )
