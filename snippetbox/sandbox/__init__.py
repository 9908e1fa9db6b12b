"""Sandbox: admission validation, normalization, runtime manifest."""

from snippetbox.sandbox.manifest import ManifestOptions, SandboxManifest, build_manifest
from snippetbox.sandbox.normalizer import normalize
from snippetbox.sandbox.validator import SnippetValidator, ValidationResult, validate

__all__ = [
    "SnippetValidator",
    "ValidationResult",
    "validate",
    "normalize",
    "ManifestOptions",
    "SandboxManifest",
    "build_manifest",
]
