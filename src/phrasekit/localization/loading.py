"""Phrase loading infrastructure for PhraseLocalization.

Provides the protocol for phrase loaders, a filesystem implementation reading
JSON documents with path-traversal protection, and result/summary data
structures for tracking load attempts.

Components:
    PhraseLoader - Protocol for loading phrase trees (structural typing)
    PathPhraseLoader - Disk-based JSON loader with path-traversal prevention
    FallbackInfo - Immutable record of a locale fallback event
    ResourceLoadResult - Immutable result of a single resource load attempt
    LoadSummary - Immutable aggregate of the results of one load() call

Python 3.13+.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from phrasekit.diagnostics import InvalidPhraseError
from phrasekit.enums import LoadStatus
from phrasekit.localization.types import LocaleCode, PhraseKey, ResourceId
from phrasekit.runtime.phrases import PhraseTree, validate_phrases

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Protocol
    "PhraseLoader",
    # Concrete loader
    "PathPhraseLoader",
    # Fallback observability
    "FallbackInfo",
    # Load result types
    "ResourceLoadResult",
    "LoadSummary",
]


class PhraseLoader(Protocol):
    """Protocol for loading phrase trees for specific locales.

    Implementations must provide a load() method returning the phrase tree
    for a locale and resource identifier, and raise FileNotFoundError when
    the resource does not exist for that locale.

    Example:
        >>> class DictLoader:
        ...     def __init__(self, data):
        ...         self.data = data
        ...     def load(self, locale, resource_id):
        ...         try:
        ...             return self.data[locale][resource_id]
        ...         except KeyError:
        ...             raise FileNotFoundError(resource_id) from None
        ...     def describe_path(self, locale, resource_id):
        ...         return f"memory://{locale}/{resource_id}"
    """

    def load(self, locale: LocaleCode, resource_id: ResourceId) -> PhraseTree:
        """Load the phrase tree of resource_id for locale.

        Raises:
            FileNotFoundError: If resource doesn't exist for this locale
            OSError: If the resource cannot be read
            ValueError: If the resource cannot be decoded
        """

    def describe_path(self, locale: LocaleCode, resource_id: ResourceId) -> str:
        """Return human-readable path for diagnostics."""
        return f"{locale}/{resource_id}"


@dataclass(frozen=True, slots=True)
class PathPhraseLoader:
    """File system loader for JSON phrase files using path templates.

    Implements PhraseLoader. Uses a {locale} placeholder in the path template
    for locale substitution; each resource is a UTF-8 JSON object whose keys
    follow the context grammar.

    Security:
        Locale codes containing path separators or ".." are rejected.
        Resource IDs containing ".." or absolute paths are rejected.
        All resolved paths are validated against a fixed root directory.

    Example:
        >>> loader = PathPhraseLoader("locales/{locale}")
        >>> phrases = loader.load("en", "main.json")
        # Loads from: locales/en/main.json

    Attributes:
        base_path: Path template with {locale} placeholder
        root_dir: Fixed root directory for path traversal validation.
                  Defaults to the static prefix of base_path.
    """

    base_path: str
    root_dir: str | None = None
    _resolved_root: Path = field(init=False, repr=False)

    def __post_init__(self) -> None:
        """Cache resolved root directory and validate the template.

        Raises:
            ValueError: If base_path does not contain {locale} placeholder
        """
        if "{locale}" not in self.base_path:
            msg = (
                f"base_path must contain '{{locale}}' placeholder for locale substitution, "
                f"got: '{self.base_path}'"
            )
            raise ValueError(msg)

        if self.root_dir is not None:
            resolved = Path(self.root_dir).resolve()
        else:
            static_prefix = self.base_path.split("{locale}")[0].rstrip("/\\")
            resolved = Path(static_prefix).resolve() if static_prefix else Path.cwd().resolve()
        object.__setattr__(self, "_resolved_root", resolved)

    @staticmethod
    def _validate_locale(locale: LocaleCode) -> None:
        if not locale:
            msg = "Locale code cannot be empty"
            raise ValueError(msg)
        if ".." in locale:
            msg = f"Path traversal sequences not allowed in locale: '{locale}'"
            raise ValueError(msg)
        if "/" in locale or "\\" in locale:
            msg = f"Path separators not allowed in locale: '{locale}'"
            raise ValueError(msg)

    @staticmethod
    def _validate_resource_id(resource_id: ResourceId) -> None:
        if resource_id.strip() != resource_id:
            msg = f"Resource ID contains leading/trailing whitespace: {resource_id!r}"
            raise ValueError(msg)
        if Path(resource_id).is_absolute() or resource_id.startswith(("/", "\\")):
            msg = f"Absolute paths not allowed in resource_id: '{resource_id}'"
            raise ValueError(msg)
        if ".." in resource_id:
            msg = f"Path traversal sequences not allowed in resource_id: '{resource_id}'"
            raise ValueError(msg)

    def describe_path(self, locale: LocaleCode, resource_id: ResourceId) -> str:
        """Return the locale-substituted path of a resource."""
        return f"{self.base_path.replace('{locale}', locale)}/{resource_id}"

    def load(self, locale: LocaleCode, resource_id: ResourceId) -> PhraseTree:
        """Load and validate a JSON phrase file from disk.

        Args:
            locale: Locale code to substitute in path template
            resource_id: JSON filename (e.g., 'main.json')

        Returns:
            Validated phrase tree

        Raises:
            ValueError: If locale or resource_id is unsafe, or JSON is malformed
            FileNotFoundError: If file doesn't exist
            OSError: If file cannot be read
            InvalidKeyError: If a key fails the context grammar
            InvalidPhraseError: If the document is not a JSON object of
                strings and objects
        """
        self._validate_locale(locale)
        self._validate_resource_id(resource_id)

        # replace() rather than format() so other braces in the template survive
        base_dir = Path(self.base_path.replace("{locale}", locale)).resolve()
        full_path = (base_dir / resource_id).resolve()

        if not full_path.is_relative_to(self._resolved_root):
            msg = (
                f"Path traversal detected: resolved path escapes root directory. "
                f"locale='{locale}', resource_id='{resource_id}'"
            )
            raise ValueError(msg)

        document = json.loads(full_path.read_text(encoding="utf-8"))
        if not isinstance(document, Mapping):
            raise InvalidPhraseError((), document)
        validate_phrases(document)
        return document


@dataclass(frozen=True, slots=True)
class FallbackInfo:
    """Information about a locale fallback event.

    Provided to the on_fallback callback when PhraseLocalization resolves a
    key from a locale other than the first candidate.

    Attributes:
        requested_locale: The first locale that was tried
        resolved_locale: The locale that actually contained the phrase
        key: The key that was resolved
    """

    requested_locale: LocaleCode
    resolved_locale: LocaleCode
    key: PhraseKey


@dataclass(frozen=True, slots=True)
class ResourceLoadResult:
    """Result of loading a single phrase resource.

    Attributes:
        locale: Locale code for this resource
        resource_id: Resource identifier (e.g., 'main.json')
        status: Load status (success, not_found, error)
        error: Exception if status is ERROR, None otherwise
        source_path: Human-readable path to resource (if available)
    """

    locale: LocaleCode
    resource_id: ResourceId
    status: LoadStatus
    error: Exception | None = None
    source_path: str | None = None

    @property
    def is_success(self) -> bool:
        """Check if resource loaded successfully."""
        return self.status == LoadStatus.SUCCESS

    @property
    def is_not_found(self) -> bool:
        """Check if resource was not found (expected for optional locales)."""
        return self.status == LoadStatus.NOT_FOUND

    @property
    def is_error(self) -> bool:
        """Check if resource load failed with an error."""
        return self.status == LoadStatus.ERROR


@dataclass(frozen=True, slots=True)
class LoadSummary:
    """Immutable aggregate of resource load results.

    Example:
        >>> loader = PathPhraseLoader("locales/{locale}")
        >>> summary = l10n.load(loader, ["en", "fr"], ["main.json"])
        >>> for result in summary.get_errors():
        ...     print(f"Failed: {result.source_path}: {result.error}")

    Attributes:
        results: All individual load results (immutable tuple)
    """

    results: tuple[ResourceLoadResult, ...]

    def __repr__(self) -> str:
        """Return string representation for debugging."""
        return (
            f"LoadSummary(total={self.total_attempted}, "
            f"ok={self.successful}, "
            f"not_found={self.not_found}, "
            f"errors={self.errors})"
        )

    @property
    def total_attempted(self) -> int:
        """Total number of load attempts."""
        return len(self.results)

    @property
    def successful(self) -> int:
        """Number of successful loads."""
        return sum(1 for r in self.results if r.is_success)

    @property
    def not_found(self) -> int:
        """Number of resources not found."""
        return sum(1 for r in self.results if r.is_not_found)

    @property
    def errors(self) -> int:
        """Number of load errors."""
        return sum(1 for r in self.results if r.is_error)

    @property
    def loaded_locales(self) -> tuple[LocaleCode, ...]:
        """Locales that gained phrases from at least one resource, in load order."""
        return tuple(dict.fromkeys(r.locale for r in self.results if r.is_success))

    @property
    def missing_locales(self) -> tuple[LocaleCode, ...]:
        """Locales for which no resource loaded, in load order.

        These locales have no phrases from this load and will not be chosen
        by set_locale unless phrases are registered another way.
        """
        loaded = set(self.loaded_locales)
        return tuple(dict.fromkeys(r.locale for r in self.results if r.locale not in loaded))

    def get_errors(self) -> tuple[ResourceLoadResult, ...]:
        """Get all results with errors."""
        return tuple(r for r in self.results if r.is_error)

    def get_not_found(self) -> tuple[ResourceLoadResult, ...]:
        """Get all results where resource was not found."""
        return tuple(r for r in self.results if r.is_not_found)
