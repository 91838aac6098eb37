"""Session-level localization package for PhraseLocalization.

Provides the stateful session object, phrase loading infrastructure and the
type aliases used at call sites.

Submodules:
    types        - PEP 695 type aliases (PhraseKey, LocaleCode, ResourceId)
    loading      - PhraseLoader protocol, PathPhraseLoader, FallbackInfo,
                   ResourceLoadResult, LoadSummary
    orchestrator - PhraseLocalization (session state and change notification)

Python 3.13+.
"""

# ruff: noqa: RUF022 - __all__ organized by category for readability

from phrasekit.enums import LoadStatus
from phrasekit.localization.loading import (
    FallbackInfo,
    LoadSummary,
    PathPhraseLoader,
    PhraseLoader,
    ResourceLoadResult,
)
from phrasekit.localization.orchestrator import PhraseLocalization
from phrasekit.localization.types import LocaleCode, PhraseKey, ResourceId

__all__ = [
    # Session object
    "PhraseLocalization",
    # Loader protocol and implementations
    "PhraseLoader",
    "PathPhraseLoader",
    # Load tracking
    "LoadStatus",
    "LoadSummary",
    "ResourceLoadResult",
    # Fallback observability
    "FallbackInfo",
    # Type aliases for user code type annotations
    "LocaleCode",
    "PhraseKey",
    "ResourceId",
]
