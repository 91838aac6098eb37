"""Type aliases for the localization domain.

Provides semantic type aliases used throughout the localization package
and by user code when annotating PhraseLocalization call sites.

Python 3.13+. Zero external dependencies.
"""

__all__ = [
    "LocaleCode",
    "PhraseKey",
    "ResourceId",
]

type PhraseKey = str
"""Delimited lookup key (e.g., 'app.label', 'errors.not-found')."""

type LocaleCode = str
"""BCP-47 locale code (e.g., 'en', 'pt-BR', 'zh-Hant-HK')."""

type ResourceId = str
"""Phrase resource file identifier (e.g., 'main.json', 'errors.json')."""
