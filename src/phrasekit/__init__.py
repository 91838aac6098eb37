"""phrasekit - locale negotiation and nested phrase lookup.

Resolves a requested locale against the locales an application supports
(BCP-47 fallback chains and aliases), then resolves dotted keys against
per-locale phrase trees with plural selection and ``%{name}`` interpolation.

Public API:
    PhraseLocalization - Stateful session (phrases, aliases, rules, locale)
    LanguageTag - Parsed BCP-47 tag (language, script, region)
    parse_locale / canonicalize_locale / canonicalize_locales - Tag helpers
    fallback_chain - Progressively less specific forms of a tag
    resolve_locale - Pick the best supported locale for a preference list
    lookup - Resolve a key against phrase trees for ordered locales
    merge_phrases - Deep-merge phrase trees in place
    PluralRules / PluralCategory - Plural rule table and categories

Exceptions:
    PhraseKitError - Base exception class
    InvalidTagError - Malformed locale tag
    InvalidKeyError - Malformed key or context segment
    InvalidPhraseError - Phrase value that is neither string nor mapping
    AliasConflictError - Alias that would be both real and virtual

Submodules:
    phrasekit.runtime - Plural rules, phrase trees, lookup
    phrasekit.localization - Session object and phrase loaders
    phrasekit.diagnostics - Error types
"""

from .diagnostics import (
    AliasConflictError,
    InvalidKeyError,
    InvalidPhraseError,
    InvalidTagError,
    PhraseKitError,
)
from .enums import PluralCategory
from .locale_utils import LanguageTag, canonicalize_locale, canonicalize_locales, parse_locale
from .localization import PhraseLocalization
from .negotiation import fallback_chain, resolve_locale
from .runtime import PluralRules, lookup, merge_phrases

# Version information - Auto-populated from package metadata
# SINGLE SOURCE OF TRUTH: pyproject.toml [project] version
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _get_version

try:
    __version__ = _get_version("phrasekit")
except PackageNotFoundError:
    # Development mode: package not installed yet
    __version__ = "0.0.0+dev"

__all__ = [
    "AliasConflictError",
    "InvalidKeyError",
    "InvalidPhraseError",
    "InvalidTagError",
    "LanguageTag",
    "PhraseKitError",
    "PhraseLocalization",
    "PluralCategory",
    "PluralRules",
    "__version__",
    "canonicalize_locale",
    "canonicalize_locales",
    "fallback_chain",
    "lookup",
    "merge_phrases",
    "parse_locale",
    "resolve_locale",
]
