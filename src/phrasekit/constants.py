"""Shared constants for phrasekit.

Centralizes the grammar fragments and defaults used by the locale and phrase
layers. Placing them here avoids circular imports between ``locale_utils``,
``negotiation`` and ``runtime``.

Constants are grouped by domain:
- Key grammar: context segments, delimiter, interpolation placeholders
- Locale defaults: fallback locale, cache bounds

Python 3.13+. Zero external dependencies.
"""

import re

# ruff: noqa: RUF022 - __all__ organized by category for readability
__all__ = [
    # Key grammar
    "CONTEXT_CHARACTERS",
    "CONTEXT_PATTERN",
    "DEFAULT_DELIMITER",
    "INTERPOLATION_PATTERN",
    # Locale defaults
    "DEFAULT_LOCALE",
    "MAX_LOCALE_CACHE_SIZE",
]

# ============================================================================
# KEY GRAMMAR
# ============================================================================

CONTEXT_CHARACTERS = r"[A-Za-z0-9_-]+"
"""Grammar for a single context segment of a key or phrase tree."""

CONTEXT_PATTERN: re.Pattern[str] = re.compile(CONTEXT_CHARACTERS)
"""Compiled context segment grammar. Always used with ``fullmatch``."""

DEFAULT_DELIMITER = "."
"""Separator between context segments in a lookup key."""

INTERPOLATION_PATTERN: re.Pattern[str] = re.compile(r"%\{([^}]*)\}")
"""Placeholder syntax ``%{name}``. Group 1 captures the variable name."""

# ============================================================================
# LOCALE DEFAULTS
# ============================================================================

DEFAULT_LOCALE = "en"
"""Fallback locale used by PhraseLocalization when none is configured."""

MAX_LOCALE_CACHE_SIZE = 256
"""Upper bound for the parsed LanguageTag and Babel Locale caches."""
