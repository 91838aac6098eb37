"""Phrase runtime package.

Provides plural rule tables, phrase tree validation/merging and key lookup.
Depends on locale_utils for tag canonicalization.

Python 3.13+.
"""

from .phrases import PhraseTree, clone_phrases, merge_phrases, validate_phrases
from .plural_rules import DEFAULT_RULES, PluralRule, PluralRules, cldr_rule, select_plural_category
from .resolver import interpolate, lookup, resolve_phrase, validate_key

__all__ = [
    "DEFAULT_RULES",
    "PhraseTree",
    "PluralRule",
    "PluralRules",
    "cldr_rule",
    "clone_phrases",
    "interpolate",
    "lookup",
    "merge_phrases",
    "resolve_phrase",
    "select_plural_category",
    "validate_key",
    "validate_phrases",
]
