"""Phrase lookup: key traversal, plural selection and interpolation.

Resolution of a key against an ordered list of candidate locales:

1. Split the key on the delimiter and walk the locale's phrase tree one
   segment at a time. Any miss abandons this locale.
2. If the walk ends on a branch and ``data["count"]`` is a number, select a
   plural category with the locale's rule and descend into that branch.
3. If the walk ends on a leaf string, interpolate ``%{name}`` placeholders
   and return it. No further locales are considered.
4. If no locale yields a string, return the key itself.

Missing phrases, missing plural rules and missing variables are content
gaps, not errors: they degrade to the key, the ``other`` category and the
verbatim placeholder respectively. Only a malformed key raises.

Python 3.13+.
"""

from __future__ import annotations

import functools
import re
from collections.abc import Mapping, Sequence
from decimal import Decimal

from phrasekit.constants import CONTEXT_CHARACTERS, DEFAULT_DELIMITER, INTERPOLATION_PATTERN
from phrasekit.diagnostics import InvalidKeyError
from phrasekit.runtime.phrases import PhraseTree, is_branch
from phrasekit.runtime.plural_rules import PluralRule, PluralRules, as_plural_rules

__all__ = [
    "PhraseData",
    "interpolate",
    "key_pattern_for",
    "lookup",
    "resolve_phrase",
    "validate_key",
]

type PhraseValue = str | int | float | Decimal
type PhraseData = Mapping[str, PhraseValue | None]
type RulesArg = PluralRules | Mapping[str, PluralRule] | None


@functools.lru_cache(maxsize=16)
def key_pattern_for(delimiter: str) -> re.Pattern[str]:
    """Return the default key grammar for a delimiter.

    One or more context segments joined by the delimiter.

    Example:
        >>> key_pattern_for(".").fullmatch("app.label") is not None
        True
    """
    return re.compile(
        rf"{CONTEXT_CHARACTERS}(?:{re.escape(delimiter)}{CONTEXT_CHARACTERS})*"
    )


def validate_key(key: object, key_pattern: re.Pattern[str] | str | None = None) -> None:
    """Validate a lookup key against the key grammar.

    The whole key must match (``fullmatch``), for both the default and custom
    patterns.

    Raises:
        InvalidKeyError: If key is not a string or does not match
    """
    pattern = key_pattern_for(DEFAULT_DELIMITER) if key_pattern is None else key_pattern
    if isinstance(pattern, str):
        pattern = re.compile(pattern)
    if not isinstance(key, str) or pattern.fullmatch(key) is None:
        raise InvalidKeyError(key, pattern.pattern)


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def interpolate(
    template: str,
    data: PhraseData | None = None,
    pattern: re.Pattern[str] = INTERPOLATION_PATTERN,
) -> str:
    """Replace placeholders in template with values from data.

    Strings are inserted as-is and numbers in their ``str()`` form. A
    placeholder whose name is absent (or bound to any other type) is left
    verbatim so missing variables stay visible.

    Example:
        >>> interpolate("%{a} %{b}", {"a": "x"})
        'x %{b}'

    Args:
        template: Leaf phrase
        data: Variable values
        pattern: Placeholder regex; group 1 must capture the variable name
    """
    values = data or {}

    def replace(match: re.Match[str]) -> str:
        value = values.get(match.group(1))
        if isinstance(value, str):
            return value
        if _is_number(value):
            return str(value)
        return match.group(0)

    return pattern.sub(replace, template)


def resolve_phrase(
    key: str,
    locales: Sequence[str],
    trees: Mapping[str, PhraseTree],
    rules: RulesArg = None,
    data: PhraseData | None = None,
    *,
    delimiter: str = DEFAULT_DELIMITER,
    key_pattern: re.Pattern[str] | str | None = None,
    interpolation_pattern: re.Pattern[str] = INTERPOLATION_PATTERN,
) -> tuple[str, str | None]:
    """Resolve key and report which locale produced the result.

    Same contract as ``lookup``.

    Returns:
        Tuple of (text, locale). locale is None when every candidate missed
        and text is the key itself.

    Raises:
        InvalidKeyError: If key does not match the key grammar
    """
    validate_key(key, key_pattern_for(delimiter) if key_pattern is None else key_pattern)

    values = data or {}
    count = values.get("count")
    contexts = key.split(delimiter)
    table: PluralRules | None = None

    for locale in locales:
        node: object = trees.get(locale)
        for context in contexts:
            node = node.get(context) if is_branch(node) else None  # type: ignore[union-attr]

        if is_branch(node) and _is_number(count):
            if table is None:
                table = as_plural_rules(rules)
            category = table.select(locale, count)  # type: ignore[arg-type]
            node = node.get(category)  # type: ignore[union-attr]

        if isinstance(node, str):
            return interpolate(node, values, interpolation_pattern), locale

    return key, None


def lookup(
    key: str,
    locales: Sequence[str],
    trees: Mapping[str, PhraseTree],
    rules: RulesArg = None,
    data: PhraseData | None = None,
    *,
    delimiter: str = DEFAULT_DELIMITER,
    key_pattern: re.Pattern[str] | str | None = None,
    interpolation_pattern: re.Pattern[str] = INTERPOLATION_PATTERN,
) -> str:
    """Look up a phrase for key, trying locales in order.

    Locales are used as given; canonicalize arbitrary input (e.g. a browser
    locale) with ``canonicalize_locales`` first.

    Example:
        >>> trees = {"en": {"a": {"b": "X"}}}
        >>> lookup("a.b", ["ja", "en"], trees)
        'X'
        >>> lookup("no.such.key", ["en"], trees)
        'no.such.key'

    Args:
        key: Delimited sequence of context segments
        locales: Candidate locales, most preferred first
        trees: Phrase tree per locale
        rules: PluralRules instance, plain mapping of rules (replaces the
            defaults), or None for the built-in table. A mapping or None
            builds a fresh table per call, so the missing-rule warning is
            only deduplicated across calls sharing one PluralRules instance.
        data: Interpolation values; the numeric ``count`` entry also drives
            pluralization
        delimiter: Context separator (default ``"."``)
        key_pattern: Key grammar; defaults to context segments joined by
            the delimiter
        interpolation_pattern: Placeholder regex (default ``%{name}``)

    Returns:
        Interpolated phrase, or key when no locale has it

    Raises:
        InvalidKeyError: If key does not match the key grammar
    """
    text, _ = resolve_phrase(
        key,
        locales,
        trees,
        rules,
        data,
        delimiter=delimiter,
        key_pattern=key_pattern,
        interpolation_pattern=interpolation_pattern,
    )
    return text
