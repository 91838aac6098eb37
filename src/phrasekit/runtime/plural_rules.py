"""Plural category selection.

A plural rule is a pure function ``count -> PluralCategory``. phrasekit ships
a small table of hand-written rules (ported from rails-i18n) covering the
languages it has historically supported, and can build a rule for any other
language from Babel's CLDR data via ``cldr_rule``.

Rules are total over the reals: they accept int, float and Decimal (including
fractions, negatives, NaN and infinity) and never raise. They evaluate the
absolute value of the count, like the CLDR operand ``n``.

References:
    https://www.unicode.org/cldr/charts/latest/supplemental/language_plural_rules.html
    https://unicode.org/reports/tr35/tr35-numbers.html#Language_Plural_Rules

Python 3.13+. Depends on Babel for CLDR data (cldr_rule only).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from decimal import Decimal
from types import MappingProxyType

from phrasekit.diagnostics import InvalidTagError
from phrasekit.enums import PluralCategory
from phrasekit.locale_utils import LanguageTag, canonicalize_locales, get_babel_locale

__all__ = [
    "DEFAULT_RULES",
    "PluralRule",
    "PluralRules",
    "arabic",
    "as_plural_rules",
    "cldr_rule",
    "east_slavic",
    "one_other",
    "one_two_other",
    "one_up_to_two_other",
    "one_with_zero_other",
    "other",
    "polish",
    "select_plural_category",
    "west_slavic",
]

logger = logging.getLogger(__name__)

type Number = int | float | Decimal
type PluralRule = Callable[[Number], PluralCategory]


def _language_of(locale: str) -> str | None:
    try:
        return LanguageTag.parse(locale).language
    except InvalidTagError:
        return None


def _is_integer(n: Number) -> bool:
    try:
        return n == int(n)
    except (OverflowError, ValueError, ArithmeticError):
        # NaN and infinity
        return False


def arabic(n: Number) -> PluralCategory:
    """Arabic: zero, one, two, few (3-10), many (11-99), other."""
    n = abs(n)
    mod100 = n % 100 if _is_integer(n) else None

    if n == 0:
        return PluralCategory.ZERO
    if n == 1:
        return PluralCategory.ONE
    if n == 2:
        return PluralCategory.TWO
    if mod100 is not None and 3 <= mod100 <= 10:
        return PluralCategory.FEW
    if mod100 is not None and 11 <= mod100 <= 99:
        return PluralCategory.MANY
    return PluralCategory.OTHER


def east_slavic(n: Number) -> PluralCategory:
    """Belarusian, Russian, Ukrainian: one, few, many, other (fractions)."""
    n = abs(n)
    if not _is_integer(n):
        return PluralCategory.OTHER
    mod10 = n % 10
    mod100 = n % 100

    if mod10 == 1 and mod100 != 11:
        return PluralCategory.ONE
    if mod10 in (2, 3, 4) and mod100 not in (12, 13, 14):
        return PluralCategory.FEW
    return PluralCategory.MANY


def one_other(n: Number) -> PluralCategory:
    """English, German and most Germanic/Romance languages."""
    return PluralCategory.ONE if abs(n) == 1 else PluralCategory.OTHER


def one_two_other(n: Number) -> PluralCategory:
    """Inuktitut and other dual-number languages."""
    n = abs(n)
    if n == 1:
        return PluralCategory.ONE
    if n == 2:
        return PluralCategory.TWO
    return PluralCategory.OTHER


def one_up_to_two_other(n: Number) -> PluralCategory:
    """French: 0 <= n < 2 is singular."""
    n = abs(n)
    # n == n is False for NaN, which Decimal refuses to order
    return PluralCategory.ONE if n == n and n < 2 else PluralCategory.OTHER


def one_with_zero_other(n: Number) -> PluralCategory:
    """Hindi: zero and one are singular."""
    return PluralCategory.ONE if abs(n) in (0, 1) else PluralCategory.OTHER


def other(n: Number = 0) -> PluralCategory:  # noqa: ARG001
    """Languages without grammatical number (Chinese, Japanese, Korean, ...)."""
    return PluralCategory.OTHER


def polish(n: Number) -> PluralCategory:
    """Polish: one, few, many, other (fractions)."""
    n = abs(n)
    if n == 1:
        return PluralCategory.ONE
    if not _is_integer(n):
        return PluralCategory.OTHER
    mod10 = n % 10
    mod100 = n % 100

    if mod10 in (2, 3, 4) and mod100 not in (12, 13, 14):
        return PluralCategory.FEW
    return PluralCategory.MANY


def west_slavic(n: Number) -> PluralCategory:
    """Czech, Slovak: one, few (2-4), other."""
    n = abs(n)
    if n == 1:
        return PluralCategory.ONE
    if n in (2, 3, 4):
        return PluralCategory.FEW
    return PluralCategory.OTHER


DEFAULT_RULES: Mapping[str, PluralRule] = MappingProxyType({
    "af": one_other,
    "ar": arabic,
    "be": east_slavic,
    "cs": west_slavic,
    "de": one_other,
    "el": one_other,
    "en": one_other,
    "es": one_other,
    "fi": one_other,
    "fr": one_up_to_two_other,
    "hi": one_with_zero_other,
    "id": other,
    "it": one_other,
    "iu": one_two_other,
    "ja": other,
    "ko": other,
    "ms": other,
    "my": other,
    "ne": one_other,
    "nl": one_other,
    "pl": polish,
    "pt": one_other,
    "ru": east_slavic,
    "sk": west_slavic,
    "sw": one_other,
    "th": other,
    "tr": other,
    "uk": east_slavic,
    "vi": other,
    "zh": other,
})
"""Built-in rules keyed by bare language. Read-only."""


def cldr_rule(locale: str) -> PluralRule:
    """Build a plural rule from Babel's CLDR data.

    Use this to register languages the built-in table does not cover.

    Example:
        >>> rule = cldr_rule("lv")
        >>> rule(0)
        <PluralCategory.ZERO: 'zero'>

    Raises:
        InvalidTagError: If locale is malformed
        babel.core.UnknownLocaleError: If Babel has no data for locale
    """
    plural_form = get_babel_locale(locale).plural_form

    def rule(n: Number) -> PluralCategory:
        try:
            return PluralCategory(plural_form(abs(n)))
        except (ArithmeticError, ValueError, OverflowError):
            # Babel's operand extraction rejects NaN and infinity
            return PluralCategory.OTHER

    rule.__name__ = f"cldr_{locale}"
    return rule


class PluralRules:
    """Table of plural rules keyed by canonical locale or bare language.

    Selecting a rule for a locale tries the exact locale (``en-GB``), then
    its bare language (``en``), then falls back to ``other``. A missing rule
    is not an error; it is logged once per language per instance.

    Example:
        >>> rules = PluralRules()
        >>> rules.select("en-GB", 1)
        <PluralCategory.ONE: 'one'>
        >>> rules.set_rule("en-GB", other)
        True
        >>> rules.select("en-GB", 1)
        <PluralCategory.OTHER: 'other'>
    """

    __slots__ = ("_rules", "_warned")

    def __init__(
        self,
        rules: Mapping[str, PluralRule] | None = None,
        *,
        include_defaults: bool = True,
    ) -> None:
        """Initialize rule table.

        Args:
            rules: Additional rules, applied over the defaults
            include_defaults: Start from DEFAULT_RULES (default: True)

        Raises:
            InvalidTagError: If any rule key is malformed
        """
        self._rules: dict[str, PluralRule] = dict(DEFAULT_RULES) if include_defaults else {}
        self._warned: set[str] = set()
        if rules:
            for locale, rule in rules.items():
                self.set_rule(locale, rule)

    def __contains__(self, locale: object) -> bool:
        return locale in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"PluralRules(locales={sorted(self._rules)!r})"

    def set_rule(self, locales: str | Iterable[str], rule: PluralRule) -> bool:
        """Register rule for one or more locales.

        Returns:
            True if any entry changed

        Raises:
            InvalidTagError: If any locale is malformed
        """
        changed = False
        for locale in canonicalize_locales(locales):
            if self._rules.get(locale) is not rule:
                self._rules[locale] = rule
                changed = True
        return changed

    def delete_rule(self, locales: str | Iterable[str]) -> bool:
        """Remove rules for one or more locales.

        Returns:
            True if any entry was removed

        Raises:
            InvalidTagError: If any locale is malformed
        """
        changed = False
        for locale in canonicalize_locales(locales):
            if self._rules.pop(locale, None) is not None:
                changed = True
        return changed

    def get_rule(self, locale: str) -> PluralRule | None:
        """Return the rule for locale, trying exact locale then bare language.

        A locale that is not a valid tag has no rule.
        """
        rule = self._rules.get(locale)
        if rule is not None:
            return rule
        try:
            tag = LanguageTag.parse(locale)
        except InvalidTagError:
            return None
        return self._rules.get(str(tag)) or self._rules.get(tag.language)

    def select(self, locale: str, count: Number) -> PluralCategory:
        """Select the plural category of count for locale.

        Never raises: a locale without a rule, including one that is not a
        valid tag, selects ``other``.
        """
        rule = self.get_rule(locale)
        if rule is None:
            language = _language_of(locale) or locale
            if language not in self._warned:
                self._warned.add(language)
                logger.warning("No pluralization rule found for %s.", locale)
            return other(count)
        return rule(count)


def select_plural_category(
    count: Number,
    locale: str,
    rules: PluralRules | Mapping[str, PluralRule] | None = None,
) -> PluralCategory:
    """Select plural category for count using a rule table.

    Args:
        count: Number to categorize
        locale: Canonical or raw locale code
        rules: PluralRules instance, a plain mapping (replaces the defaults),
            or None for the built-in table

    Returns:
        One of zero, one, two, few, many, other

    Examples:
        >>> select_plural_category(1, "en")
        <PluralCategory.ONE: 'one'>
        >>> select_plural_category(5, "ru")
        <PluralCategory.MANY: 'many'>
        >>> select_plural_category(42, "ja")
        <PluralCategory.OTHER: 'other'>
    """
    return as_plural_rules(rules).select(locale, count)


def as_plural_rules(rules: PluralRules | Mapping[str, PluralRule] | None) -> PluralRules:
    """Coerce a rules argument into a PluralRules table."""
    match rules:
        case PluralRules():
            return rules
        case None:
            return PluralRules()
        case _:
            return PluralRules(rules, include_defaults=False)
