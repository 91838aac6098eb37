"""Locale negotiation: pick the best supported locale for a preference list.

Behaves like the RFC 4647 "lookup" scheme (section 3.4) with one refinement:
generic fallbacks of an earlier preference never jump ahead of a later,
more specific explicit preference.

Example:
    >>> resolve_locale(["zh-Hant-HK", "pt", "zh"], ["pt", "zh"])
    'pt'
    >>> resolve_locale("zh-Hant-HK", ["zh-Hant", "zh"])
    'zh-Hant'

Python 3.13+.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping

from phrasekit.locale_utils import LanguageTag, canonicalize_locale, canonicalize_locales

__all__ = [
    "candidate_locales",
    "canonicalize_aliases",
    "fallback_chain",
    "resolve_locale",
]

logger = logging.getLogger(__name__)


def _subsets(tag: LanguageTag) -> list[str]:
    """Less specific tags derived from tag, most specific first."""
    subsets: list[str] = []
    if tag.has_script() and tag.has_region():
        subsets.append(f"{tag.language}-{tag.script}")
    if tag.language != str(tag):
        subsets.append(tag.language)
    return subsets


def fallback_chain(locale: str) -> list[str]:
    """Return locale followed by its progressively less specific forms.

    Example:
        >>> fallback_chain("zh-hant-hk")
        ['zh-Hant-HK', 'zh-Hant', 'zh']
        >>> fallback_chain("zh-HK")
        ['zh-HK', 'zh']
        >>> fallback_chain("zh")
        ['zh']

    Raises:
        InvalidTagError: If locale does not match the tag grammar
    """
    tag = LanguageTag.parse(locale)
    return [str(tag), *_subsets(tag)]


def canonicalize_aliases(aliases: Mapping[str, str] | None) -> dict[str, str]:
    """Canonicalize both sides of an alias map.

    Entries whose target is not a string are skipped.

    Raises:
        InvalidTagError: If any key or value does not match the tag grammar
    """
    if not aliases:
        return {}
    return {
        canonicalize_locale(alias): canonicalize_locale(target)
        for alias, target in aliases.items()
        if isinstance(target, str)
    }


def candidate_locales(
    preferred: str | Iterable[str],
    aliases: Mapping[str, str] | None = None,
) -> list[str]:
    """Build the ordered, alias-substituted candidate sequence.

    Each preferred locale contributes itself followed by its fallbacks. A
    fallback is dropped when it already appears in the preference list, or
    when it is a substring of the next preference (a more specific
    alternative is about to be tried anyway). Aliases are substituted one
    level deep; targets are never re-aliased.

    Example:
        >>> candidate_locales(["zh-Hant-HK", "zh-Hant-TW"])
        ['zh-Hant-HK', 'zh-Hant-TW', 'zh-Hant', 'zh']

    Args:
        preferred: One locale or locales ordered most-preferred first
        aliases: Optional alias map (canonicalized here)

    Returns:
        Canonical candidates in the order they should be tried

    Raises:
        InvalidTagError: If any locale or alias is malformed
    """
    locales = canonicalize_locales(preferred)
    alias_map = canonicalize_aliases(aliases)
    explicit = set(locales)

    candidates: list[str] = []
    for index, current in enumerate(locales):
        candidates.append(current)
        following = locales[index + 1] if index + 1 < len(locales) else ""
        candidates.extend(
            subset
            for subset in _subsets(LanguageTag.parse(current))
            if subset not in explicit and subset not in following
        )

    return [alias_map.get(candidate, candidate) for candidate in candidates]


def resolve_locale(
    preferred: str | Iterable[str],
    supported: Iterable[str] | Callable[[str], bool],
    aliases: Mapping[str, str] | None = None,
) -> str | None:
    """Return the best supported locale for a preference list.

    Args:
        preferred: User or environment locales, ordered by preference
        supported: Locales the application has content for, or a predicate
            answering whether a canonical locale is supported
        aliases: Locales that are not supported themselves but should be
            substituted by a supported one (e.g. ``{"en-AU": "en-GB"}``)

    Returns:
        The first candidate that is supported (always a canonical member of
        supported), or None when nothing matches

    Raises:
        InvalidTagError: If any locale in preferred, supported or aliases is
            malformed; no partial result is returned
    """
    if callable(supported):
        is_supported = supported
    else:
        supported_set = frozenset(canonicalize_locales(supported))
        is_supported = supported_set.__contains__

    candidates = candidate_locales(preferred, aliases)
    match = next((locale for locale in candidates if is_supported(locale)), None)
    logger.debug("Resolved locale %s from candidates %s", match, candidates)
    return match
