"""BCP-47 language tag parsing and canonicalization.

Parses the language, script and region subtags of a BCP-47 tag and produces
the canonical string form ``language[-script][-region]``. Every map lookup
elsewhere in phrasekit (aliases, plural rules, phrase trees) is keyed by this
canonical string, so two spellings of the same tag must normalize to
byte-identical output.

Grammar (case-insensitive):
    language = 2-3 letters, followed by up to three 3-letter extlang subtags
               (e.g. ``zh-yue``), OR 4-8 letters when that is the whole tag
    script   = 4 letters
    region   = 2 letters or 3 digits
    Any further ``-``-separated subtags are ignored.

Also provides the bridge to Babel (for CLDR data) and system locale detection.

Python 3.13+.
"""

from __future__ import annotations

import functools
import os
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from phrasekit.constants import DEFAULT_LOCALE, MAX_LOCALE_CACHE_SIZE
from phrasekit.diagnostics import InvalidTagError

if TYPE_CHECKING:
    from babel import Locale

__all__ = [
    "LanguageTag",
    "canonicalize_locale",
    "canonicalize_locales",
    "clear_locale_cache",
    "get_babel_locale",
    "get_system_locale",
    "normalize_locale",
    "parse_locale",
]

_LANGUAGE = r"[A-Za-z]{2,3}(?:-[A-Za-z]{3}){0,3}"
_LONG_LANGUAGE = r"[A-Za-z]{4,8}"
_SCRIPT = r"[A-Za-z]{4}"
_REGION = r"[A-Za-z]{2}|[0-9]{3}"

# Only language, script and region are captured. A trailing hyphen means the
# tag carries subtags we do not interpret (variants, extensions, private use).
_TAG_PATTERN: re.Pattern[str] = re.compile(
    rf"(?P<language>{_LANGUAGE})"
    rf"(?:-(?P<script>{_SCRIPT}))?"
    rf"(?:-(?P<region>{_REGION}))?"
    r"(?:-|\Z)"
    rf"|(?P<long_language>{_LONG_LANGUAGE})\Z"
)


# Canonical component forms accepted by the LanguageTag constructor
_CANONICAL_LANGUAGE = re.compile(r"[a-z]{2,3}(?:-[a-z]{3}){0,3}")
_CANONICAL_LONG_LANGUAGE = re.compile(r"[a-z]{4,8}")
_CANONICAL_SCRIPT = re.compile(r"[A-Z][a-z]{3}")
_CANONICAL_REGION = re.compile(r"[A-Z]{2}|[0-9]{3}")


def _is_canonical(part: object, pattern: re.Pattern[str]) -> bool:
    return isinstance(part, str) and pattern.fullmatch(part) is not None


@dataclass(frozen=True, slots=True)
class LanguageTag:
    """Parsed BCP-47 language tag (language, script, region).

    Instances are immutable; ``str(tag)`` returns the canonical form.

    Example:
        >>> tag = LanguageTag.parse("ZH-hANT-hk")
        >>> tag.language, tag.script, tag.region
        ('zh', 'Hant', 'HK')
        >>> str(tag)
        'zh-Hant-HK'

    Attributes:
        language: Lower-cased primary subtag, possibly with extlang (``zh-yue``)
        script: Title-cased 4-letter script subtag, or None
        region: Upper-cased 2-letter or 3-digit region subtag, or None
    """

    language: str
    script: str | None = None
    region: str | None = None

    def __post_init__(self) -> None:
        """Reject components that are not already in canonical form.

        Raises:
            InvalidTagError: If any component fails the grammar or case rules
        """
        if _is_canonical(self.language, _CANONICAL_LONG_LANGUAGE):
            # A 4-8 letter language is only valid as the whole tag
            valid = self.script is None and self.region is None
        else:
            valid = (
                _is_canonical(self.language, _CANONICAL_LANGUAGE)
                and (self.script is None or _is_canonical(self.script, _CANONICAL_SCRIPT))
                and (self.region is None or _is_canonical(self.region, _CANONICAL_REGION))
            )
        if not valid:
            raise InvalidTagError(
                "-".join(str(part) for part in (self.language, self.script, self.region) if part)
            )

    @classmethod
    def parse(cls, text: str) -> LanguageTag:
        """Parse and normalize a locale string.

        Args:
            text: Locale string in any letter case

        Returns:
            Normalized LanguageTag

        Raises:
            InvalidTagError: If text is not a string or does not match the grammar
        """
        if not isinstance(text, str):
            raise InvalidTagError(text)
        return _parse_cached(text)

    def has_script(self) -> bool:
        """Check if the tag carries a script subtag."""
        return self.script is not None

    def has_region(self) -> bool:
        """Check if the tag carries a region subtag."""
        return self.region is not None

    def __str__(self) -> str:
        """Return canonical ``language[-script][-region]`` form."""
        parts = [self.language]
        if self.script is not None:
            parts.append(self.script)
        if self.region is not None:
            parts.append(self.region)
        return "-".join(parts)


@functools.lru_cache(maxsize=MAX_LOCALE_CACHE_SIZE)
def _parse_cached(text: str) -> LanguageTag:
    match = _TAG_PATTERN.match(text)
    if match is None:
        raise InvalidTagError(text)

    if match.group("long_language") is not None:
        return LanguageTag(match.group("long_language").lower())

    script = match.group("script")
    region = match.group("region")
    return LanguageTag(
        language=match.group("language").lower(),
        script=script.capitalize() if script else None,
        region=region.upper() if region else None,
    )


def parse_locale(text: str) -> LanguageTag:
    """Parse a locale string into a LanguageTag.

    Example:
        >>> parse_locale("en-us").region
        'US'

    Raises:
        InvalidTagError: If text does not match the grammar
    """
    return LanguageTag.parse(text)


def canonicalize_locale(text: str) -> str:
    """Canonicalize a single locale string.

    Example:
        >>> canonicalize_locale("ZH-hANT-hk")
        'zh-Hant-HK'

    Raises:
        InvalidTagError: If text does not match the grammar
    """
    return str(LanguageTag.parse(text))


def canonicalize_locales(locales: str | Iterable[str]) -> list[str]:
    """Canonicalize one locale or an ordered collection of locales.

    Mirrors ``Intl.getCanonicalLocales``: a single string yields a one-element
    list, order is preserved and duplicates are kept.

    Example:
        >>> canonicalize_locales("EN-US")
        ['en-US']
        >>> canonicalize_locales(["EN-US", "ZH-HANT-TW", "Fr"])
        ['en-US', 'zh-Hant-TW', 'fr']

    Raises:
        InvalidTagError: If any entry does not match the grammar
    """
    if isinstance(locales, str):
        return [canonicalize_locale(locales)]
    return [canonicalize_locale(locale) for locale in locales]


def normalize_locale(locale_code: str) -> str:
    """Convert a BCP-47 locale code to the POSIX form Babel expects.

    Extended language subtags are collapsed to the extlang itself, since
    ``zh-yue`` denotes the language ``yue``.

    Example:
        >>> normalize_locale("zh-Hant-HK")
        'zh_Hant_HK'
        >>> normalize_locale("zh-yue-HK")
        'yue_HK'

    Raises:
        InvalidTagError: If locale_code does not match the grammar
    """
    tag = LanguageTag.parse(locale_code)
    parts = [tag.language.rsplit("-", 1)[-1]]
    if tag.script is not None:
        parts.append(tag.script)
    if tag.region is not None:
        parts.append(tag.region)
    return "_".join(parts)


@functools.lru_cache(maxsize=MAX_LOCALE_CACHE_SIZE)
def get_babel_locale(locale_code: str) -> Locale:
    """Get a Babel Locale object with caching.

    Thread-safe via lru_cache internal locking.

    Args:
        locale_code: BCP-47 locale code in any letter case

    Returns:
        Babel Locale object

    Raises:
        InvalidTagError: If locale_code does not match the grammar
        babel.core.UnknownLocaleError: If Babel has no CLDR data for the locale

    Example:
        >>> get_babel_locale("en-US").territory
        'US'
    """
    # Lazy import: Babel loads CLDR data at import time; defer until needed
    from babel import Locale  # noqa: PLC0415

    return Locale.parse(normalize_locale(locale_code))


def clear_locale_cache() -> None:
    """Clear the parsed tag and Babel locale caches."""
    _parse_cached.cache_clear()
    get_babel_locale.cache_clear()


def get_system_locale(*, raise_on_failure: bool = False) -> str:
    """Detect the system locale as a canonical BCP-47 tag.

    Detection order:
    1. Python locale.getlocale() (OS-level locale)
    2. LC_ALL environment variable (overrides all)
    3. LC_MESSAGES environment variable (for message catalogs)
    4. LANG environment variable (default locale)

    Encoding suffixes (``.UTF-8``) are stripped, POSIX underscores become
    hyphens, and "C"/"POSIX" pseudo-locales or unparseable values are skipped.

    Args:
        raise_on_failure: If True, raise RuntimeError when no locale can be
            determined. If False (default), return DEFAULT_LOCALE.

    Returns:
        Canonical locale tag, e.g. ``"de-DE"``

    Raises:
        RuntimeError: If raise_on_failure is True and no locale is detected
    """
    import locale as locale_module  # noqa: PLC0415

    candidates: list[str | None] = []
    try:
        candidates.append(locale_module.getlocale()[0])
    except (ValueError, AttributeError):
        pass
    candidates.extend(os.environ.get(var) for var in ("LC_ALL", "LC_MESSAGES", "LANG"))

    for value in candidates:
        if not value or value in ("C", "POSIX"):
            continue
        code = value.split(".")[0].split("@")[0].replace("_", "-")
        try:
            return canonicalize_locale(code)
        except InvalidTagError:
            continue

    if raise_on_failure:
        msg = (
            "Could not determine system locale. "
            "Set LC_ALL, LC_MESSAGES, or LANG environment variable."
        )
        raise RuntimeError(msg)

    return DEFAULT_LOCALE
