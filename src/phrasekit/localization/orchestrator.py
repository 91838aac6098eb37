"""Session-scoped localization state with change notification.

PhraseLocalization owns everything one localization session needs: phrase
trees per locale, aliases, plural rules, the chosen locale and the fallback
locale. It delegates the algorithms to the pure functions in
``phrasekit.negotiation`` and ``phrasekit.runtime`` and notifies subscribers
whenever an operation actually changes its state.

Key architectural decisions:
- All locale inputs are canonicalized at the boundary; internal maps are
  keyed by canonical tags only
- Registered phrase trees are validated deep copies; caller data is never
  retained
- Subscribers are notified from a snapshot, so handlers added during a
  notification pass run from the next pass, and unsubscribing (even from
  inside a handler) is idempotent
- Sessions share nothing; run several sessions side by side by creating
  several instances. An instance is not thread-safe.

Python 3.13+.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, MutableMapping
from types import MappingProxyType

from phrasekit.constants import DEFAULT_DELIMITER, DEFAULT_LOCALE
from phrasekit.diagnostics import AliasConflictError, InvalidPhraseError
from phrasekit.enums import LoadStatus
from phrasekit.locale_utils import canonicalize_locale, canonicalize_locales
from phrasekit.localization.loading import (
    FallbackInfo,
    LoadSummary,
    PhraseLoader,
    ResourceLoadResult,
)
from phrasekit.localization.types import LocaleCode, PhraseKey, ResourceId
from phrasekit.negotiation import resolve_locale
from phrasekit.runtime.phrases import PhraseTree, clone_phrases, merge_phrases
from phrasekit.runtime.plural_rules import PluralRule, PluralRules
from phrasekit.runtime.resolver import PhraseData, key_pattern_for, resolve_phrase, validate_key

__all__ = ["PhraseLocalization"]

logger = logging.getLogger(__name__)

type Subscriber = Callable[[], object]
type Unsubscribe = Callable[[], None]


class PhraseLocalization:
    """Stateful phrase lookup with locale negotiation and fallback.

    Example:
        >>> l10n = PhraseLocalization()
        >>> l10n.set_phrases("en", {"app": {"cats": {"one": "%{count} cat",
        ...                                            "other": "%{count} cats"}}})
        >>> l10n.set_phrases("ja", {"app": {"cats": "%{count}匹"}})
        >>> l10n.set_locale(["ja-JP", "en-US"])
        >>> l10n.locale
        'ja'
        >>> l10n.t("app.cats", {"count": 3})
        '3匹'
        >>> l10n.t("app.cats", {"count": 1}, locale="en")
        '1 cat'
        >>> l10n.t("app.missing")
        'app.missing'

    Attributes:
        locale: Locale used first by t(); the fallback when none matched
        fallback: Locale tried when the primary locale lacks a phrase
        key_mode: When True, t() returns keys unchanged (debugging aid)
    """

    __slots__ = (
        "_aliases",
        "_delimiter",
        "_fallback",
        "_key_mode",
        "_locale",
        "_on_fallback",
        "_phrases",
        "_rules",
        "_subscribers",
    )

    def __init__(
        self,
        *,
        fallback: LocaleCode = DEFAULT_LOCALE,
        rules: Mapping[LocaleCode, PluralRule] | None = None,
        include_default_rules: bool = True,
        on_fallback: Callable[[FallbackInfo], None] | None = None,
        delimiter: str = DEFAULT_DELIMITER,
    ) -> None:
        """Initialize an empty session.

        Args:
            fallback: Locale tried after the primary locale (default: "en")
            rules: Extra plural rules, applied over the built-in table
            include_default_rules: Start from the built-in rule table
            on_fallback: Optional callback invoked when t() resolves a key
                from a locale other than the first one it tried. Useful for
                spotting missing translations.
            delimiter: Key context separator used by t()

        Raises:
            InvalidTagError: If fallback or a rule locale is malformed
        """
        self._aliases: dict[LocaleCode, LocaleCode] = {}
        self._fallback: LocaleCode = canonicalize_locale(fallback)
        self._locale: LocaleCode | None = None
        self._key_mode = False
        self._rules = PluralRules(rules, include_defaults=include_default_rules)
        self._phrases: dict[LocaleCode, dict[str, object]] = {}
        self._subscribers: list[Subscriber] = []
        self._on_fallback = on_fallback
        self._delimiter = delimiter

    def __repr__(self) -> str:
        """Return string representation for debugging."""
        return (
            f"PhraseLocalization(locale={self.locale!r}, fallback={self._fallback!r}, "
            f"phrases={sorted(self._phrases)!r})"
        )

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def locale(self) -> LocaleCode:
        """Primary lookup locale, or the fallback if set_locale found no match."""
        return self._locale if self._locale is not None else self._fallback

    @property
    def fallback(self) -> LocaleCode:
        """Locale tried when the primary locale lacks a phrase."""
        return self._fallback

    @property
    def key_mode(self) -> bool:
        """Whether t() returns keys unchanged."""
        return self._key_mode

    @property
    def aliases(self) -> Mapping[LocaleCode, LocaleCode]:
        """Read-only view of the alias map."""
        return MappingProxyType(self._aliases)

    @property
    def rules(self) -> PluralRules:
        """Plural rule table of this session."""
        return self._rules

    @property
    def available_locales(self) -> tuple[LocaleCode, ...]:
        """Locales that have phrases registered, in registration order."""
        return tuple(self._phrases)

    def has_phrases(self, locale: LocaleCode) -> bool:
        """Check if phrases are registered for locale.

        Raises:
            InvalidTagError: If locale is malformed
        """
        return canonicalize_locale(locale) in self._phrases

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, handler: Subscriber) -> Unsubscribe:
        """Register handler to be called after every state change.

        Args:
            handler: Zero-argument callable

        Returns:
            Function that removes the handler. Calling it more than once, or
            from inside a handler, is safe.
        """
        self._subscribers.append(handler)
        active = True

        def unsubscribe() -> None:
            nonlocal active
            if active:
                active = False
                self._subscribers.remove(handler)

        return unsubscribe

    def _notify(self) -> None:
        # Snapshot: handlers subscribed during this pass wait for the next one
        for handler in tuple(self._subscribers):
            handler()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _delete_from(
        self,
        locales: LocaleCode | Iterable[LocaleCode],
        table: MutableMapping[LocaleCode, object],
    ) -> None:
        changed = False
        for locale in canonicalize_locales(locales):
            if locale in table:
                del table[locale]
                changed = True
        if changed:
            self._notify()

    def set_alias(self, aliases: LocaleCode | Iterable[LocaleCode], locale: LocaleCode) -> None:
        """Substitute locale whenever set_locale considers one of aliases.

        Use this when a locale is not supported but has a good stand-in, e.g.
        Australian users seeing British English::

            l10n.set_phrases("en-GB", {...})
            l10n.set_alias("en-AU", "en-GB")
            l10n.set_locale("en-AU")
            l10n.locale  # 'en-GB'

        Args:
            aliases: Locale or locales to substitute
            locale: Locale used in their place

        Raises:
            InvalidTagError: If any locale is malformed
            AliasConflictError: If locale is itself an alias or one of
                aliases, or an alias already has phrases or is an alias target
        """
        alias_list = canonicalize_locales(aliases)
        target = canonicalize_locale(locale)

        if target in self._aliases or target in alias_list:
            raise AliasConflictError(target, "cannot already be an alias.")
        targets = set(self._aliases.values())
        for alias in alias_list:
            if alias in self._phrases:
                raise AliasConflictError(
                    alias, "has phrases set and should not be used as an alias."
                )
            if alias in targets:
                raise AliasConflictError(alias, "is already an alias target.")

        changed = False
        for alias in alias_list:
            if self._aliases.get(alias) != target:
                self._aliases[alias] = target
                changed = True
        if changed:
            logger.debug("Aliased %s to %s", alias_list, target)
            self._notify()

    def delete_alias(self, aliases: LocaleCode | Iterable[LocaleCode]) -> None:
        """Remove aliases. Unknown aliases are ignored.

        Raises:
            InvalidTagError: If any locale is malformed
        """
        self._delete_from(aliases, self._aliases)

    def set_rule(self, locales: LocaleCode | Iterable[LocaleCode], rule: PluralRule) -> None:
        """Register a plural rule for a locale or bare language.

        Raises:
            InvalidTagError: If any locale is malformed
        """
        if self._rules.set_rule(locales, rule):
            self._notify()

    def delete_rule(self, locales: LocaleCode | Iterable[LocaleCode]) -> None:
        """Remove plural rules; lookups then fall back to ``other``.

        Raises:
            InvalidTagError: If any locale is malformed
        """
        if self._rules.delete_rule(locales):
            self._notify()

    def _check_not_alias(self, locales: list[LocaleCode]) -> None:
        for locale in locales:
            if locale in self._aliases:
                raise AliasConflictError(
                    locale, "is an alias and should not have phrases set."
                )

    def set_phrases(self, locales: LocaleCode | Iterable[LocaleCode], phrases: PhraseTree) -> None:
        """Replace the phrase tree of one or more locales.

        Args:
            locales: Locale or locales to register phrases for
            phrases: Nested mapping; mappings are contexts, strings are phrases

        Raises:
            InvalidTagError: If any locale is malformed
            InvalidKeyError: If any context fails the context grammar
            InvalidPhraseError: If any value is neither a string nor a mapping
            AliasConflictError: If a locale is registered as an alias
        """
        locale_list = canonicalize_locales(locales)
        self._check_not_alias(locale_list)
        validated = clone_phrases(phrases)
        for locale in locale_list:
            self._phrases[locale] = clone_phrases(validated)
        logger.debug("Registered phrases for %s", locale_list)
        self._notify()

    def add_phrases(self, locales: LocaleCode | Iterable[LocaleCode], phrases: PhraseTree) -> None:
        """Deep-merge phrases into the trees of one or more locales.

        Locales without phrases start from an empty tree. Source leaves
        replace existing branches and source branches replace existing leaves.

        Raises:
            InvalidTagError: If any locale is malformed
            InvalidKeyError: If any context fails the context grammar
            InvalidPhraseError: If any value is neither a string nor a mapping
            AliasConflictError: If a locale is registered as an alias
        """
        locale_list = canonicalize_locales(locales)
        self._check_not_alias(locale_list)
        self._merge(locale_list, phrases)
        self._notify()

    def _merge(self, locales: list[LocaleCode], phrases: PhraseTree) -> None:
        validated = clone_phrases(phrases)
        merge_phrases([self._phrases.setdefault(locale, {}) for locale in locales], validated)

    def delete_phrases(self, locales: LocaleCode | Iterable[LocaleCode]) -> None:
        """Remove the phrase trees of one or more locales.

        Raises:
            InvalidTagError: If any locale is malformed
        """
        self._delete_from(locales, self._phrases)

    def set_fallback(self, fallback: LocaleCode) -> None:
        """Set the locale tried when the primary locale lacks a phrase.

        Raises:
            InvalidTagError: If fallback is malformed
        """
        normalized = canonicalize_locale(fallback)
        if normalized != self._fallback:
            self._fallback = normalized
            self._notify()

    def set_key_mode(self, enabled: bool) -> None:
        """Toggle key mode, in which t() returns keys unchanged."""
        if enabled != self._key_mode:
            self._key_mode = enabled
            self._notify()

    def set_locale(self, preferred: LocaleCode | Iterable[LocaleCode]) -> None:
        """Choose the primary locale from a preference list.

        Each preference is expanded into its fallback chain, so
        ``["zh-Hant-HK", "zh-Hant-TW"]`` tries
        ``zh-Hant-HK, zh-Hant-TW, zh-Hant, zh`` in that order. Aliases are
        applied and the first locale with phrases wins. When nothing matches
        the primary locale is unset and t() uses only the fallback.

        Call this after registering phrases and aliases; locales without
        phrases are never chosen.

        Raises:
            InvalidTagError: If any preference is malformed
        """
        matched = resolve_locale(preferred, self._phrases.__contains__, self._aliases)
        if matched != self._locale:
            self._locale = matched
            self._notify()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(
        self,
        loader: PhraseLoader,
        locales: LocaleCode | Iterable[LocaleCode],
        resource_ids: Iterable[ResourceId],
    ) -> LoadSummary:
        """Load phrase resources and merge them into the session.

        Missing resources and broken resources are recorded in the returned
        summary rather than raised, so one bad file never blocks the others.

        Args:
            loader: Loader returning phrase trees
            locales: Locales to load resources for
            resource_ids: Resources to load for every locale

        Returns:
            LoadSummary of every attempted (locale, resource) pair

        Raises:
            InvalidTagError: If any locale is malformed
            AliasConflictError: If a locale is registered as an alias
        """
        locale_list = canonicalize_locales(locales)
        resource_list = list(resource_ids)
        self._check_not_alias(locale_list)

        results = [
            self._load_single_resource(locale, resource_id, loader)
            for locale in locale_list
            for resource_id in resource_list
        ]
        summary = LoadSummary(results=tuple(results))
        logger.info("Loaded phrase resources: %r", summary)
        if summary.missing_locales:
            logger.warning("No phrase resources loaded for %s", summary.missing_locales)
        if summary.loaded_locales:
            self._notify()
        return summary

    def _load_single_resource(
        self,
        locale: LocaleCode,
        resource_id: ResourceId,
        loader: PhraseLoader,
    ) -> ResourceLoadResult:
        source_path = loader.describe_path(locale, resource_id)
        try:
            self._merge([locale], loader.load(locale, resource_id))
        except FileNotFoundError:
            return ResourceLoadResult(
                locale=locale,
                resource_id=resource_id,
                status=LoadStatus.NOT_FOUND,
                source_path=source_path,
            )
        except (OSError, ValueError, InvalidPhraseError) as e:
            # Permission errors, malformed JSON, path traversal, bad contexts
            logger.warning("Failed to load phrases %s: %s", source_path, e)
            return ResourceLoadResult(
                locale=locale,
                resource_id=resource_id,
                status=LoadStatus.ERROR,
                error=e,
                source_path=source_path,
            )
        return ResourceLoadResult(
            locale=locale,
            resource_id=resource_id,
            status=LoadStatus.SUCCESS,
            source_path=source_path,
        )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def t(
        self,
        key: PhraseKey,
        data: PhraseData | None = None,
        *,
        locale: LocaleCode | None = None,
        fallback: LocaleCode | None = None,
    ) -> str:
        """Find the phrase for key.

        Tries the primary locale, then the fallback. If neither has the key,
        the key itself is returned.

        Args:
            key: Context segments joined by the delimiter
            data: Interpolation values; numeric ``count`` selects plural forms
            locale: Use this locale instead of the session's primary locale
            fallback: Use this fallback instead of the session's fallback

        Returns:
            Best phrase for key, or key itself

        Raises:
            InvalidKeyError: If key does not match the key grammar
            InvalidTagError: If locale or fallback is malformed
        """
        pattern = key_pattern_for(self._delimiter)
        validate_key(key, pattern)

        if self._key_mode:
            return key

        locales: list[LocaleCode] = []
        if locale is not None:
            locales.append(canonicalize_locale(locale))
        elif self._locale is not None:
            locales.append(self._locale)
        locales.append(canonicalize_locale(fallback) if fallback is not None else self._fallback)

        text, resolved = resolve_phrase(
            key,
            locales,
            self._phrases,
            self._rules,
            data,
            delimiter=self._delimiter,
            key_pattern=pattern,
        )

        if resolved is not None and resolved != locales[0] and self._on_fallback is not None:
            self._on_fallback(
                FallbackInfo(requested_locale=locales[0], resolved_locale=resolved, key=key)
            )
        return text

