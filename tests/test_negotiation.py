"""Tests for negotiation.py: fallback chains and locale resolution.

The ordering rules here decide which string a user sees, so the preference
order and specificity cases are pinned explicitly alongside property tests.

Python 3.13+.
"""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from phrasekit.diagnostics import InvalidTagError
from phrasekit.negotiation import (
    candidate_locales,
    canonicalize_aliases,
    fallback_chain,
    resolve_locale,
)

SUPPORTED = ["zh-Hant", "zh-Hans", "pt", "en"]

simple_locales = st.sampled_from([
    "en", "en-US", "en-GB", "pt", "pt-BR", "zh", "zh-Hant", "zh-Hans",
    "zh-Hant-HK", "zh-Hant-TW", "zh-HK", "ja", "ja-JP", "fr-CA",
])


class TestFallbackChain:
    """fallback_chain expansion."""

    def test_is_inclusive(self) -> None:
        """A bare language chain contains only itself."""
        assert fallback_chain("zh") == ["zh"]

    def test_region_and_script(self) -> None:
        """Script and region tags fall back to script, then language."""
        assert fallback_chain("zh-Hant-HK") == ["zh-Hant-HK", "zh-Hant", "zh"]

    def test_region(self) -> None:
        """Region tags fall back to language."""
        assert fallback_chain("zh-HK") == ["zh-HK", "zh"]

    def test_script(self) -> None:
        """Script tags fall back to language."""
        assert fallback_chain("zh-Hant") == ["zh-Hant", "zh"]

    def test_canonicalized(self) -> None:
        """Chain entries are canonical."""
        assert fallback_chain("zh-hant-hk") == ["zh-Hant-HK", "zh-Hant", "zh"]

    def test_extlang_kept_in_language(self) -> None:
        """An extlang stays part of the language fallback."""
        assert fallback_chain("zh-yue-HK") == ["zh-yue-HK", "zh-yue"]

    def test_invalid(self) -> None:
        """A malformed tag raises InvalidTagError."""
        with pytest.raises(InvalidTagError):
            fallback_chain("bogus-locale")


class TestCandidateLocales:
    """Candidate sequence construction."""

    def test_fallbacks_follow_their_preference(self) -> None:
        """Each preference is followed by its own fallbacks."""
        assert candidate_locales(["pt-BR", "en-US"]) == ["pt-BR", "pt", "en-US", "en"]

    def test_fallback_already_preferred_is_dropped(self) -> None:
        """Fallbacks listed explicitly keep their explicit position."""
        assert candidate_locales(["zh-Hant-HK", "pt", "zh"]) == [
            "zh-Hant-HK",
            "zh-Hant",
            "pt",
            "zh",
        ]

    def test_fallback_contained_in_next_preference_is_deferred(self) -> None:
        """Generic fallbacks wait until after the next specific preference."""
        assert candidate_locales(["zh-Hant-HK", "zh-Hant-TW"]) == [
            "zh-Hant-HK",
            "zh-Hant-TW",
            "zh-Hant",
            "zh",
        ]

    def test_aliases_substituted_one_level(self) -> None:
        """Aliases are applied once, never chained."""
        aliases = {"en-AU": "en-GB", "en-GB": "en-US"}
        assert candidate_locales("en-AU", aliases) == ["en-GB", "en"]

    @given(preferred=st.lists(simple_locales, min_size=1, max_size=5, unique=True))
    def test_explicit_preferences_keep_relative_order(self, preferred: list[str]) -> None:
        """PROPERTY: explicit preferences appear in their input order."""
        candidates = candidate_locales(preferred)
        positions = [candidates.index(locale) for locale in preferred]
        assert positions == sorted(positions)

    @given(preferred=st.lists(simple_locales, min_size=1, max_size=5))
    def test_first_candidate_is_first_preference(self, preferred: list[str]) -> None:
        """PROPERTY: nothing jumps ahead of the most preferred locale."""
        assert candidate_locales(preferred)[0] == preferred[0]


class TestResolveLocale:
    """resolve_locale matching."""

    def test_normalizes_locale(self) -> None:
        """Preferred locales are canonicalized before matching."""
        assert resolve_locale("ZH-hANT-hk", ["zh-Hant-HK"]) == "zh-Hant-HK"

    def test_normalizes_supported(self) -> None:
        """Supported locales are canonicalized before matching."""
        assert resolve_locale("zh-Hant-HK", ["ZH-HANT-hk"]) == "zh-Hant-HK"

    @pytest.mark.parametrize(
        ("preferred", "expected"),
        [
            ("zh-Hant-TW", "zh-Hant"),
            ("zh-Hans-CN", "zh-Hans"),
            (["pt-BR", "en"], "pt"),
        ],
    )
    def test_looks_up_appropriate_locale(self, preferred: str | list[str], expected: str) -> None:
        """Preferences resolve to the closest supported fallback."""
        assert resolve_locale(preferred, SUPPORTED) == expected

    def test_preference_order_preserved(self) -> None:
        """An explicit later preference beats an earlier one's fallback."""
        assert resolve_locale(["zh-Hant-HK", "pt", "zh"], ["pt", "zh"]) == "pt"

    def test_specific_preference_before_generic_fallback(self) -> None:
        """A specific later preference beats a generic earlier fallback."""
        assert resolve_locale(["zh-Hant-HK", "zh-Hant-TW"], ["zh-Hant", "zh-Hant-TW"]) == (
            "zh-Hant-TW"
        )

    def test_alias_substitution(self) -> None:
        """An alias maps an unsupported preference to a supported locale."""
        assert resolve_locale(["zh"], ["zh-Hans"], {"zh": "zh-Hans"}) == "zh-Hans"

    def test_alias_keys_and_values_canonicalized(self) -> None:
        """Alias maps are canonicalized on both sides."""
        assert resolve_locale("EN-au", ["en-GB"], {"en-AU": "EN-gb"}) == "en-GB"

    def test_alias_applies_to_fallback_entries(self) -> None:
        """Aliases apply to fallback entries too."""
        assert resolve_locale("zh-Hant-HK", ["zh-yue"], {"zh-Hant": "zh-yue"}) == "zh-yue"

    def test_no_match(self) -> None:
        """None is returned when nothing is supported."""
        assert resolve_locale(["ja"], ["en", "pt"]) is None

    def test_empty_preference_list(self) -> None:
        """An empty preference list matches nothing."""
        assert resolve_locale([], ["en"]) is None

    def test_predicate_supported(self) -> None:
        """supported may be a predicate."""
        assert resolve_locale(["fr-CA", "en"], lambda locale: locale == "fr") == "fr"

    @pytest.mark.parametrize(
        ("preferred", "supported", "aliases"),
        [
            ("random text", ["en"], None),
            ("en", ["random text"], None),
            ("en", ["en"], {"Hant-HK": "en"}),
            ("en", ["en"], {"en-AU": "bogus-language"}),
        ],
    )
    def test_malformed_input_raises(
        self,
        preferred: str,
        supported: list[str],
        aliases: dict[str, str] | None,
    ) -> None:
        """Malformed preferred, supported or alias tags raise InvalidTagError."""
        with pytest.raises(InvalidTagError):
            resolve_locale(preferred, supported, aliases)

    @given(
        preferred=st.lists(simple_locales, max_size=4),
        supported=st.lists(simple_locales, max_size=6),
    )
    def test_result_is_supported(self, preferred: list[str], supported: list[str]) -> None:
        """PROPERTY: a defined result is always a member of supported."""
        result = resolve_locale(preferred, supported)
        assert result is None or result in supported

    @given(
        preferred=st.lists(simple_locales, max_size=4),
        supported=st.lists(simple_locales, max_size=6),
    )
    def test_deterministic(self, preferred: list[str], supported: list[str]) -> None:
        """PROPERTY: same inputs, same answer."""
        assert resolve_locale(preferred, supported) == resolve_locale(preferred, supported)


class TestCanonicalizeAliases:
    """Alias map normalization."""

    def test_empty(self) -> None:
        """A missing alias map canonicalizes to an empty dict."""
        assert canonicalize_aliases(None) == {}

    def test_skips_non_string_targets(self) -> None:
        """Entries without a string target are dropped."""
        aliases = {"en-au": "en-gb", "fr-ca": None}
        assert canonicalize_aliases(aliases) == {"en-AU": "en-GB"}  # type: ignore[arg-type]
