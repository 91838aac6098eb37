"""Tests for localization/loading.py and PhraseLocalization.load().

Covers JSON loading from a path template, path-traversal rejection and
LoadSummary aggregation of success, not-found and error outcomes.

Python 3.13+.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from phrasekit import PhraseLocalization
from phrasekit.diagnostics import AliasConflictError, InvalidKeyError, InvalidPhraseError
from phrasekit.enums import LoadStatus
from phrasekit.localization import (
    LoadSummary,
    PathPhraseLoader,
    ResourceLoadResult,
)


def write_json(path: Path, document: object) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(document, ensure_ascii=False), encoding="utf-8")


@pytest.fixture
def locales_dir(tmp_path: Path) -> Path:
    """Directory tree with en/main.json, ja/main.json and a broken de file."""
    root = tmp_path / "locales"
    write_json(root / "en" / "main.json", {"app": {"label": "App String"}})
    write_json(root / "en" / "extra.json", {"app": {"extra": "Extra"}})
    write_json(root / "ja" / "main.json", {"app": {"label": "アップストリング"}})
    (root / "de").mkdir()
    (root / "de" / "main.json").write_text("{not json", encoding="utf-8")
    return root


@pytest.fixture
def loader(locales_dir: Path) -> PathPhraseLoader:
    return PathPhraseLoader(f"{locales_dir}/{{locale}}")


class TestPathPhraseLoader:
    """Disk loader behavior."""

    def test_requires_locale_placeholder(self, tmp_path: Path) -> None:
        """Path templates without {locale} are rejected at construction."""
        with pytest.raises(ValueError, match="placeholder"):
            PathPhraseLoader(str(tmp_path))

    def test_load(self, loader: PathPhraseLoader) -> None:
        """A JSON object on disk is returned as a phrase tree."""
        assert loader.load("en", "main.json") == {"app": {"label": "App String"}}

    def test_describe_path(self, loader: PathPhraseLoader, locales_dir: Path) -> None:
        """describe_path substitutes the locale into the template."""
        assert loader.describe_path("en", "main.json") == f"{locales_dir}/en/main.json"

    def test_missing_file(self, loader: PathPhraseLoader) -> None:
        """Absent resources raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            loader.load("fr", "main.json")

    def test_malformed_json(self, loader: PathPhraseLoader) -> None:
        """Undecodable JSON raises ValueError."""
        with pytest.raises(ValueError):
            loader.load("de", "main.json")

    def test_non_object_document(self, loader: PathPhraseLoader, locales_dir: Path) -> None:
        """A JSON document that is not an object is rejected."""
        write_json(locales_dir / "fr" / "main.json", ["not", "an", "object"])
        with pytest.raises(InvalidPhraseError):
            loader.load("fr", "main.json")

    def test_invalid_context(self, loader: PathPhraseLoader, locales_dir: Path) -> None:
        """Documents with keys outside the context grammar are rejected."""
        write_json(locales_dir / "fr" / "main.json", {"bad key": "x"})
        with pytest.raises(InvalidKeyError):
            loader.load("fr", "main.json")

    @pytest.mark.parametrize("locale", ["", "..", "en/../ja", "en\\x"])
    def test_unsafe_locale(self, loader: PathPhraseLoader, locale: str) -> None:
        """Empty locales and locales with separators or traversal are rejected."""
        with pytest.raises(ValueError):
            loader.load(locale, "main.json")

    @pytest.mark.parametrize(
        "resource_id",
        ["../en/main.json", "/etc/passwd", " main.json", "main.json\n", "sub/../../x.json"],
    )
    def test_unsafe_resource_id(self, loader: PathPhraseLoader, resource_id: str) -> None:
        """Absolute, traversing or whitespace-padded resource IDs are rejected."""
        with pytest.raises(ValueError):
            loader.load("en", resource_id)

    def test_symlink_escape(
        self, loader: PathPhraseLoader, locales_dir: Path, tmp_path: Path
    ) -> None:
        """A symlink resolving outside the root directory is rejected."""
        outside = tmp_path / "outside.json"
        write_json(outside, {"a": "b"})
        (locales_dir / "en" / "link.json").symlink_to(outside)
        with pytest.raises(ValueError, match="Path traversal"):
            loader.load("en", "link.json")

    def test_explicit_root_dir(self, locales_dir: Path) -> None:
        """An explicit root_dir confines loads to that directory."""
        loader = PathPhraseLoader(f"{locales_dir}/{{locale}}", root_dir=str(locales_dir / "en"))
        assert loader.load("en", "main.json") == {"app": {"label": "App String"}}
        with pytest.raises(ValueError, match="Path traversal"):
            loader.load("ja", "main.json")


class TestLoadSummary:
    """Aggregation of load results."""

    def _summary(self) -> LoadSummary:
        error = ValueError("boom")
        return LoadSummary(
            results=(
                ResourceLoadResult("en", "main.json", LoadStatus.SUCCESS),
                ResourceLoadResult("fr", "main.json", LoadStatus.NOT_FOUND),
                ResourceLoadResult("de", "main.json", LoadStatus.ERROR, error=error),
                ResourceLoadResult("en", "extra.json", LoadStatus.SUCCESS),
            )
        )

    def test_counts(self) -> None:
        """Counters tally each status."""
        summary = self._summary()
        assert summary.total_attempted == 4
        assert summary.successful == 2
        assert summary.not_found == 1
        assert summary.errors == 1

    def test_filters(self) -> None:
        """get_errors and get_not_found select results by status."""
        summary = self._summary()
        assert [r.locale for r in summary.get_errors()] == ["de"]
        assert [r.locale for r in summary.get_not_found()] == ["fr"]

    def test_loaded_and_missing_locales(self) -> None:
        """Locales are split by whether any resource loaded, without duplicates."""
        summary = self._summary()
        assert summary.loaded_locales == ("en",)
        assert summary.missing_locales == ("fr", "de")

    def test_partial_locale_is_loaded(self) -> None:
        """One successful resource is enough for a locale to count as loaded."""
        summary = LoadSummary(
            results=(
                ResourceLoadResult("ja", "main.json", LoadStatus.NOT_FOUND),
                ResourceLoadResult("ja", "extra.json", LoadStatus.SUCCESS),
            )
        )
        assert summary.loaded_locales == ("ja",)
        assert summary.missing_locales == ()

    def test_empty(self) -> None:
        """An empty summary has zero counts and no locales."""
        summary = LoadSummary(results=())
        assert summary.total_attempted == 0
        assert summary.loaded_locales == ()
        assert summary.missing_locales == ()

    def test_repr(self) -> None:
        """repr shows every counter."""
        assert repr(self._summary()) == "LoadSummary(total=4, ok=2, not_found=1, errors=1)"

    def test_result_flags(self) -> None:
        """Exactly one status flag is set on a result."""
        result = ResourceLoadResult("en", "main.json", LoadStatus.NOT_FOUND)
        assert (result.is_success, result.is_not_found, result.is_error) == (False, True, False)


class TestLocalizationLoad:
    """PhraseLocalization.load() integration."""

    def test_loads_and_merges_resources(self, loader: PathPhraseLoader) -> None:
        """Resources for each locale are merged into the session."""
        l10n = PhraseLocalization()
        summary = l10n.load(loader, ["en", "ja"], ["main.json", "extra.json"])

        assert summary.successful == 3
        assert summary.not_found == 1
        assert l10n.t("app.label") == "App String"
        assert l10n.t("app.extra") == "Extra"
        l10n.set_locale("ja-JP")
        assert l10n.t("app.label") == "アップストリング"

    def test_errors_recorded_not_raised(
        self, loader: PathPhraseLoader, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A broken resource is recorded and logged without blocking others."""
        l10n = PhraseLocalization()
        with caplog.at_level(logging.WARNING, logger="phrasekit.localization.orchestrator"):
            summary = l10n.load(loader, ["de", "en"], ["main.json"])

        assert summary.errors == 1
        (failed,) = summary.get_errors()
        assert failed.locale == "de"
        assert isinstance(failed.error, ValueError)
        assert failed.source_path is not None and failed.source_path.endswith("de/main.json")
        assert l10n.has_phrases("de") is False
        assert l10n.t("app.label") == "App String"
        assert any("Failed to load phrases" in r.getMessage() for r in caplog.records)

    def test_locales_canonicalized(self, loader: PathPhraseLoader) -> None:
        """Locales are canonicalized before loading."""
        l10n = PhraseLocalization()
        summary = l10n.load(loader, "EN", ["main.json"])
        assert summary.results[0].locale == "en"
        assert l10n.has_phrases("en") is True

    def test_notifies_once_on_success(self, loader: PathPhraseLoader) -> None:
        """Subscribers are notified once per load call."""
        l10n = PhraseLocalization()
        calls: list[None] = []
        l10n.subscribe(lambda: calls.append(None))
        l10n.load(loader, ["en", "ja"], ["main.json"])
        assert len(calls) == 1

    def test_no_notification_when_nothing_loaded(self, loader: PathPhraseLoader) -> None:
        """Subscribers are not notified when no resource loaded."""
        l10n = PhraseLocalization()
        calls: list[None] = []
        l10n.subscribe(lambda: calls.append(None))
        summary = l10n.load(loader, ["fr"], ["main.json"])
        assert summary.not_found == 1
        assert calls == []

    def test_warns_about_locales_without_phrases(
        self, loader: PathPhraseLoader, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Locales that gained no phrases are reported in one warning."""
        l10n = PhraseLocalization()
        with caplog.at_level(logging.WARNING, logger="phrasekit.localization.orchestrator"):
            summary = l10n.load(loader, ["en", "fr"], ["main.json"])
        assert summary.missing_locales == ("fr",)
        assert [r.getMessage() for r in caplog.records] == [
            "No phrase resources loaded for ('fr',)"
        ]

    def test_alias_locale_rejected(self, loader: PathPhraseLoader) -> None:
        """Loading phrases for an alias locale raises AliasConflictError."""
        l10n = PhraseLocalization()
        l10n.set_alias("en-AU", "en")
        with pytest.raises(AliasConflictError):
            l10n.load(loader, ["en-AU"], ["main.json"])

    def test_custom_loader(self) -> None:
        """Any object implementing the loader protocol can be used."""
        class DictLoader:
            def __init__(self, data: dict[str, dict[str, object]]) -> None:
                self.data = data

            def load(self, locale: str, resource_id: str) -> object:
                try:
                    return self.data[locale][resource_id]
                except KeyError:
                    raise FileNotFoundError(resource_id) from None

            def describe_path(self, locale: str, resource_id: str) -> str:
                return f"memory://{locale}/{resource_id}"

        l10n = PhraseLocalization()
        summary = l10n.load(
            DictLoader({"en": {"main": {"key": "value"}}}),  # type: ignore[arg-type]
            ["en", "fr"],
            ["main"],
        )
        assert summary.successful == 1
        assert summary.get_not_found()[0].source_path == "memory://fr/main"
        assert l10n.t("key") == "value"
