"""Phrase tree validation, cloning and merging.

A phrase tree maps context segments to either a display string (leaf) or a
nested phrase tree (branch)::

    {
        "app": {
            "label": "App String",
            "cats": {"one": "%{count} cat", "other": "%{count} cats"},
        },
    }

Every key at every level must match the context grammar ``[A-Za-z0-9_-]+``.
Violations are reported when phrases are registered or merged, never at
lookup time.

Python 3.13+. Zero external dependencies.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping, Sequence

from phrasekit.constants import CONTEXT_PATTERN
from phrasekit.diagnostics import InvalidKeyError, InvalidPhraseError

__all__ = [
    "PhraseTree",
    "clone_phrases",
    "is_branch",
    "merge_phrases",
    "validate_context",
    "validate_phrases",
]

type PhraseTree = Mapping[str, PhraseTree | str]


def is_branch(node: object) -> bool:
    """Check whether a phrase node is a nested tree rather than a leaf."""
    return isinstance(node, Mapping)


def validate_context(context: object) -> None:
    """Validate a single context segment.

    Raises:
        InvalidKeyError: If context is not a string matching the context grammar
    """
    if not isinstance(context, str) or CONTEXT_PATTERN.fullmatch(context) is None:
        raise InvalidKeyError(context, CONTEXT_PATTERN.pattern)


def validate_phrases(phrases: PhraseTree) -> None:
    """Validate every key and value of a phrase tree.

    Raises:
        InvalidKeyError: If any key fails the context grammar
        InvalidPhraseError: If any value is neither a string nor a mapping
    """
    _validate(phrases, ())


def _validate(node: object, path: tuple[str, ...]) -> None:
    if not isinstance(node, Mapping):
        raise InvalidPhraseError(path, node)
    for context, value in node.items():
        validate_context(context)
        match value:
            case str():
                pass
            case Mapping():
                _validate(value, (*path, context))
            case _:
                raise InvalidPhraseError((*path, context), value)


def clone_phrases(phrases: PhraseTree) -> dict[str, object]:
    """Return a validated deep copy of a phrase tree as plain dicts.

    The caller's tree is never retained, so later mutation of the input
    cannot leak into registered phrases.

    Raises:
        InvalidKeyError: If any key fails the context grammar
        InvalidPhraseError: If any value is neither a string nor a mapping
    """
    return _clone(phrases, ())


def _clone(node: object, path: tuple[str, ...]) -> dict[str, object]:
    if not isinstance(node, Mapping):
        raise InvalidPhraseError(path, node)
    cloned: dict[str, object] = {}
    for context, value in node.items():
        validate_context(context)
        match value:
            case str():
                cloned[context] = value
            case Mapping():
                cloned[context] = _clone(value, (*path, context))
            case _:
                raise InvalidPhraseError((*path, context), value)
    return cloned


def merge_phrases(
    targets: MutableMapping[str, object] | Sequence[MutableMapping[str, object]],
    source: PhraseTree,
) -> None:
    """Deep-merge source into one or more target trees, in place.

    The shape of the source wins: a source leaf replaces whatever the target
    holds at that path, and a source branch turns a target leaf into a branch
    before merging recursively. The whole source is validated before any
    target is touched, so a rejected merge leaves every target unchanged.

    Example:
        >>> target = {"foo": {"bar": "baz"}, "other": "a"}
        >>> merge_phrases(target, {"foo": "bar"})
        >>> target
        {'foo': 'bar', 'other': 'a'}

    Args:
        targets: A single tree or a sequence of trees to update
        source: Tree to merge in (never mutated)

    Raises:
        InvalidKeyError: If any source key fails the context grammar
        InvalidPhraseError: If any source value is neither a string nor a mapping
    """
    validate_phrases(source)
    if isinstance(targets, MutableMapping):
        targets = [targets]
    _merge(list(targets), source)


def _merge(targets: list[MutableMapping[str, object]], source: PhraseTree) -> None:
    for context, value in source.items():
        match value:
            case str():
                for target in targets:
                    target[context] = value
            case Mapping():
                branches: list[MutableMapping[str, object]] = []
                for target in targets:
                    branch = target.get(context)
                    if not isinstance(branch, MutableMapping):
                        branch = dict(branch) if isinstance(branch, Mapping) else {}
                        target[context] = branch
                    branches.append(branch)
                _merge(branches, value)
