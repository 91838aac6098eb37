"""phrasekit exception hierarchy.

Grammar violations (malformed locale tags, keys, context segments, alias
cycles) are programmer errors in content or configuration and are always
raised synchronously. Content gaps (missing phrase, missing plural rule,
missing interpolation variable) are never errors; they degrade gracefully.

Every concrete error also derives from the matching builtin (ValueError or
TypeError) so callers can catch either.

Python 3.13+. Zero external dependencies.
"""

__all__ = [
    "AliasConflictError",
    "InvalidKeyError",
    "InvalidPhraseError",
    "InvalidTagError",
    "PhraseKitError",
]


class PhraseKitError(Exception):
    """Base exception for all phrasekit errors."""


class InvalidTagError(PhraseKitError, ValueError):
    """Locale string does not match the language/script/region grammar.

    Attributes:
        tag: The rejected input (may be a non-string object)
    """

    def __init__(self, tag: object) -> None:
        """Initialize InvalidTagError.

        Args:
            tag: The value that failed to parse
        """
        self.tag = tag
        super().__init__(f"{tag!r} is not a valid language tag.")


class InvalidKeyError(PhraseKitError, ValueError):
    """Lookup key or phrase tree context segment fails the key grammar.

    Attributes:
        key: The rejected key or context segment
        pattern: Pattern the key was validated against
    """

    def __init__(self, key: object, pattern: str) -> None:
        """Initialize InvalidKeyError.

        Args:
            key: The rejected key or context segment
            pattern: Source of the grammar that was violated
        """
        self.key = key
        self.pattern = pattern
        super().__init__(
            f"{key!r} is not a valid key format. Valid keys are of the format {pattern}"
        )


class InvalidPhraseError(PhraseKitError, TypeError):
    """Phrase tree value is neither a string nor a nested mapping.

    Attributes:
        path: Context segments leading to the offending value
    """

    def __init__(self, path: tuple[str, ...], value: object) -> None:
        """Initialize InvalidPhraseError.

        Args:
            path: Context segments leading to the offending value
            value: The offending value
        """
        self.path = path
        joined = ".".join(path) or "<root>"
        super().__init__(
            f"Phrase at {joined!r} must be a string or a mapping, got {type(value).__name__}"
        )


class AliasConflictError(PhraseKitError, ValueError):
    """Alias registration would make a locale both real and virtual.

    Raised when a locale would alias itself, when an alias target is itself
    an alias, when an alias key is already an alias target, or when an alias
    key already has phrases registered.

    Attributes:
        locale: Canonical locale that caused the conflict
    """

    def __init__(self, locale: str, reason: str) -> None:
        """Initialize AliasConflictError.

        Args:
            locale: Canonical locale that caused the conflict
            reason: Human-readable explanation
        """
        self.locale = locale
        super().__init__(f"{locale} {reason}")
