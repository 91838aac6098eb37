"""Enumerations for phrasekit type-safe constants.

Uses StrEnum (Python 3.11+) for automatic string conversion.
StrEnum members are strings themselves, so a PluralCategory can be used
directly as a phrase tree key.

Python 3.13+.
"""

from enum import StrEnum


class PluralCategory(StrEnum):
    """CLDR plural category returned by every plural rule.

    StrEnum provides automatic string conversion: str(PluralCategory.ONE) == "one"
    """

    ZERO = "zero"
    ONE = "one"
    TWO = "two"
    FEW = "few"
    MANY = "many"
    OTHER = "other"


class LoadStatus(StrEnum):
    """Outcome of loading a single phrase resource.

    StrEnum provides automatic string conversion: str(LoadStatus.SUCCESS) == "success"
    """

    SUCCESS = "success"
    """Resource loaded, validated and merged."""

    NOT_FOUND = "not_found"
    """Resource does not exist for this locale (expected for partial translations)."""

    ERROR = "error"
    """Resource exists but could not be read, decoded or validated."""


__all__ = [
    "LoadStatus",
    "PluralCategory",
]
