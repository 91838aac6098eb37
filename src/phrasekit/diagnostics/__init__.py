"""Error taxonomy for phrasekit.

Python 3.13+. Zero external dependencies.
"""

from .errors import (
    AliasConflictError,
    InvalidKeyError,
    InvalidPhraseError,
    InvalidTagError,
    PhraseKitError,
)

__all__ = [
    "AliasConflictError",
    "InvalidKeyError",
    "InvalidPhraseError",
    "InvalidTagError",
    "PhraseKitError",
]
