"""
Identifier casing transforms for record properties and enum variants.

Record fields and enum members are written in Python style; the wire names
stored in Datastore are derived from them with one of the casings below.
"""

from __future__ import annotations

import re
from enum import Enum

_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


class Casing(Enum):
    """Supported casing policies, valued by their conventional spelling."""

    LOWER = "lowercase"
    UPPER = "UPPERCASE"
    CAMEL = "camelCase"
    PASCAL = "PascalCase"
    SNAKE = "snake_case"
    SCREAMING_SNAKE = "SCREAMING_SNAKE_CASE"
    KEBAB = "kebab-case"
    SCREAMING_KEBAB = "SCREAMING-KEBAB-CASE"

    @classmethod
    def from_str(cls, value: str) -> Casing:
        """Convert a spelling such as "camelCase" to a Casing."""
        for casing in cls:
            if casing.value == value or casing.name == value.upper():
                return casing
        raise ValueError(f"Invalid casing: {value}")


def split_words(identifier: str) -> list[str]:
    """Split an identifier on underscores, hyphens and lower-to-upper boundaries.

    >>> split_words("first_name")
    ['first', 'name']
    >>> split_words("AreWeThereYet")
    ['Are', 'We', 'There', 'Yet']
    """
    words: list[str] = []
    for chunk in re.split(r"[_\-]+", identifier):
        if chunk:
            words.extend(_BOUNDARY.sub(" ", chunk).split())
    return words


def _capitalize(word: str) -> str:
    # All-caps words come from SCREAMING_SNAKE enum members; mixed case is kept
    if word.isupper():
        return word.capitalize()
    return word[:1].upper() + word[1:]


def transform(identifier: str, casing: Casing | str) -> str:
    """Apply a casing policy to a field or variant identifier."""
    if isinstance(casing, str):
        casing = Casing.from_str(casing)

    if casing is Casing.LOWER:
        return identifier.lower()
    if casing is Casing.UPPER:
        return identifier.upper()

    words = split_words(identifier)
    if not words:
        return identifier

    if casing is Casing.CAMEL:
        return words[0].lower() + "".join(_capitalize(w) for w in words[1:])
    if casing is Casing.PASCAL:
        return "".join(_capitalize(w) for w in words)
    if casing is Casing.SNAKE:
        return "_".join(w.lower() for w in words)
    if casing is Casing.SCREAMING_SNAKE:
        return "_".join(w.upper() for w in words)
    if casing is Casing.KEBAB:
        return "-".join(w.lower() for w in words)
    return "-".join(w.upper() for w in words)
