"""Split a line of player input into word tokens."""

import re
from dataclasses import dataclass

from .vocabulary import Role

_WORD_RE = re.compile(r"[a-z0-9][a-z0-9'-]*", re.IGNORECASE)


@dataclass(frozen=True)
class Token:
    text: str  # case-folded
    surface: str  # as typed, for error messages
    role: Role = Role.UNKNOWN


def tokenize(raw: str) -> list[Token]:
    """Return the word tokens of `raw`; punctuation and whitespace separate words."""
    return [
        Token(text=match.group().casefold(), surface=match.group())
        for match in _WORD_RE.finditer(raw)
    ]
