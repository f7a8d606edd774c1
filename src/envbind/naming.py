"""Derive environment variable names from field names.

``derive_name`` is the default naming function for both ``bind`` and
``dump``, so a record dumped with the defaults can always be bound back.

    >>> derive_name("LastName")
    'LAST_NAME'
    >>> derive_name("URLEncoding")
    'URL_ENCODING'
    >>> derive_name("loginURL")
    'LOGIN_URL'
    >>> derive_name("last_name")
    'LAST_NAME'
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import List

# lowercase (plus optional digits/underscores) followed by uppercase: "loginURL", "my2B"
_LOWER_UPPER = re.compile(r"[a-z][0-9_]*([A-Z])")
# 3+ capitals followed by lowercase: "URLEncoding", "SSLPort"
_ACRONYM_WORD = re.compile(r"[A-Z]{3,}[0-9_]*[a-z]")
# split point for an acronym run: before its last capital
_ACRONYM_SPLIT = re.compile(r"[A-Z]+([A-Z])[0-9]*[a-z]")


def is_compound(name: str) -> bool:
    """Return True if ``name`` contains a word boundary worth splitting on."""
    return bool(_LOWER_UPPER.search(name) or _ACRONYM_WORD.search(name))


def split_words(name: str) -> List[str]:
    """Split a camel-case identifier into words.

    Acronym boundaries are split first, then every lowercase-to-uppercase
    transition inside the resulting pieces. Digits stay with the word
    they follow.
    """
    pieces = _split_at(name, _ACRONYM_SPLIT)
    words: List[str] = []
    for piece in pieces:
        words.extend(_split_at(piece, _LOWER_UPPER))
    return words


def _split_at(text: str, pattern: re.Pattern[str]) -> List[str]:
    words: List[str] = []
    rest = text
    while True:
        match = pattern.search(rest)
        if match is None:
            break
        index = match.start(1)
        words.append(rest[:index])
        rest = rest[index:]
    if rest:
        words.append(rest)
    return words


@lru_cache(maxsize=1024)
def derive_name(name: str) -> str:
    """Return the canonical variable name for the identifier ``name``."""
    if not is_compound(name):
        return name.upper()
    return "_".join(split_words(name)).upper()


__all__ = ["derive_name", "is_compound", "split_words"]
