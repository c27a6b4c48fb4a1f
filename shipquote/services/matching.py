"""Place-name normalization shared by zone and locality matching."""

import unicodedata


def normalize_name(value: str) -> str:
    """Lower-case, strip diacritics and surrounding whitespace."""
    if not value:
        return ""
    decomposed = unicodedata.normalize("NFD", value.strip().lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def names_match(stored: str, given: str) -> bool:
    """True when either normalized name contains the other.

    Tolerates abbreviated or partial input ("Nunoa" vs "Ñuñoa, Santiago").
    Empty names never match.
    """
    a = normalize_name(stored)
    b = normalize_name(given)
    if not a or not b:
        return False
    return a in b or b in a
