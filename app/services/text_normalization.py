"""Accent- and case-insensitive text comparison helpers.

``normalize`` is the reference implementation that the database-side
``normalize_text`` function must agree with (see
``app.services.normalization_provider``).
"""

from __future__ import annotations

import unicodedata

# Locale table used when a full Unicode decomposition is not available on the
# storage side. Keys are already-lowercased letters.
ACCENT_TABLE: dict[str, str] = {
    "á": "a",
    "à": "a",
    "â": "a",
    "ä": "a",
    "é": "e",
    "è": "e",
    "ê": "e",
    "ë": "e",
    "í": "i",
    "ì": "i",
    "î": "i",
    "ï": "i",
    "ó": "o",
    "ò": "o",
    "ô": "o",
    "ö": "o",
    "ú": "u",
    "ù": "u",
    "û": "u",
    "ü": "u",
    "ñ": "n",
    "ç": "c",
}

_ACCENT_TRANSLATION = str.maketrans(ACCENT_TABLE)


def normalize(text: str | None) -> str | None:
    if text is None:
        return None
    decomposed = unicodedata.normalize("NFD", text.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.strip()


def fold_accents(text: str | None) -> str | None:
    """Table-based normalization: lowercase, substitute ``ACCENT_TABLE``, trim.

    Agrees with :func:`normalize` for every letter in the table and for plain
    ASCII; other diacritics pass through unchanged.
    """
    if text is None:
        return None
    return text.lower().translate(_ACCENT_TRANSLATION).strip()


def contains(haystack: str | None, needle: str | None) -> bool:
    if haystack is None or needle is None:
        return False
    return normalize(needle) in normalize(haystack)


def equals(a: str | None, b: str | None) -> bool:
    if a is None and b is None:
        return True
    if a is None or b is None:
        return False
    return normalize(a) == normalize(b)


def prepare_like_term(term: str | None) -> str | None:
    """Normalize a search term, treating blank input as no term at all."""
    if term is None or not term.strip():
        return None
    return normalize(term)
