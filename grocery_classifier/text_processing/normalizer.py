"""
Product name normalization.

Every lookup, catalog write, learning call and suggestion search goes through
``normalize`` so that spellings with and without Latvian diacritics share a
single catalog key.
"""

import re
import unicodedata

# Latvian long vowels and softened consonants folded to their base letters.
DIACRITIC_FOLDING = {
    "ā": "a",
    "ē": "e",
    "ī": "i",
    "ō": "o",
    "ū": "u",
    "č": "c",
    "ģ": "g",
    "ķ": "k",
    "ļ": "l",
    "ņ": "n",
    "š": "s",
    "ž": "z",
}

_TRANSLATION_TABLE = str.maketrans(DIACRITIC_FOLDING)
_PUNCTUATION_PATTERN = re.compile(r"[^\w\s]|_")
_WHITESPACE_PATTERN = re.compile(r"\s+")


def normalize(raw: str) -> str:
    """Return the canonical catalog key for a raw product name.

    Composes the text (NFC), lowercases, folds diacritics, turns punctuation
    into spaces, collapses whitespace and trims.

    Examples:
        >>> normalize("  Maltā  gaļa, ")
        'malta gala'
        >>> normalize("Ābolu-sula")
        'abolu sula'
    """
    # Decomposed input would otherwise leave combining marks behind.
    composed = unicodedata.normalize("NFC", raw)
    folded = composed.lower().translate(_TRANSLATION_TABLE)
    spaced = _PUNCTUATION_PATTERN.sub(" ", folded)
    return _WHITESPACE_PATTERN.sub(" ", spaced).strip()
