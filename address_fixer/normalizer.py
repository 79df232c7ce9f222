"""Canonical text form used for fuzzy address matching."""

import re
import unicodedata

from .config import DASH_CHARS

_DASH_TABLE = str.maketrans({ch: "-" for ch in DASH_CHARS})
_WHITESPACE_RE = re.compile(r"\s+")


def normalize(text: str) -> str:
    """Reduce *text* to its comparison-only form.

    Lower-cases, applies NFC composition, folds the U+2010..U+2015 dash
    block to ``-`` and drops every whitespace character, so that
    ``"Block C - 13"``, ``"block c-13"`` and ``"BLOCK C–13"`` all
    compare equal.
    """
    text = unicodedata.normalize("NFC", text.lower())
    text = text.translate(_DASH_TABLE)
    return _WHITESPACE_RE.sub("", text)
