"""Fence language tags derived from Pygments lexer aliases."""

from __future__ import annotations

from functools import lru_cache

from pygments.lexers import get_lexer_for_filename
from pygments.util import ClassNotFound

DEFAULT_LANGUAGE = "text"


@lru_cache(maxsize=512)
def language_for_filename(filename: str) -> str:
    """Return the short Pygments alias for ``filename``.

    Names Pygments does not know fall back to the bare extension, then to
    ``"text"``.
    """
    try:
        lexer = get_lexer_for_filename(filename)
    except ClassNotFound:
        _stem, dot, extension = filename.rpartition(".")
        if dot and extension and _stem:
            return extension.lower()
        return DEFAULT_LANGUAGE
    aliases = getattr(lexer, "aliases", None) or ()
    return aliases[0] if aliases else DEFAULT_LANGUAGE
