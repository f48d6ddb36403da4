"""Question text canonicalization."""

import re

_PUNCTUATION = re.compile(r"[.,;?!]")
_WHITESPACE = re.compile(r"\s+")


def normalize(text: str) -> str:
    """Lowercase, drop ``. , ; ? !``, collapse whitespace, trim.

    Idempotent: ``normalize(normalize(x)) == normalize(x)``.
    """
    text = _PUNCTUATION.sub("", text.lower())
    return _WHITESPACE.sub(" ", text).strip()
