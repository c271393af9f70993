from __future__ import annotations

import re
import unicodedata

_NON_ALNUM = re.compile(r"[^0-9a-z]+")


def normalize_key(text: str | None) -> str:
    """Lookup key for free-text places: ``"São  Paulo!"`` -> ``"sao paulo"``.

    Idempotent, so already normalized keys can be passed again safely.
    """
    if not text:
        return ""
    s = unicodedata.normalize("NFKD", str(text).lower())
    s = "".join(ch for ch in s if not unicodedata.combining(ch))
    s = _NON_ALNUM.sub(" ", s)
    return " ".join(s.split())


__all__ = ["normalize_key"]
