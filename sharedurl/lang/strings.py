# sharedurl/lang/strings.py
from __future__ import annotations

from typing import Any

from sharedurl.lang import en, fr

DEFAULT_LANG = "en"

_STRINGS: dict[str, dict[str, str]] = {
    "en": en.STRINGS,
    "fr": fr.STRINGS,
}


def get_string(key: str, lang: str = DEFAULT_LANG, a: Any = None) -> str:
    """
    Localised string, falling back to English and then to "[[key]]".
    "{$a}" in the string is replaced by a.
    """
    lang = (lang or DEFAULT_LANG).split("_")[0].split("-")[0].lower()
    value = _STRINGS.get(lang, {}).get(key)
    if value is None:
        value = _STRINGS[DEFAULT_LANG].get(key)
    if value is None:
        return f"[[{key}]]"
    if a is not None:
        value = value.replace("{$a}", str(a))
    return value
