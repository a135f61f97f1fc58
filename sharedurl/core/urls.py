# sharedurl/core/urls.py
#
# Normalisation of teacher-submitted URLs.
#
# Two string types leave this module:
#   - HtmlUrl: every "&" is written as "&amp;", safe inside an HTML attribute
#   - RawUrl:  the same URL with "&amp;" turned back into "&", fit for a
#              Location header
# A redirect must only ever be built from a RawUrl.
from __future__ import annotations

import html
import re
from typing import Any
from urllib.parse import quote


class HtmlUrl(str):
    """URL with & escaped as &amp;. Not a redirect target."""


class RawUrl(str):
    """URL usable as-is in a redirect."""


_HAS_SCHEME = re.compile(r"^[a-z]+:", re.IGNORECASE)
_WEB_PREFIX = re.compile(r"^(/|https?:|ftp:)", re.IGNORECASE)
_SCHEME_SLASHES = re.compile(r"^[a-z]+://", re.IGNORECASE)
_HTTP_OR_FTP = re.compile(r"^(https?:|ftp:)", re.IGNORECASE)

# weak checks only, see appears_valid_url()
_WEB_URL = re.compile(
    r"^[a-z]+://([^:@\s]+:[^@\s]+@)?[^ @]+(:[0-9]+)?(/[^#]*)?(#.*)?$",
    re.IGNORECASE,
)
_ANY_URL = re.compile(r"^[a-z]+://...*$", re.IGNORECASE)

# named or numeric character references, only in their terminated "&...;" form
_ENTITY = re.compile(r"&(#[0-9]+|#x[0-9a-f]+|[a-z][a-z0-9]*);", re.IGNORECASE)

# -----------------------------
# Allow-list for build_full_url
# -----------------------------
_ALLOWED_PUNCTUATION = frozenset(";/?:@=&$_.+!*(),-#%")
_ALLOWED_CODEPOINTS = frozenset(
    {0x20E3, 0x00AE, 0x00A9, 0x203C, 0x2047, 0x2048, 0x2049, 0x3030, 0x303D,
     0x2139, 0x2122, 0x3297, 0x3299}
)
_ALLOWED_RANGES = (
    (0x2300, 0x23FF),    # misc technical
    (0x2600, 0x27BF),    # symbols, dingbats
    (0x2B00, 0x2BF0),    # arrows
    (0xFE00, 0xFEFF),    # arabic presentation forms, variation selectors
    (0x2190, 0x21FF),    # arrows
    (0x2900, 0x297F),    # supplemental arrows
    (0x2460, 0x24FF),    # enclosed alphanumerics
    (0x25A0, 0x25FF),    # geometric shapes
    (0x1F000, 0x1F6FF),  # emojis
)

_SPECIAL_CHARS = (
    ('"', "%22"),
    ("'", "%27"),
    (" ", "%20"),
    ("<", "%3C"),
    (">", "%3E"),
)


def _is_allowed_char(ch: str) -> bool:
    if ch in _ALLOWED_PUNCTUATION or "0" <= ch <= "9":
        return True
    if ch.isalpha():
        # unicode letters, latin included
        return True
    cp = ord(ch)
    if cp in _ALLOWED_CODEPOINTS:
        return True
    return any(lo <= cp <= hi for lo, hi in _ALLOWED_RANGES)


def decode_entities(url: str) -> str:
    """
    Decodes "&name;" and "&#N;" references. Bare "&section=2" query
    separators are left alone, even where HTML5 knows a legacy entity.
    """
    return _ENTITY.sub(lambda m: html.unescape(m.group(0)), url)


def _encode_disallowed(url: str) -> str:
    return "".join(ch if _is_allowed_char(ch) else quote(ch, safe="") for ch in url)


def fix_submitted_url(url: str) -> str:
    """
    Fix common URL problems that we want teachers to see fixed the next time
    they edit the activity. No XSS protection here.
    """
    # empty urls are rejected by form validation
    url = (url or "").strip()

    # we want the raw URI, not entities
    url = decode_entities(url)

    if not _HAS_SCHEME.match(url) and not url.startswith("/"):
        # relative links are not allowed, /xx/yy links are ok
        url = "http://" + url

    return url


def appears_valid_url(url: str) -> bool:
    """
    Weak url validation: only severely malformed URLs are rejected, this is
    not RFC validation and does not check the URL points to an activity.
    """
    if url.startswith("/"):
        # relative to the server root
        return True
    if _WEB_PREFIX.match(url):
        return bool(_WEB_URL.match(url))
    return bool(_ANY_URL.match(url))


def validate_submitted_url(url: str) -> str | None:
    """
    Form-time check of the activity URL.

    Returns the language string key of the error, or None when the URL is
    acceptable. Teachers are responsible for testing the link actually works.
    """
    if not url:
        return "required"

    if url.startswith("/"):
        return None

    if _SCHEME_SLASHES.match(url) or _HTTP_OR_FTP.match(url):
        return None if appears_valid_url(url) else "invalidurl"

    if _HAS_SCHEME.match(url):
        # mailto:, teamspeak: ... not validated at all
        return None

    # will be fixed with an http:// prefix on save
    return None if appears_valid_url("http://" + url) else "invalidurl"


def build_full_url(instance: Any) -> HtmlUrl:
    """
    Full URL of a stored activity, with & encoded as &amp;.

    Use to_redirect_url() before sending the result in a Location header.
    """
    # entities may already be decoded, decoding twice is fine
    fullurl = decode_entities(instance.externalurl or "")

    if _WEB_PREFIX.match(fullurl):
        # not always valid afterwards, but it helps with UTF-8 problems
        fullurl = _encode_disallowed(fullurl)
    else:
        for ch, encoded in _SPECIAL_CHARS:
            fullurl = fullurl.replace(ch, encoded)

    return HtmlUrl(fullurl.replace("&", "&amp;"))


to_display_url = build_full_url


def to_redirect_url(url: HtmlUrl) -> RawUrl:
    if not isinstance(url, HtmlUrl):
        raise TypeError("to_redirect_url() expects an HtmlUrl")
    return RawUrl(url.replace("&amp;", "&"))
