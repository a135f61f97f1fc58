# sharedurl/services/media.py
from __future__ import annotations

import html
from typing import Callable

from sharedurl.core.urls import HtmlUrl
from sharedurl.services.mimeinfo import guess_url_mimetype

_PLAYABLE_PREFIXES = ("video/", "audio/")
_FLASH_TYPES = ("application/x-shockwave-flash",)


class MediaRenderer:
    """HTML fragments for content shown inside the activity page."""

    def __init__(self, guess_mimetype: Callable[[str], str | None] = guess_url_mimetype):
        self.guess_mimetype = guess_mimetype

    def _mimetype(self, url: str) -> str:
        return self.guess_mimetype(url.replace("&amp;", "&")) or ""

    def can_embed(self, url: str) -> bool:
        mimetype = self._mimetype(url)
        return mimetype.startswith("image/") or mimetype.startswith(_PLAYABLE_PREFIXES)

    def embed(self, url: HtmlUrl, title: str) -> str:
        mimetype = self._mimetype(url)
        title = html.escape(title or "", quote=True)

        if mimetype.startswith("image/"):
            return (
                '<div class="resourcecontent resourceimg">'
                f'<img title="{title}" class="resourceimage" src="{url}" alt="" />'
                "</div>"
            )
        if mimetype.startswith("video/") and mimetype not in _FLASH_TYPES:
            return (
                '<div class="resourcecontent resourcevideo">'
                f'<video controls="controls" title="{title}" src="{url}"></video>'
                "</div>"
            )
        if mimetype.startswith("audio/"):
            return (
                '<div class="resourcecontent resourceaudio">'
                f'<audio controls="controls" title="{title}" src="{url}"></audio>'
                "</div>"
            )
        return self.embed_general(url, f'<a href="{url}">{title}</a>', mimetype)

    @staticmethod
    def embed_general(url: HtmlUrl, fallback: str, mimetype: str) -> str:
        """Generic <object> fallback. fallback is HTML shown when the object cannot be rendered."""
        mimetype = html.escape(mimetype or "text/html", quote=True)
        return (
            '<div class="resourcecontent resourcegeneral">'
            f'<object id="resourceobject" data="{url}" type="{mimetype}" width="800" height="600">'
            f'<param name="src" value="{url}" />'
            f"{fallback}</object>"
            "</div>"
        )
