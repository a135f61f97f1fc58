# sharedurl/services/pages.py
#
# HTML pages of the view endpoint.
from __future__ import annotations

import html
import re
from typing import Any

from sharedurl.core.display import DisplayMode
from sharedurl.core.urls import HtmlUrl
from sharedurl.lang.strings import get_string
from sharedurl.page_templates.view import (
    ACTIVITY_HEADING_HTML,
    FRAMESET_HTML,
    INTRO_HTML,
    LINK_HTML,
    NOTICE_HTML,
    PAGE_HTML,
    REDIRECT_HEAD_HTML,
    REDIRECT_HTML,
    WORKAROUND_HTML,
)

FORMAT_MOODLE = 0
FORMAT_HTML = 1
FORMAT_PLAIN = 2
FORMAT_MARKDOWN = 4

DEFAULT_POPUP_WIDTH = 620
DEFAULT_POPUP_HEIGHT = 450

POPUP_FEATURES = (
    "width={width},height={height},toolbar=no,location=no,menubar=no,copyhistory=no,"
    "status=no,directories=no,scrollbars=yes,resizable=yes"
)


def _render(template: str, vars: dict[str, Any]) -> str:
    def repl(m: re.Match) -> str:
        key = (m.group(1) or "").strip()
        val = vars.get(key, "")
        return "" if val is None else str(val)

    return re.sub(r"\{\{\s*([a-zA-Z0-9_]+)\s*\}\}", repl, template)


def _e(value: Any) -> str:
    return html.escape("" if value is None else str(value), quote=True)


def _js(value: str) -> str:
    # for a single-quoted JS string inside a double-quoted attribute
    return value.replace("\\", "\\\\").replace("'", "\\'")


def format_intro(instance: Any) -> str:
    intro = instance.intro or ""
    if int(instance.introformat or 0) in (FORMAT_PLAIN, FORMAT_MARKDOWN):
        return _e(intro).replace("\n", "<br />")
    return intro


def has_intro(instance: Any) -> bool:
    return bool(re.sub(r"<[^>]*>", "", instance.intro or "").strip())


def popup_features(options: dict) -> str:
    width = options.get("popupwidth") or DEFAULT_POPUP_WIDTH
    height = options.get("popupheight") or DEFAULT_POPUP_HEIGHT
    return POPUP_FEATURES.format(width=int(width), height=int(height))


# -----------------------------
# Page fragments
# -----------------------------
def page(*, lang: str, instance: Any, course: dict, body: str, head_extra: str = "") -> str:
    return _render(
        PAGE_HTML,
        {
            "lang": _e(lang),
            "title": _e(f"{course['shortname']}: {instance.name}"),
            "heading": _e(course["fullname"]),
            "head_extra": head_extra,
            "body": body,
        },
    )


def activity_heading(instance: Any) -> str:
    return _render(ACTIVITY_HEADING_HTML, {"name": _e(instance.name)})


def intro_block(instance: Any, ignore_settings: bool = False) -> str:
    if not ignore_settings and not instance.options.get("printintro"):
        return ""
    if not has_intro(instance):
        return ""
    return _render(INTRO_HTML, {"intro": format_intro(instance)})


def notice_block(message: str, continue_url: str, lang: str) -> str:
    return _render(
        NOTICE_HTML,
        {
            "message": _e(message),
            "continue_url": _e(continue_url),
            "continue_text": _e(get_string("continue", lang)),
        },
    )


def link(url: HtmlUrl, extra: str = "") -> str:
    return _render(LINK_HTML, {"url": url, "extra": extra})


def clicktoopen(fullurl: HtmlUrl, lang: str, extra: str = "") -> str:
    # the message is escaped, the link inserted into it is not
    return _e(get_string("clicktoopen", lang, "\x00")).replace("\x00", link(fullurl, extra))


def workaround_block(instance: Any, fullurl: HtmlUrl, display: DisplayMode, lang: str) -> str:
    """Single link to the resource, opening a popup or a new window when configured."""
    if display == DisplayMode.POPUP:
        features = popup_features(instance.options)
        extra = f" onclick=\"window.open('{_js(fullurl)}', '', '{features}'); return false;\""
    elif display == DisplayMode.NEW:
        extra = " onclick=\"this.target='_blank';\""
    else:
        extra = ""

    return _render(WORKAROUND_HTML, {"message": clicktoopen(fullurl, lang, extra)})


def redirect_page(
    *,
    lang: str,
    instance: Any,
    course: dict,
    url: HtmlUrl,
    delay: int,
    edit_url: str,
    edit_text: str,
) -> str:
    body = _render(
        REDIRECT_HTML,
        {
            "edit_link": f'<a href="{_e(edit_url)}">{_e(edit_text)}</a>',
            "message": _e(get_string("pageshouldredirect", lang)),
            "url": url,
            "continue_text": _e(get_string("continue", lang)),
        },
    )
    head = _render(REDIRECT_HEAD_HTML, {"delay": int(delay), "url": url})
    return page(lang=lang, instance=instance, course=course, body=body, head_extra=head)


def frameset_page(
    *,
    lang: str,
    instance: Any,
    course: dict,
    framesize: int,
    nav_url: str,
    content_url: HtmlUrl,
) -> str:
    return _render(
        FRAMESET_HTML,
        {
            "lang": _e(lang),
            "title": _e(f"{course['shortname']}: {instance.name}"),
            "framesize": int(framesize),
            "nav_url": _e(nav_url),
            "nav_title": _e(get_string("modulename", lang)),
            "content_url": content_url,
            "content_title": _e(instance.name),
        },
    )
