# sharedurl/core/display.py
from __future__ import annotations

from enum import IntEnum
from typing import Any, Callable

from sharedurl.services.mimeinfo import guess_url_mimetype


class DisplayMode(IntEnum):
    AUTO = 0
    EMBED = 1
    FRAME = 2
    NEW = 3
    DOWNLOAD = 4
    OPEN = 5
    POPUP = 6


# modes a teacher may pick in the edit form, DOWNLOAD is only ever guessed
SELECTABLE_MODES = (
    DisplayMode.AUTO,
    DisplayMode.EMBED,
    DisplayMode.FRAME,
    DisplayMode.OPEN,
    DisplayMode.NEW,
    DisplayMode.POPUP,
)

# modes that carry the printintro option
INTRO_MODES = (DisplayMode.AUTO, DisplayMode.EMBED, DisplayMode.FRAME)

# known to cause trouble for external links
DOWNLOAD_MIMETYPES = frozenset(
    {
        "application/zip",
        "application/x-tar",
        "application/g-zip",
        "application/pdf",
        "text/html",
    }
)

EMBED_MIMETYPES = frozenset(
    {
        # images
        "image/gif",
        "image/jpeg",
        "image/png",
        "image/svg+xml",
        # video
        "application/x-shockwave-flash",
        "video/x-flv",
        "video/x-ms-wm",
        "video/quicktime",
        "video/mpeg",
        "video/mp4",
        # audio
        "audio/mp3",
        "audio/x-realaudio-plugin",
        "x-realaudio-plugin",
    }
)


def select_display(
    instance: Any,
    wwwroot: str | None,
    guess_mimetype: Callable[[str], str | None] = guess_url_mimetype,
) -> DisplayMode:
    """Decide the best display format for an activity."""
    display = DisplayMode(int(instance.display or 0))
    if display != DisplayMode.AUTO:
        return display

    url = instance.externalurl or ""

    # links to pages of this site
    if wwwroot and url.startswith(wwwroot):
        if "file.php" not in url and ".php" in url:
            # most probably a page with navigation
            return DisplayMode.OPEN

    mimetype = guess_mimetype(url)

    if mimetype in DOWNLOAD_MIMETYPES:
        return DisplayMode.DOWNLOAD
    if mimetype in EMBED_MIMETYPES:
        return DisplayMode.EMBED

    # let the browser deal with it
    return DisplayMode.OPEN
