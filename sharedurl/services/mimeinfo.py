# sharedurl/services/mimeinfo.py
from __future__ import annotations

import mimetypes
import re
from urllib.parse import urlsplit

# types the stdlib table does not know, or names differently
_OVERRIDES = {
    ".mp3": "audio/mp3",
    ".flv": "video/x-flv",
    ".swf": "application/x-shockwave-flash",
    ".gz": "application/g-zip",
    ".tgz": "application/g-zip",
    ".svg": "image/svg+xml",
}

# .../pluginfile.php/12/... or .../file.php?file=/12/...
_FILE_SERVING = re.compile(r"^(.*)/[a-z]*file\.php(\?file=)?(/[^&?#]*)")


def guess_url_mimetype(url: str) -> str | None:
    """
    Best guess of the MIME type a URL serves, from its extension.

    Script pages, directory-like URLs and bare hosts are assumed to be HTML.
    Returns None when nothing sensible can be guessed.
    """
    url = url or ""

    m = _FILE_SERVING.match(url)
    if m:
        # drop the file serving script so the real file name is used
        url = m.group(1) + m.group(3)

    url = url.split("#", 1)[0]

    if url.find(".php") > 0:
        return "text/html"
    if url.endswith("/"):
        return "text/html"
    if "//" in url and url.count("/") == 2:
        return "text/html"

    try:
        path = urlsplit(url).path
    except ValueError:
        return None

    filename = path.rsplit("/", 1)[-1]
    if "." not in filename:
        return None

    ext = "." + filename.rsplit(".", 1)[-1].lower()
    if ext in _OVERRIDES:
        return _OVERRIDES[ext]

    mimetype, _encoding = mimetypes.guess_type("file" + ext, strict=False)
    return mimetype
