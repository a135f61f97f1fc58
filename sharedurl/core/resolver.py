# sharedurl/core/resolver.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qs, urlsplit

from sharedurl.core.errors import MalformedUrl, NotResolvable
from sharedurl.models.sharedurl import MAX_ID

WEB_SCHEMES = ("http", "https")
PLUGINFILE = "pluginfile.php"


@dataclass(frozen=True)
class Destination:
    course_id: int
    module_id: int


def _host_of(netloc: str) -> str:
    # case is kept on purpose, hosts are compared as plain strings
    host = netloc.rsplit("@", 1)[-1]
    if host.startswith("["):
        return host[: host.find("]") + 1]
    return host.split(":")[0]


def _split(url: str) -> tuple[str, str, str, str]:
    try:
        parts = urlsplit((url or "").strip())
    except ValueError as e:
        raise MalformedUrl(f"Cannot parse {url!r}: {e}")

    host = _host_of(parts.netloc)
    if not parts.scheme or not host or not parts.path:
        raise MalformedUrl(f"Missing scheme, host or path in {url!r}")

    return parts.scheme, host, parts.path, parts.query


def _parse_id(raw: str, what: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise NotResolvable(f"Invalid {what} id {raw!r}")
    if not 0 < value <= MAX_ID:
        raise NotResolvable(f"{what.capitalize()} id {raw!r} out of range")
    return value


def _module_id_from_query(query: str) -> int:
    values = parse_qs(query)
    raw = values.get("id")
    if not raw:
        raise NotResolvable("No id parameter in the activity URL")
    return _parse_id(raw[0], "activity")


def _module_id_from_pluginfile(path: str, records: Any) -> int:
    tail = path.split(PLUGINFILE + "/", 1)
    if len(tail) != 2:
        raise NotResolvable("No context id after pluginfile.php")

    segment = tail[1].split("/", 1)[0]
    contextid = _parse_id(segment, "context")

    cmid = records.get_module_id_for_context(contextid)
    if cmid is None:
        # course, user or block contexts are not shareable
        raise NotResolvable(f"Context {contextid} is not an activity context")
    return cmid


def resolve_destination(externalurl: str, current_host: str, records: Any) -> Destination:
    """
    Finds the activity a stored URL points to.

    Only activities of this site can be shared: the URL must be http(s), on
    the current host, and either an activity page (/mod/...?id=N) or a file
    served from an activity context (pluginfile.php/<contextid>/...).
    Raises NotResolvable (or MalformedUrl) otherwise.
    """
    scheme, host, path, query = _split(externalurl)

    if scheme not in WEB_SCHEMES:
        raise NotResolvable(f"Unsupported scheme {scheme!r}")
    if host != current_host:
        raise NotResolvable(f"Host {host!r} is not this site ({current_host!r})")

    if "/mod/" in path:
        cmid = _module_id_from_query(query)
    elif PLUGINFILE in path:
        cmid = _module_id_from_pluginfile(path, records)
    else:
        raise NotResolvable(f"{path!r} is not an activity path")

    found = records.get_course_and_cm(cmid)
    if not found:
        raise NotResolvable(f"Course module {cmid} does not exist")

    course, cm = found
    return Destination(course_id=int(course["id"]), module_id=int(cm["id"]))
