# sharedurl/core/context.py
from __future__ import annotations

import time
from dataclasses import dataclass, field
from urllib.parse import urlsplit

from fastapi import Request

from sharedurl.core.config import SharedUrlSettings


# -----------------------------
# Host resolution
# -----------------------------
def _strip_port(netloc: str) -> str:
    host = netloc.rsplit("@", 1)[-1]
    if host.startswith("["):
        return host[: host.find("]") + 1]
    return host.split(":")[0]


def _get_netloc(request: Request) -> str:
    netloc = request.headers.get("x-forwarded-host") or request.headers.get("host") or request.url.netloc or ""
    return netloc.split(",")[0].strip()


def _get_scheme(request: Request) -> str:
    proto = request.headers.get("x-forwarded-proto") or request.url.scheme or "http"
    return proto.split(",")[0].strip().lower()


def get_request_host(request: Request, settings: SharedUrlSettings) -> str:
    # the configured site root wins over whatever proxy header we received
    if settings.wwwroot:
        return _strip_port(urlsplit(settings.wwwroot).netloc)
    return _strip_port(_get_netloc(request))


def get_wwwroot(request: Request, settings: SharedUrlSettings) -> str:
    if settings.wwwroot:
        return settings.wwwroot
    return f"{_get_scheme(request)}://{_get_netloc(request)}"


# -----------------------------
# Per-request view context
# -----------------------------
@dataclass(frozen=True)
class ViewContext:
    user_id: int
    host: str
    wwwroot: str
    capabilities: frozenset[str] = field(default_factory=frozenset)
    lang: str = "en"
    redirect: bool = False
    forceview: bool = False
    frameset: str | None = None
    now: int = 0

    def has_capability(self, capability: str) -> bool:
        return capability in self.capabilities


def build_view_context(
    request: Request,
    user: dict,
    settings: SharedUrlSettings,
    *,
    redirect: bool = False,
    forceview: bool = False,
    frameset: str | None = None,
) -> ViewContext:
    return ViewContext(
        user_id=int(user["user_id"]),
        host=get_request_host(request, settings),
        wwwroot=get_wwwroot(request, settings),
        capabilities=frozenset(user.get("capabilities") or ()),
        lang=str(user.get("lang") or "en"),
        redirect=bool(redirect),
        forceview=bool(forceview),
        frameset=frameset,
        now=int(time.time()),
    )
