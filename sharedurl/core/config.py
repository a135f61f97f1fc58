# sharedurl/core/config.py
#
# Site-wide defaults come from the environment (.env), and can be
# overridden at runtime through the sharedurl_config table.
from __future__ import annotations

import os
from dataclasses import asdict, dataclass
from typing import Any

from dotenv import load_dotenv
from fastapi import Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from sharedurl.core.db import ensure_tables_once, get_db
from sharedurl.core.display import DisplayMode, SELECTABLE_MODES

load_dotenv()

ENV_DEFAULTS: dict[str, str] = {
    "framesize": os.getenv("SHAREDURL_FRAMESIZE", "130"),
    "displayoptions": os.getenv("SHAREDURL_DISPLAYOPTIONS", "0,1,5,6"),
    "printintro": os.getenv("SHAREDURL_PRINTINTRO", "1"),
    "display": os.getenv("SHAREDURL_DISPLAY", "0"),
    "popupwidth": os.getenv("SHAREDURL_POPUPWIDTH", "620"),
    "popupheight": os.getenv("SHAREDURL_POPUPHEIGHT", "450"),
    "redirect_delay": os.getenv("SHAREDURL_REDIRECT_DELAY", "10"),
    "formats_without_view_page": os.getenv("SHAREDURL_FORMATS_WITHOUT_VIEW_PAGE", "singleactivity"),
    "wwwroot": os.getenv("SHAREDURL_WWWROOT", ""),
    "enrol_roleid": os.getenv("SHARED_ENROL_ROLEID", "5"),
    "enrol_period": os.getenv("SHARED_ENROL_PERIOD", "0"),
}


@dataclass(frozen=True)
class SharedUrlSettings:
    framesize: int
    displayoptions: tuple[DisplayMode, ...]
    printintro: bool
    display: DisplayMode
    popupwidth: int
    popupheight: int
    redirect_delay: int
    formats_without_view_page: tuple[str, ...]
    wwwroot: str | None
    enrol_roleid: int
    enrol_period: int

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["displayoptions"] = [int(m) for m in self.displayoptions]
        data["display"] = int(self.display)
        data["formats_without_view_page"] = list(self.formats_without_view_page)
        return data


def _int(value: str | None, default: int) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def _modes(value: str | None) -> tuple[DisplayMode, ...]:
    modes: list[DisplayMode] = []
    for part in (value or "").split(","):
        part = part.strip()
        if not part:
            continue
        try:
            mode = DisplayMode(int(part))
        except ValueError:
            continue
        if mode in SELECTABLE_MODES and mode not in modes:
            modes.append(mode)
    return tuple(modes) or SELECTABLE_MODES


def parse_settings(raw: dict[str, str | None]) -> SharedUrlSettings:
    display = _int(raw.get("display"), 0)
    if display not in [int(m) for m in SELECTABLE_MODES]:
        display = int(DisplayMode.AUTO)

    formats = tuple(f.strip() for f in (raw.get("formats_without_view_page") or "").split(",") if f.strip())
    wwwroot = (raw.get("wwwroot") or "").strip().rstrip("/") or None

    return SharedUrlSettings(
        framesize=_int(raw.get("framesize"), 130),
        displayoptions=_modes(raw.get("displayoptions")),
        printintro=bool(_int(raw.get("printintro"), 1)),
        display=DisplayMode(display),
        popupwidth=_int(raw.get("popupwidth"), 620),
        popupheight=_int(raw.get("popupheight"), 450),
        redirect_delay=max(0, _int(raw.get("redirect_delay"), 10)),
        formats_without_view_page=formats,
        wwwroot=wwwroot,
        enrol_roleid=_int(raw.get("enrol_roleid"), 5),
        enrol_period=max(0, _int(raw.get("enrol_period"), 0)),
    )


def load_settings(db: Session) -> SharedUrlSettings:
    rows = db.execute(text("select name, value from sharedurl_config")).fetchall()
    raw: dict[str, str | None] = dict(ENV_DEFAULTS)
    for r in rows:
        if r[0] in raw:
            raw[str(r[0])] = r[1]
    return parse_settings(raw)


def save_settings(db: Session, values: dict[str, str]) -> SharedUrlSettings:
    """Upserts the given settings. Unknown names are ignored. No commit."""
    for name, value in values.items():
        if name not in ENV_DEFAULTS:
            continue
        db.execute(
            text(
                """
                insert into sharedurl_config (name, value)
                values (:n, :v)
                on conflict (name) do update set value = excluded.value
                """
            ),
            {"n": name, "v": value},
        )
    return load_settings(db)


def get_settings(db: Session = Depends(get_db)) -> SharedUrlSettings:
    ensure_tables_once(db)
    return load_settings(db)
