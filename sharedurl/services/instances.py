# sharedurl/services/instances.py
#
# Create / update / delete of shared URL activities and the data the
# course page needs to list them.
from __future__ import annotations

import json
import re
import time
from typing import Any

from sqlalchemy.orm import Session

from sharedurl.core.config import SharedUrlSettings
from sharedurl.core.display import INTRO_MODES, DisplayMode, select_display
from sharedurl.core.errors import InvalidInput, NotFound
from sharedurl.core.urls import build_full_url, fix_submitted_url, to_redirect_url, validate_submitted_url
from sharedurl.models.sharedurl import SharedUrl
from sharedurl.schemas.sharedurl import SharedUrlCreate, SharedUrlPayload
from sharedurl.services import pages
from sharedurl.services.records import RecordStore

_CLEAN_URL = re.compile(r"^(https?://|ftp://|/)[^\s<>\"']*$", re.IGNORECASE)


def build_displayoptions(
    display: DisplayMode,
    *,
    popupwidth: int | None,
    popupheight: int | None,
    printintro: bool | None,
    settings: SharedUrlSettings,
) -> dict[str, int]:
    options: dict[str, int] = {}
    if display == DisplayMode.POPUP:
        options["popupwidth"] = int(popupwidth or settings.popupwidth)
        options["popupheight"] = int(popupheight or settings.popupheight)
    if display in INTRO_MODES:
        printintro = settings.printintro if printintro is None else printintro
        options["printintro"] = int(bool(printintro))
    return options


def _validate(payload: SharedUrlPayload, settings: SharedUrlSettings, current: DisplayMode | None = None) -> DisplayMode:
    error = validate_submitted_url(payload.externalurl.strip())
    if error:
        raise InvalidInput("externalurl", error)

    display = payload.display if payload.display is not None else (current if current is not None else settings.display)
    if display == DisplayMode.DOWNLOAD:
        raise InvalidInput("display", "displaynotallowed")
    if display not in settings.displayoptions and display != current:
        raise InvalidInput("display", "displaynotallowed")
    return DisplayMode(display)


def _apply(instance: SharedUrl, payload: SharedUrlPayload, display: DisplayMode, settings: SharedUrlSettings) -> None:
    instance.name = payload.name.strip()
    instance.intro = payload.intro
    instance.introformat = int(payload.introformat)
    instance.externalurl = fix_submitted_url(payload.externalurl)
    instance.display = int(display)
    instance.displayoptions = json.dumps(
        build_displayoptions(
            display,
            popupwidth=payload.popupwidth,
            popupheight=payload.popupheight,
            printintro=payload.printintro,
            settings=settings,
        )
    )
    instance.parameters = json.dumps(payload.parameters or {})
    instance.timemodified = int(time.time())


def add_instance(db: Session, payload: SharedUrlCreate, settings: SharedUrlSettings) -> tuple[SharedUrl, int]:
    """Adds the activity and its course module. No commit."""
    records = RecordStore(db)
    if not records.get_course(payload.course):
        raise NotFound(f"Course {payload.course} not found")

    display = _validate(payload, settings)

    instance = SharedUrl(course=int(payload.course))
    _apply(instance, payload, display, settings)
    db.add(instance)
    db.flush()

    cmid = records.add_course_module(payload.course, instance.id, payload.showdescription)
    return instance, cmid


def update_instance(
    db: Session, instance_id: int, payload: SharedUrlPayload, settings: SharedUrlSettings
) -> tuple[SharedUrl, int | None]:
    records = RecordStore(db)
    instance = records.get_sharedurl(instance_id)
    if instance is None:
        raise NotFound(f"Shared URL {instance_id} not found")

    display = _validate(payload, settings, current=DisplayMode(int(instance.display or 0)))
    _apply(instance, payload, display, settings)
    db.flush()

    cm = records.get_course_module_by_instance(instance.id)
    if cm:
        records.set_showdescription(cm["id"], payload.showdescription)
    return instance, cm["id"] if cm else None


def delete_instance(db: Session, instance_id: int) -> bool:
    records = RecordStore(db)
    instance = records.get_sharedurl(instance_id)
    if instance is None:
        return False

    cm = records.get_course_module_by_instance(instance.id)
    if cm:
        records.delete_course_module(cm["id"])

    # files of the module context are removed by the file storage
    db.delete(instance)
    db.flush()
    return True


def to_out(instance: SharedUrl, cmid: int | None = None) -> dict[str, Any]:
    return {
        "id": int(instance.id),
        "cmid": cmid,
        "course": int(instance.course),
        "name": instance.name,
        "intro": instance.intro,
        "introformat": int(instance.introformat or 0),
        "externalurl": instance.externalurl,
        "display": DisplayMode(int(instance.display or 0)),
        "displayoptions": instance.options,
        "parameters": instance.parameter_map,
        "timemodified": int(instance.timemodified or 0),
    }


def get_coursemodule_info(instance: SharedUrl, cm: dict[str, Any], wwwroot: str) -> dict[str, Any]:
    """Name, click behaviour and description shown for the activity on the course page."""
    info: dict[str, Any] = {"name": instance.name, "onclick": None, "content": None}

    display = select_display(instance, wwwroot)
    fullurl = f"{wwwroot}/view?id={cm['id']}&amp;redirect=1"

    if display == DisplayMode.POPUP:
        features = pages.popup_features(instance.options)
        info["onclick"] = f"window.open('{fullurl}', '', '{features}'); return false;"
    elif display == DisplayMode.NEW:
        info["onclick"] = f"window.open('{fullurl}'); return false;"

    if cm.get("showdescription"):
        info["content"] = pages.format_intro(instance)

    return info


def export_contents(instance: SharedUrl) -> list[dict[str, Any]]:
    fullurl = to_redirect_url(build_full_url(instance))
    if not _CLEAN_URL.match(fullurl):
        return []

    return [
        {
            "type": "sharedurl",
            "filename": re.sub(r'[\\/:*?"<>|\x00-\x1f]', "", instance.name or "").strip(),
            "filepath": None,
            "filesize": 0,
            "fileurl": str(fullurl),
            "timecreated": None,
            "timemodified": int(instance.timemodified or 0),
            "sortorder": None,
            "userid": None,
            "author": None,
            "license": None,
        }
    ]
