# sharedurl/services/backup.py
#
# Activity backup as XML. The shared URL module stores no user data.
from __future__ import annotations

import json
import time
import xml.etree.ElementTree as ET

from sqlalchemy.orm import Session

from sharedurl.core.config import SharedUrlSettings
from sharedurl.core.display import SELECTABLE_MODES, DisplayMode
from sharedurl.core.errors import InvalidInput, NotFound
from sharedurl.models.sharedurl import SharedUrl
from sharedurl.services.instances import build_displayoptions
from sharedurl.services.records import MODNAME, RecordStore

BACKUP_FIELDS = ("name", "intro", "introformat", "externalurl", "parameters", "timemodified")
# not part of the historical structure, restored when present
OPTIONAL_FIELDS = ("display", "displayoptions")


def backup_instance(db: Session, instance_id: int) -> bytes:
    records = RecordStore(db)
    instance = records.get_sharedurl(instance_id)
    if instance is None:
        raise NotFound(f"Shared URL {instance_id} not found")

    cm = records.get_course_module_by_instance(instance.id)
    activity = ET.Element(
        "activity",
        {
            "id": str(instance.id),
            "moduleid": str(cm["id"]) if cm else "",
            "modulename": MODNAME,
            "contextid": str(records.get_module_context_id(cm["id"])) if cm else "",
        },
    )
    node = ET.SubElement(activity, MODNAME, {"id": str(instance.id)})
    for name in BACKUP_FIELDS + OPTIONAL_FIELDS:
        value = getattr(instance, name)
        ET.SubElement(node, name).text = "" if value is None else str(value)

    return ET.tostring(activity, encoding="utf-8", xml_declaration=True)


def _text(node: ET.Element, name: str) -> str | None:
    child = node.find(name)
    if child is None:
        return None
    return child.text or ""


def _restored_display(value: str | None, settings: SharedUrlSettings) -> DisplayMode:
    # DOWNLOAD is only ever guessed, never stored
    try:
        display = DisplayMode(int(value))
    except (TypeError, ValueError):
        return settings.display
    if display not in SELECTABLE_MODES:
        return settings.display
    return display


def _restored_options(value: str | None) -> dict:
    try:
        data = json.loads(value or "{}")
    except ValueError:
        return {}
    if not isinstance(data, dict):
        return {}

    options = {}
    for name in ("popupwidth", "popupheight"):
        try:
            size = int(data[name])
        except (KeyError, TypeError, ValueError):
            continue
        if size > 0:
            options[name] = size
    if "printintro" in data:
        options["printintro"] = bool(data["printintro"])
    return options


def restore_instance(
    db: Session, course_id: int, data: bytes, settings: SharedUrlSettings
) -> tuple[SharedUrl, int]:
    """Creates a new activity in course_id from a backup. No commit."""
    records = RecordStore(db)
    if not records.get_course(course_id):
        raise NotFound(f"Course {course_id} not found")

    try:
        root = ET.fromstring(data)
    except ET.ParseError:
        raise InvalidInput("backup", "invalidbackup")

    node = root if root.tag == MODNAME else root.find(MODNAME)
    if node is None:
        raise InvalidInput("backup", "invalidbackup")

    name = (_text(node, "name") or "").strip()
    externalurl = (_text(node, "externalurl") or "").strip()
    if not name or not externalurl:
        raise InvalidInput("backup", "invalidbackup")

    display = _restored_display(_text(node, "display"), settings)
    options = _restored_options(_text(node, "displayoptions"))
    displayoptions = json.dumps(
        build_displayoptions(
            display,
            popupwidth=options.get("popupwidth"),
            popupheight=options.get("popupheight"),
            printintro=options.get("printintro"),
            settings=settings,
        )
    )

    try:
        introformat = int(_text(node, "introformat") or 0)
        timemodified = int(_text(node, "timemodified") or 0) or int(time.time())
    except ValueError:
        raise InvalidInput("backup", "invalidbackup")

    instance = SharedUrl(
        course=int(course_id),
        name=name,
        intro=_text(node, "intro") or "",
        introformat=introformat,
        externalurl=externalurl,
        display=int(display),
        displayoptions=displayoptions,
        parameters=_text(node, "parameters") or None,
        timemodified=timemodified,
    )
    db.add(instance)
    db.flush()

    cmid = records.add_course_module(course_id, instance.id)
    return instance, cmid
