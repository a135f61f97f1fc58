# sharedurl/services/records.py
#
# Read access to the host LMS records (courses, course modules, contexts).
from __future__ import annotations

from typing import Any

from sqlalchemy import text
from sqlalchemy.orm import Session

from sharedurl.models.lms import CONTEXT_COURSE, CONTEXT_MODULE
from sharedurl.models.sharedurl import MAX_ID, SharedUrl

MODNAME = "sharedurl"


def _valid_id(value: int) -> bool:
    # larger ids overflow the bigint columns in the driver
    return 0 < int(value) <= MAX_ID


def _course_row(row) -> dict[str, Any]:
    return {
        "id": int(row[0]),
        "shortname": str(row[1] or ""),
        "fullname": str(row[2] or ""),
        "format": str(row[3] or ""),
    }


def _cm_row(row) -> dict[str, Any]:
    return {
        "id": int(row[0]),
        "course": int(row[1]),
        "modname": str(row[2]),
        "instance": int(row[3]),
        "showdescription": bool(row[4]),
    }


class RecordStore:
    def __init__(self, db: Session):
        self.db = db

    # -----------------------------
    # Courses and course modules
    # -----------------------------
    def get_course(self, course_id: int) -> dict[str, Any] | None:
        if not _valid_id(course_id):
            return None
        row = self.db.execute(
            text(
                """
                select id, shortname, fullname, format
                  from course
                 where id = :id
                 limit 1
                """
            ),
            {"id": int(course_id)},
        ).fetchone()
        return _course_row(row) if row else None

    def get_course_module(self, cmid: int, modname: str | None = None) -> dict[str, Any] | None:
        if not _valid_id(cmid):
            return None
        row = self.db.execute(
            text(
                """
                select id, course, modname, instance, showdescription
                  from course_modules
                 where id = :id
                 limit 1
                """
            ),
            {"id": int(cmid)},
        ).fetchone()
        if not row:
            return None
        cm = _cm_row(row)
        if modname and cm["modname"] != modname:
            return None
        return cm

    def get_course_module_by_instance(self, instance_id: int, modname: str = MODNAME) -> dict[str, Any] | None:
        if not _valid_id(instance_id):
            return None
        row = self.db.execute(
            text(
                """
                select id, course, modname, instance, showdescription
                  from course_modules
                 where modname = :m
                   and instance = :i
                 limit 1
                """
            ),
            {"m": modname, "i": int(instance_id)},
        ).fetchone()
        return _cm_row(row) if row else None

    def get_course_and_cm(self, cmid: int) -> tuple[dict[str, Any], dict[str, Any]] | None:
        if not _valid_id(cmid):
            return None
        row = self.db.execute(
            text(
                """
                select c.id, c.shortname, c.fullname, c.format,
                       cm.id, cm.course, cm.modname, cm.instance, cm.showdescription
                  from course_modules cm
                  join course c on c.id = cm.course
                 where cm.id = :id
                 limit 1
                """
            ),
            {"id": int(cmid)},
        ).fetchone()
        if not row:
            return None
        return _course_row(row[0:4]), _cm_row(row[4:9])

    def add_course_module(self, course_id: int, instance_id: int, showdescription: bool = False) -> int:
        row = self.db.execute(
            text(
                """
                insert into course_modules (course, modname, instance, showdescription)
                values (:c, :m, :i, :s)
                returning id
                """
            ),
            {"c": int(course_id), "m": MODNAME, "i": int(instance_id), "s": int(bool(showdescription))},
        ).fetchone()
        cmid = int(row[0])
        self.get_context_id(CONTEXT_MODULE, cmid, create=True)
        return cmid

    def set_showdescription(self, cmid: int, showdescription: bool) -> None:
        self.db.execute(
            text("update course_modules set showdescription = :s where id = :id"),
            {"s": int(bool(showdescription)), "id": int(cmid)},
        )

    def delete_course_module(self, cmid: int) -> None:
        self.db.execute(
            text("delete from context where contextlevel = :l and instanceid = :i"),
            {"l": CONTEXT_MODULE, "i": int(cmid)},
        )
        self.db.execute(text("delete from course_modules where id = :id"), {"id": int(cmid)})

    # -----------------------------
    # Contexts
    # -----------------------------
    def get_context_id(self, contextlevel: int, instanceid: int, create: bool = False) -> int | None:
        params = {"l": int(contextlevel), "i": int(instanceid)}
        if create:
            self.db.execute(
                text(
                    """
                    insert into context (contextlevel, instanceid)
                    values (:l, :i)
                    on conflict (contextlevel, instanceid) do nothing
                    """
                ),
                params,
            )
        row = self.db.execute(
            text("select id from context where contextlevel = :l and instanceid = :i limit 1"),
            params,
        ).fetchone()
        return int(row[0]) if row else None

    def get_module_context_id(self, cmid: int) -> int:
        return self.get_context_id(CONTEXT_MODULE, cmid, create=True)

    def get_course_context_id(self, course_id: int) -> int:
        return self.get_context_id(CONTEXT_COURSE, course_id, create=True)

    def get_module_id_for_context(self, contextid: int) -> int | None:
        """Course module behind a context id, None for any other kind of context."""
        if not _valid_id(contextid):
            return None
        row = self.db.execute(
            text("select contextlevel, instanceid from context where id = :id limit 1"),
            {"id": int(contextid)},
        ).fetchone()
        if not row or int(row[0]) != CONTEXT_MODULE:
            return None
        return int(row[1])

    # -----------------------------
    # Shared URL instances
    # -----------------------------
    def get_sharedurl(self, instance_id: int) -> SharedUrl | None:
        if not _valid_id(instance_id):
            return None
        return self.db.get(SharedUrl, int(instance_id))
