# sharedurl/services/enrol.py
#
# The "shared" enrolment method: users who follow a shared URL are enrolled
# into the destination course through it.
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import text
from sqlalchemy.orm import Session

from sharedurl.core.errors import SharedUrlError
from sharedurl.services.records import RecordStore

SHARED_ENROL = "shared"
ENROL_COMPONENT = "enrol_shared"

ENROL_INSTANCE_ENABLED = 0
ENROL_USER_ACTIVE = 0


# -----------------------------
# Small logging helper
# -----------------------------
def _log(*args):
    ts = datetime.now(timezone.utc).isoformat()
    print(f"[shared_enrol] {ts}", *args)


def _instance_row(row) -> dict[str, Any]:
    return {
        "id": int(row[0]),
        "enrol": str(row[1]),
        "courseid": int(row[2]),
        "status": int(row[3] or 0),
        "roleid": int(row[4] or 0),
        "enrolperiod": int(row[5] or 0),
        "enrolstartdate": int(row[6] or 0),
        "enrolenddate": int(row[7] or 0),
    }


class EnrolmentService:
    def __init__(self, db: Session, *, default_roleid: int = 5, default_period: int = 0):
        self.db = db
        self.records = RecordStore(db)
        self.default_roleid = int(default_roleid)
        self.default_period = int(default_period)

    def is_enrolled(self, course_id: int, user_id: int, now: int) -> bool:
        """Active enrolment through any enabled method, within its time window."""
        row = self.db.execute(
            text(
                """
                select 1
                  from user_enrolments ue
                  join enrol e on e.id = ue.enrolid
                 where e.courseid = :c
                   and ue.userid = :u
                   and e.status = :enabled
                   and ue.status = :active
                   and ue.timestart <= :now
                   and (ue.timeend = 0 or ue.timeend > :now)
                 limit 1
                """
            ),
            {
                "c": int(course_id),
                "u": int(user_id),
                "enabled": ENROL_INSTANCE_ENABLED,
                "active": ENROL_USER_ACTIVE,
                "now": int(now),
            },
        ).fetchone()
        return row is not None

    def get_instance(self, course_id: int, enrol: str = SHARED_ENROL) -> dict[str, Any] | None:
        row = self.db.execute(
            text(
                """
                select id, enrol, courseid, status, roleid,
                       enrolperiod, enrolstartdate, enrolenddate
                  from enrol
                 where courseid = :c
                   and enrol = :e
                 limit 1
                """
            ),
            {"c": int(course_id), "e": enrol},
        ).fetchone()
        return _instance_row(row) if row else None

    def ensure_instance(self, course_id: int, now: int, enrol: str = SHARED_ENROL) -> dict[str, Any]:
        """
        Returns the enrolment instance of the course, adding the default one
        when missing. Two concurrent first viewers converge on the same row
        through the unique (courseid, enrol) constraint.
        """
        instance = self.get_instance(course_id, enrol)
        if instance:
            return instance

        created = self.db.execute(
            text(
                """
                insert into enrol
                    (enrol, courseid, status, roleid, enrolperiod,
                     enrolstartdate, enrolenddate, timecreated, timemodified)
                values
                    (:e, :c, :status, :r, :p, 0, 0, :now, :now)
                on conflict (courseid, enrol) do nothing
                """
            ),
            {
                "e": enrol,
                "c": int(course_id),
                "status": ENROL_INSTANCE_ENABLED,
                "r": self.default_roleid,
                "p": self.default_period,
                "now": int(now),
            },
        )
        if created.rowcount:
            _log(f"added {enrol} enrolment instance to course {course_id}")

        instance = self.get_instance(course_id, enrol)
        if instance is None:
            raise SharedUrlError(f"Enrolment instance {enrol} missing in course {course_id}")
        return instance

    @staticmethod
    def enrolment_window(instance: dict[str, Any], now: int) -> tuple[int, int]:
        timestart = int(instance.get("enrolstartdate") or 0) or int(now)
        period = int(instance.get("enrolperiod") or 0)
        if period > 0:
            timeend = int(now) + period
        else:
            # 0 means no end date
            timeend = int(instance.get("enrolenddate") or 0)
        return timestart, timeend

    def enrol_user(
        self,
        instance: dict[str, Any],
        user_id: int,
        now: int,
        roleid: int | None = None,
        timestart: int = 0,
        timeend: int = 0,
    ) -> None:
        """
        Idempotent: an active enrolment or an existing role assignment is left
        untouched, a suspended or expired one is reactivated with the new window.
        """
        self.db.execute(
            text(
                """
                insert into user_enrolments
                    (enrolid, userid, status, timestart, timeend, timecreated, timemodified)
                values
                    (:e, :u, :active, :ts, :te, :now, :now)
                on conflict (enrolid, userid) do update
                   set status = excluded.status,
                       timestart = excluded.timestart,
                       timeend = excluded.timeend,
                       timemodified = excluded.timemodified
                 where user_enrolments.status <> :active
                    or (user_enrolments.timeend <> 0 and user_enrolments.timeend <= :now)
                """
            ),
            {
                "e": int(instance["id"]),
                "u": int(user_id),
                "active": ENROL_USER_ACTIVE,
                "ts": int(timestart),
                "te": int(timeend),
                "now": int(now),
            },
        )

        roleid = int(roleid if roleid is not None else instance.get("roleid") or 0)
        if roleid > 0:
            contextid = self.records.get_course_context_id(int(instance["courseid"]))
            self.db.execute(
                text(
                    """
                    insert into role_assignments
                        (roleid, contextid, userid, component, itemid, timemodified)
                    values
                        (:r, :ctx, :u, :comp, :item, :now)
                    on conflict (roleid, contextid, userid, component, itemid) do nothing
                    """
                ),
                {
                    "r": roleid,
                    "ctx": int(contextid),
                    "u": int(user_id),
                    "comp": ENROL_COMPONENT,
                    "item": int(instance["id"]),
                    "now": int(now),
                },
            )

        _log(f"user {user_id} enrolled in course {instance['courseid']} until {timeend or 'forever'}")

    def enrol_into_course(self, course_id: int, user_id: int, now: int) -> bool:
        """
        Enrols the user through the shared method unless already enrolled.
        Returns True when an enrolment was attempted.
        """
        if self.is_enrolled(course_id, user_id, now):
            return False
        instance = self.ensure_instance(course_id, now)
        timestart, timeend = self.enrolment_window(instance, now)
        self.enrol_user(instance, user_id, now, instance["roleid"], timestart, timeend)
        return True
