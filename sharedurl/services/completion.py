# sharedurl/services/completion.py
from __future__ import annotations

from typing import Any

from sqlalchemy import text
from sqlalchemy.orm import Session

VIEWED_EVENT = "\\mod_sharedurl\\event\\course_module_viewed"
COMPLETION_VIEWED = 1


class CompletionService:
    """Event log and completion tracking of the host LMS."""

    def __init__(self, db: Session):
        self.db = db

    def record_viewed(
        self,
        *,
        instance_id: int,
        cm: dict[str, Any],
        course_id: int,
        context_id: int | None,
        user_id: int,
        now: int,
    ) -> None:
        """Triggers the course_module_viewed event and marks the module viewed."""
        self.db.execute(
            text(
                """
                insert into logstore
                    (eventname, component, action, target, objecttable, objectid,
                     contextid, contextinstanceid, userid, courseid, timecreated)
                values
                    (:name, 'mod_sharedurl', 'viewed', 'course_module', 'sharedurl', :oid,
                     :ctx, :cmid, :u, :c, :now)
                """
            ),
            {
                "name": VIEWED_EVENT,
                "oid": int(instance_id),
                "ctx": context_id,
                "cmid": int(cm["id"]),
                "u": int(user_id),
                "c": int(course_id),
                "now": int(now),
            },
        )

        self.db.execute(
            text(
                """
                insert into course_modules_completion
                    (coursemoduleid, userid, completionstate, viewed, timemodified)
                values
                    (:cmid, :u, 0, :viewed, :now)
                on conflict (coursemoduleid, userid) do update
                   set viewed = excluded.viewed,
                       timemodified = excluded.timemodified
                """
            ),
            {"cmid": int(cm["id"]), "u": int(user_id), "viewed": COMPLETION_VIEWED, "now": int(now)},
        )
