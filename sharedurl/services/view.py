# sharedurl/services/view.py
#
# Request flow of the view endpoint:
#   start     -> load activity, check access, record the view
#   resolving -> check the stored URL points to a live activity of this site
#   enrolling -> enrol the viewer into the destination course
#   rendering -> redirect, embed, frameset or a plain link
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from sharedurl.core.auth import CAP_COURSE_VIEW, CAP_MANAGE_ACTIVITIES, CAP_UPDATE_COURSE
from sharedurl.core.config import SharedUrlSettings
from sharedurl.core.context import ViewContext
from sharedurl.core.display import DisplayMode, select_display
from sharedurl.core.errors import NotAllowed, NotFound, NotResolvable
from sharedurl.core.resolver import resolve_destination
from sharedurl.core.urls import HtmlUrl, RawUrl, build_full_url, to_redirect_url
from sharedurl.lang.strings import get_string
from sharedurl.services import pages
from sharedurl.services.completion import CompletionService
from sharedurl.services.enrol import EnrolmentService
from sharedurl.services.media import MediaRenderer
from sharedurl.services.mimeinfo import guess_url_mimetype
from sharedurl.services.records import MODNAME, RecordStore


# -----------------------------
# Small logging helper
# -----------------------------
def _log(*args):
    ts = datetime.now(timezone.utc).isoformat()
    print(f"[sharedurl_view] {ts}", *args)


@dataclass(frozen=True)
class ViewOutcome:
    status_code: int = 200
    html: str | None = None
    location: RawUrl | None = None

    @property
    def is_redirect(self) -> bool:
        return self.location is not None


class ViewDispatcher:
    def __init__(
        self,
        *,
        records: RecordStore,
        completion: CompletionService,
        enrolment: EnrolmentService,
        settings: SharedUrlSettings,
        media: MediaRenderer | None = None,
        guess_mimetype: Callable[[str], str | None] = guess_url_mimetype,
    ):
        self.records = records
        self.completion = completion
        self.enrolment = enrolment
        self.settings = settings
        self.media = media or MediaRenderer(guess_mimetype)
        self.guess_mimetype = guess_mimetype

        self._renderers: dict[DisplayMode, Callable[..., ViewOutcome]] = {
            DisplayMode.AUTO: self._render_workaround,
            DisplayMode.EMBED: self._render_embed,
            DisplayMode.FRAME: self._render_frame,
            DisplayMode.NEW: self._render_workaround,
            DisplayMode.DOWNLOAD: self._render_workaround,
            DisplayMode.OPEN: self._render_workaround,
            DisplayMode.POPUP: self._render_workaround,
        }

    def dispatch(self, cmid: int, ctx: ViewContext) -> ViewOutcome:
        instance, cm, course = self._load(cmid)
        self._require_access(course, ctx)
        self._record_viewed(instance, cm, course, ctx)

        try:
            destination = resolve_destination(instance.externalurl, ctx.host, self.records)
        except NotResolvable as e:
            _log(f"cm {cm['id']}: stored url not resolvable: {e}")
            return self._render_denied(instance, course, ctx)

        if self.enrolment.enrol_into_course(destination.course_id, ctx.user_id, ctx.now):
            _log(f"cm {cm['id']}: user {ctx.user_id} enrolled into course {destination.course_id}")

        display = select_display(instance, ctx.wwwroot, self.guess_mimetype)
        fullurl = build_full_url(instance)

        if (display == DisplayMode.OPEN or ctx.redirect) and not ctx.forceview:
            return self._redirect(fullurl, instance, cm, course, ctx)

        return self._renderers[display](instance, cm, course, ctx, fullurl, display)

    # -----------------------------
    # Start
    # -----------------------------
    def _load(self, cmid: int) -> tuple[Any, dict, dict]:
        cm = self.records.get_course_module(cmid, MODNAME)
        if not cm:
            raise NotFound(f"Course module {cmid} not found")

        instance = self.records.get_sharedurl(cm["instance"])
        if instance is None:
            raise NotFound(f"Shared URL {cm['instance']} not found")

        course = self.records.get_course(cm["course"])
        if not course:
            raise NotFound(f"Course {cm['course']} not found")

        return instance, cm, course

    def _require_access(self, course: dict, ctx: ViewContext) -> None:
        if ctx.has_capability(CAP_COURSE_VIEW):
            return
        if not self.enrolment.is_enrolled(course["id"], ctx.user_id, ctx.now):
            raise NotAllowed(f"User {ctx.user_id} is not enrolled in course {course['id']}")

    def _record_viewed(self, instance: Any, cm: dict, course: dict, ctx: ViewContext) -> None:
        self.completion.record_viewed(
            instance_id=instance.id,
            cm=cm,
            course_id=course["id"],
            context_id=self.records.get_module_context_id(cm["id"]),
            user_id=ctx.user_id,
            now=ctx.now,
        )

    # -----------------------------
    # Rendering
    # -----------------------------
    def _edit_link(self, cm: dict, course: dict, ctx: ViewContext) -> tuple[str, str] | None:
        if ctx.has_capability(CAP_MANAGE_ACTIVITIES):
            return (
                f"{ctx.wwwroot}/course/modedit.php?update={cm['id']}",
                get_string("editthisactivity", ctx.lang),
            )
        if ctx.has_capability(CAP_UPDATE_COURSE):
            return (
                f"{ctx.wwwroot}/course/edit.php?id={course['id']}",
                get_string("editcoursesettings", ctx.lang),
            )
        return None

    def _redirect(self, fullurl: HtmlUrl, instance: Any, cm: dict, course: dict, ctx: ViewContext) -> ViewOutcome:
        if course["format"] in self.settings.formats_without_view_page:
            # editors would otherwise never reach the activity settings
            edit = self._edit_link(cm, course, ctx)
            if edit:
                return ViewOutcome(
                    html=pages.redirect_page(
                        lang=ctx.lang,
                        instance=instance,
                        course=course,
                        url=fullurl,
                        delay=self.settings.redirect_delay,
                        edit_url=edit[0],
                        edit_text=edit[1],
                    )
                )

        location = to_redirect_url(fullurl)
        _log(f"cm {cm['id']}: redirecting user {ctx.user_id} to {location}")
        return ViewOutcome(status_code=303, location=location)

    def _render_denied(self, instance: Any, course: dict, ctx: ViewContext) -> ViewOutcome:
        body = pages.activity_heading(instance) + pages.notice_block(
            get_string("invalidstoredurl", ctx.lang),
            f"{ctx.wwwroot}/course/view.php?id={course['id']}",
            ctx.lang,
        )
        return ViewOutcome(html=pages.page(lang=ctx.lang, instance=instance, course=course, body=body))

    def _render_embed(
        self, instance: Any, cm: dict, course: dict, ctx: ViewContext, fullurl: HtmlUrl, display: DisplayMode
    ) -> ViewOutcome:
        if self.media.can_embed(fullurl):
            code = self.media.embed(fullurl, instance.name)
        else:
            mimetype = self.guess_mimetype(to_redirect_url(fullurl)) or ""
            code = self.media.embed_general(fullurl, pages.clicktoopen(fullurl, ctx.lang), mimetype)

        body = pages.activity_heading(instance) + code + pages.intro_block(instance)
        return ViewOutcome(html=pages.page(lang=ctx.lang, instance=instance, course=course, body=body))

    def _render_frame(
        self, instance: Any, cm: dict, course: dict, ctx: ViewContext, fullurl: HtmlUrl, display: DisplayMode
    ) -> ViewOutcome:
        if ctx.frameset == "top":
            # navigation pane of the frameset
            body = pages.activity_heading(instance) + pages.intro_block(instance)
            return ViewOutcome(html=pages.page(lang=ctx.lang, instance=instance, course=course, body=body))

        return ViewOutcome(
            html=pages.frameset_page(
                lang=ctx.lang,
                instance=instance,
                course=course,
                framesize=self.settings.framesize,
                nav_url=f"{ctx.wwwroot}/view?id={cm['id']}&frameset=top",
                content_url=fullurl,
            )
        )

    def _render_workaround(
        self, instance: Any, cm: dict, course: dict, ctx: ViewContext, fullurl: HtmlUrl, display: DisplayMode
    ) -> ViewOutcome:
        body = (
            pages.activity_heading(instance)
            + pages.intro_block(instance, ignore_settings=True)
            + pages.workaround_block(instance, fullurl, display, ctx.lang)
        )
        return ViewOutcome(html=pages.page(lang=ctx.lang, instance=instance, course=course, body=body))
