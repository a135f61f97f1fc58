# sharedurl/api/routes/view.py
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from sharedurl.core.auth import CAP_VIEW, require_user
from sharedurl.core.config import SharedUrlSettings, get_settings
from sharedurl.core.context import build_view_context
from sharedurl.core.db import get_db
from sharedurl.core.errors import NotAllowed, NotFound
from sharedurl.lang.strings import get_string
from sharedurl.services.completion import CompletionService
from sharedurl.services.enrol import EnrolmentService
from sharedurl.services.records import RecordStore
from sharedurl.services.view import ViewDispatcher

router = APIRouter()


@router.get("/view")
def view(
    request: Request,
    id: int = Query(..., ge=1, description="Course module id of the shared URL"),
    redirect: int = Query(0, ge=0, le=1),
    forceview: int = Query(0, ge=0, le=1),
    frameset: str | None = Query(None),
    user: dict = Depends(require_user),
    settings: SharedUrlSettings = Depends(get_settings),
    db: Session = Depends(get_db),
):
    ctx = build_view_context(
        request,
        user,
        settings,
        redirect=bool(redirect),
        forceview=bool(forceview),
        frameset=frameset,
    )

    dispatcher = ViewDispatcher(
        records=RecordStore(db),
        completion=CompletionService(db),
        enrolment=EnrolmentService(
            db,
            default_roleid=settings.enrol_roleid,
            default_period=settings.enrol_period,
        ),
        settings=settings,
    )

    try:
        outcome = dispatcher.dispatch(id, ctx)
    except NotFound:
        raise HTTPException(status_code=404, detail=get_string("invalidcoursemodule", ctx.lang))
    except NotAllowed:
        raise HTTPException(status_code=403, detail=get_string("nopermissions", ctx.lang, CAP_VIEW))

    # persist enrolment before the browser follows the redirect
    db.commit()

    if outcome.is_redirect:
        return RedirectResponse(outcome.location, status_code=outcome.status_code)
    return HTMLResponse(outcome.html, status_code=outcome.status_code)
