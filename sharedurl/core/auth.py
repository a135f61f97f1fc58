from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from jose import JWTError

from sharedurl.core.security import decode_session_token

# capability names of the host LMS
CAP_VIEW = "mod/sharedurl:view"
CAP_ADD_INSTANCE = "mod/sharedurl:addinstance"
CAP_COURSE_VIEW = "moodle/course:view"
CAP_MANAGE_ACTIVITIES = "moodle/course:manageactivities"
CAP_UPDATE_COURSE = "moodle/course:update"
CAP_SITE_CONFIG = "moodle/site:config"


def _token_from_request(request: Request) -> str | None:
    token = request.cookies.get("session_token")
    if token:
        return token
    auth = request.headers.get("authorization") or ""
    if auth.lower().startswith("bearer "):
        return auth[7:].strip() or None
    return None


def require_user(request: Request) -> dict:
    token = _token_from_request(request)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        payload = decode_session_token(token)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")

    if payload.get("typ") != "user" or payload.get("uid") is None:
        raise HTTPException(status_code=401, detail="Invalid token type")

    return {
        "user_id": int(payload["uid"]),
        "capabilities": frozenset(str(c) for c in (payload.get("caps") or [])),
        "lang": str(payload.get("lang") or "en"),
    }


def require_course_editor(user: dict = Depends(require_user)) -> dict:
    caps = user["capabilities"]
    if CAP_ADD_INSTANCE not in caps and CAP_MANAGE_ACTIVITIES not in caps:
        raise HTTPException(status_code=403, detail="Missing capability: " + CAP_MANAGE_ACTIVITIES)
    return user


def require_site_admin(user: dict = Depends(require_user)) -> dict:
    if CAP_SITE_CONFIG not in user["capabilities"]:
        raise HTTPException(status_code=403, detail="Missing capability: " + CAP_SITE_CONFIG)
    return user
