from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable

from jose import jwt

JWT_SECRET = os.getenv("SESSION_JWT_SECRET", "dev-change-me")
JWT_ALG = os.getenv("SESSION_JWT_ALG", "HS256")
JWT_EXPIRES_MIN = int(os.getenv("SESSION_JWT_EXPIRES_MIN", "480"))  # 8 hours


def create_session_token(
    *,
    user_id: int,
    capabilities: Iterable[str] = (),
    lang: str = "en",
) -> str:
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "typ": "user",
        "uid": int(user_id),
        "caps": sorted(set(capabilities)),
        "lang": lang,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=JWT_EXPIRES_MIN)).timestamp()),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALG)


def decode_session_token(token: str) -> dict[str, Any]:
    return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALG])
