# sharedurl/api/routes/settings.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from sharedurl.core.auth import require_site_admin
from sharedurl.core.config import SharedUrlSettings, get_settings, save_settings
from sharedurl.core.db import get_db
from sharedurl.schemas.sharedurl import SettingsPayload

router = APIRouter(prefix="/admin/sharedurl")


def _to_raw(payload: SettingsPayload) -> dict[str, str]:
    values: dict[str, str] = {}
    for name, value in payload.model_dump(exclude_none=True).items():
        if isinstance(value, bool):
            values[name] = "1" if value else "0"
        elif isinstance(value, list):
            values[name] = ",".join(str(int(v)) if not isinstance(v, str) else v.strip() for v in value)
        else:
            values[name] = str(int(value)) if not isinstance(value, str) else value.strip()
    return values


@router.get("/settings")
def read_settings(
    admin: dict = Depends(require_site_admin),
    settings: SharedUrlSettings = Depends(get_settings),
):
    return settings.to_dict()


@router.put("/settings")
def update_settings(
    payload: SettingsPayload,
    admin: dict = Depends(require_site_admin),
    settings: SharedUrlSettings = Depends(get_settings),
    db: Session = Depends(get_db),
):
    updated = save_settings(db, _to_raw(payload))
    db.commit()
    return updated.to_dict()
