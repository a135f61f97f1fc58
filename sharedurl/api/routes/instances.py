# sharedurl/api/routes/instances.py
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from sharedurl.core.auth import require_course_editor, require_user
from sharedurl.core.config import SharedUrlSettings, get_settings
from sharedurl.core.context import get_wwwroot
from sharedurl.core.db import get_db
from sharedurl.core.errors import InvalidInput, NotFound
from sharedurl.lang.strings import get_string
from sharedurl.schemas.sharedurl import CourseModuleInfoOut, SharedUrlCreate, SharedUrlOut, SharedUrlPayload
from sharedurl.services import backup, instances
from sharedurl.services.records import MODNAME, RecordStore

router = APIRouter(prefix="/sharedurl")


def _invalid(e: InvalidInput, lang: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"field": e.field, "message": get_string(e.key, lang)},
    )


def _load_module(db: Session, cmid: int):
    records = RecordStore(db)
    cm = records.get_course_module(cmid, MODNAME)
    if not cm:
        raise HTTPException(status_code=404, detail=f"Course module {cmid} not found")
    instance = records.get_sharedurl(cm["instance"])
    if instance is None:
        raise HTTPException(status_code=404, detail=f"Shared URL {cm['instance']} not found")
    return instance, cm


# -----------------------------
# CRUD
# -----------------------------
@router.post("/instances", response_model=SharedUrlOut, status_code=status.HTTP_201_CREATED)
def create_instance(
    payload: SharedUrlCreate,
    user: dict = Depends(require_course_editor),
    settings: SharedUrlSettings = Depends(get_settings),
    db: Session = Depends(get_db),
):
    try:
        instance, cmid = instances.add_instance(db, payload, settings)
        db.commit()
    except InvalidInput as e:
        db.rollback()
        raise _invalid(e, user["lang"])
    except NotFound as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    return instances.to_out(instance, cmid)


@router.get("/instances/{instance_id}", response_model=SharedUrlOut)
def read_instance(
    instance_id: int,
    user: dict = Depends(require_user),
    db: Session = Depends(get_db),
):
    records = RecordStore(db)
    instance = records.get_sharedurl(instance_id)
    if instance is None:
        raise HTTPException(status_code=404, detail=f"Shared URL {instance_id} not found")
    cm = records.get_course_module_by_instance(instance.id)
    return instances.to_out(instance, cm["id"] if cm else None)


@router.put("/instances/{instance_id}", response_model=SharedUrlOut)
def update_instance(
    instance_id: int,
    payload: SharedUrlPayload,
    user: dict = Depends(require_course_editor),
    settings: SharedUrlSettings = Depends(get_settings),
    db: Session = Depends(get_db),
):
    try:
        instance, cmid = instances.update_instance(db, instance_id, payload, settings)
        db.commit()
    except InvalidInput as e:
        db.rollback()
        raise _invalid(e, user["lang"])
    except NotFound as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    return instances.to_out(instance, cmid)


@router.delete("/instances/{instance_id}")
def delete_instance(
    instance_id: int,
    user: dict = Depends(require_course_editor),
    db: Session = Depends(get_db),
):
    if not instances.delete_instance(db, instance_id):
        raise HTTPException(status_code=404, detail=f"Shared URL {instance_id} not found")
    db.commit()
    return {"ok": True, "id": instance_id}


# -----------------------------
# Course page helpers
# -----------------------------
@router.get("/modules/{cmid}/info", response_model=CourseModuleInfoOut)
def coursemodule_info(
    cmid: int,
    request: Request,
    user: dict = Depends(require_user),
    settings: SharedUrlSettings = Depends(get_settings),
    db: Session = Depends(get_db),
):
    instance, cm = _load_module(db, cmid)
    return instances.get_coursemodule_info(instance, cm, get_wwwroot(request, settings))


@router.get("/modules/{cmid}/contents")
def export_contents(
    cmid: int,
    user: dict = Depends(require_user),
    db: Session = Depends(get_db),
):
    instance, _cm = _load_module(db, cmid)
    return instances.export_contents(instance)


# -----------------------------
# Backup / restore
# -----------------------------
@router.get("/instances/{instance_id}/backup")
def backup_instance(
    instance_id: int,
    user: dict = Depends(require_course_editor),
    db: Session = Depends(get_db),
):
    try:
        data = backup.backup_instance(db, instance_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(content=data, media_type="application/xml")


@router.post("/courses/{course_id}/restore", response_model=SharedUrlOut, status_code=status.HTTP_201_CREATED)
async def restore_instance(
    course_id: int,
    request: Request,
    user: dict = Depends(require_course_editor),
    settings: SharedUrlSettings = Depends(get_settings),
    db: Session = Depends(get_db),
):
    data = await request.body()
    try:
        instance, cmid = backup.restore_instance(db, course_id, data, settings)
        db.commit()
    except InvalidInput as e:
        db.rollback()
        raise _invalid(e, user["lang"])
    except NotFound as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    return instances.to_out(instance, cmid)
