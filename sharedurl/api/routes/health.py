from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from sharedurl.core.db import get_db

router = APIRouter()


@router.get("/health")
def health(db: Session = Depends(get_db)):
    try:
        db.execute(text("select 1 from sharedurl limit 1"))
        return {"sharedurl ok": True}
    except Exception as e:
        return {"sharedurl ok": False, "Error": str(e)}
