from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.orm import Session

from bto.db.session import get_db

router = APIRouter()


@router.get("/health")
async def health(request: Request):
    rid = getattr(request.state, "request_id", None)
    return {"status": "ok", "request_id": rid}


@router.get("/health/db")
def health_db(request: Request, db: Session = Depends(get_db)):
    db.execute(text("SELECT 1"))
    rid = getattr(request.state, "request_id", None)
    return {"status": "ok", "database": "reachable", "request_id": rid}
