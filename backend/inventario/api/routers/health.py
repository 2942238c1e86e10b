from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...dependencies import get_db

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/ready")
def ready(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        return JSONResponse(status_code=503, content={"status": "error", "database": str(e)})
    return {"status": "ok", "database": "ok"}
