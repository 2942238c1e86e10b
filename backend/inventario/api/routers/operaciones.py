"""
Bitácora de operaciones multi-paso. Las FALLIDA con last_step indican
escrituras parciales que requieren reconciliación manual.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...application.dtos import OperationLogOut
from ...dependencies import get_db
from ...infrastructure.unit_of_work import UnitOfWork

router = APIRouter(prefix="/operaciones", tags=["operaciones"])


@router.get("", response_model=List[OperationLogOut])
def list_operations(
    status: Optional[str] = Query(None, description="EN_CURSO, COMPLETADA o FALLIDA"),
    operation: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    return UnitOfWork(db).operations.list(status=status, operation=operation, limit=limit)


@router.get("/{operation_id}", response_model=OperationLogOut)
def get_operation(operation_id: int, db: Session = Depends(get_db)):
    op = UnitOfWork(db).operations.get(operation_id)
    if not op:
        raise HTTPException(status_code=404, detail=f"Operación {operation_id} no encontrada")
    return op
