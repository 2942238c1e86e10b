import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...application.dtos import AssignmentIn, AssignmentOut
from ...application.errors import InventarioError
from ...application.services_activos import AsignacionActivoService
from ...dependencies import get_db
from ...infrastructure.unit_of_work import UnitOfWork
from ..errores import a_http

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/activos", tags=["activos"])


@router.get("/asignaciones", response_model=List[AssignmentOut])
def list_active_assignments(search: Optional[str] = Query(None), db: Session = Depends(get_db)):
    return AsignacionActivoService(UnitOfWork(db)).listar_activas(search)


@router.get("/{inventory_id}/historial", response_model=List[AssignmentOut])
def assignment_history(inventory_id: int, db: Session = Depends(get_db)):
    try:
        return AsignacionActivoService(UnitOfWork(db)).historial(inventory_id)
    except InventarioError as e:
        raise a_http(e)


@router.post("/asignaciones", response_model=AssignmentOut)
def assign_asset(payload: AssignmentIn, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    try:
        asignacion = AsignacionActivoService(uow).asignar(payload.inventory_id, payload.assigned_to, payload.notes)
        uow.commit()
        db.refresh(asignacion)
        return asignacion
    except InventarioError as e:
        uow.rollback()
        raise a_http(e)
    except Exception as e:
        uow.rollback()
        logger.error("Error al asignar activo %s: %s", payload.inventory_id, e, exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error inesperado: {str(e)}")
    finally:
        uow.close()


@router.post("/{inventory_id}/liberar")
def release_asset(inventory_id: int, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    try:
        liberadas = AsignacionActivoService(uow).liberar(inventory_id)
        uow.commit()
        return {"inventory_id": inventory_id, "released": liberadas}
    except InventarioError as e:
        uow.rollback()
        raise a_http(e)
    finally:
        uow.close()
