"""
API de Auditorías Físicas
=========================

GET  /auditorias/conteo?location=X  -> hoja de conteo (foto del ledger)
POST /auditorias                    -> guarda el conteo completo
DELETE /auditorias/{id}             -> revierte el ledger y borra la auditoría
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...application.dtos import (
    AuditDetailOut, AuditIn, AuditItemOut, AuditLineOut, AuditOut, AuditRevertOut, PendingAuditOut,
)
from ...application.errors import InventarioError
from ...application.services_auditoria import AuditoriaService, AuditoriaSession
from ...application.services_low_stock import EvaluadorStockBajo
from ...dependencies import get_db, get_sink
from ...infrastructure.alert_client import AlertSink
from ...infrastructure.unit_of_work import UnitOfWork
from ...security.auth import CurrentUser, get_current_user
from ..errores import a_http

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auditorias", tags=["auditorias"])


@router.get("", response_model=List[AuditOut])
def list_audits(location: Optional[str] = Query(None), db: Session = Depends(get_db)):
    return AuditoriaService(UnitOfWork(db)).listar(location)


@router.get("/pendientes", response_model=List[PendingAuditOut])
def pending_audits(db: Session = Depends(get_db)):
    return AuditoriaService(UnitOfWork(db)).pendientes()


@router.get("/conteo", response_model=List[AuditLineOut])
def count_sheet(location: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    try:
        lineas = AuditoriaSession(UnitOfWork(db)).seleccionar_ubicacion(location)
        return [AuditLineOut(**l.__dict__) for l in lineas]
    except InventarioError as e:
        raise a_http(e)


@router.post("", response_model=AuditOut)
def save_audit(
    payload: AuditIn,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """
    Guarda la auditoría. Todas las líneas de la ubicación deben venir
    contadas; si falta alguna no se escribe nada.

    Cada línea trae la system_quantity de la hoja con la que se contó: la
    diferencia se mide contra lo que vio el auditor, no contra el ledger al
    momento de guardar.
    """
    uow = UnitOfWork(db)
    try:
        sesion = AuditoriaSession(uow)
        sesion.seleccionar_ubicacion(payload.location)
        for conteo in payload.counts:
            sesion.registrar_conteo(conteo.item_id, conteo.actual_quantity, conteo.system_quantity)
        audit = sesion.guardar(current_user.name)
        return audit
    except InventarioError as e:
        uow.rollback()
        raise a_http(e)
    except Exception as e:
        uow.rollback()
        logger.error("Error al guardar auditoría de %s: %s", payload.location, e, exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error inesperado: {str(e)}")
    finally:
        uow.close()


@router.get("/{audit_id}", response_model=AuditDetailOut)
def get_audit(audit_id: int, db: Session = Depends(get_db)):
    try:
        detalle = AuditoriaService(UnitOfWork(db)).detalle(audit_id)
    except InventarioError as e:
        raise a_http(e)
    return AuditDetailOut(
        audit=AuditOut.model_validate(detalle["audit"]),
        items=[AuditItemOut.model_validate(i) for i in detalle["items"]],
        total_value_discrepancy=detalle["total_value_discrepancy"],
    )


@router.delete("/{audit_id}", response_model=AuditRevertOut)
def delete_audit(
    audit_id: int,
    db: Session = Depends(get_db),
    sink: AlertSink = Depends(get_sink),
    current_user: CurrentUser = Depends(get_current_user),
):
    uow = UnitOfWork(db)
    try:
        resumen = AuditoriaService(uow, EvaluadorStockBajo(uow, sink)).eliminar(audit_id, user_name=current_user.name)
        return AuditRevertOut(**resumen.__dict__)
    except InventarioError as e:
        uow.rollback()
        raise a_http(e)
    except Exception as e:
        uow.rollback()
        logger.error("Error al eliminar auditoría %s: %s", audit_id, e, exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error inesperado: {str(e)}")
    finally:
        uow.close()
