"""
API de Stock Bajo
=================

- GET  /low-stock               artículos Bajo/Crítico/Agotado
- POST /low-stock/check         barrido de todas las ubicaciones
- POST /low-stock/send-alert    entrega del correo (contrato del servicio de alertas)
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ...application.dtos import AlertResultOut, LowStockItem, SendAlertIn
from ...application.errors import ValidacionError
from ...application.services_alertas import AlertaCorreoService
from ...application.services_low_stock import EvaluadorStockBajo
from ...dependencies import get_db, get_email_sender, get_sink
from ...infrastructure.alert_client import AlertSink
from ...infrastructure.email_sender import ResendEmailSender
from ...infrastructure.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/low-stock", tags=["low-stock"])


@router.get("", response_model=List[LowStockItem])
def list_low_stock(
    location: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    sink: AlertSink = Depends(get_sink),
):
    uow = UnitOfWork(db)
    evaluador = EvaluadorStockBajo(uow, sink)
    ubicaciones = [location] if location else uow.inventory.locations()
    items = []
    for ubicacion in ubicaciones:
        items.extend(evaluador.articulos_bajos(ubicacion))
    return items


@router.post("/check", response_model=List[AlertResultOut])
def check_all_locations(db: Session = Depends(get_db), sink: AlertSink = Depends(get_sink)):
    resultados = EvaluadorStockBajo(UnitOfWork(db), sink).verificar_todas_las_ubicaciones()
    return [
        AlertResultOut(location=loc, success=r.success, message_id=r.message_id, error=r.error)
        for loc, r in resultados.items() if r is not None
    ]


@router.post("/check/{location}", response_model=Optional[AlertResultOut])
def check_location(location: str, db: Session = Depends(get_db), sink: AlertSink = Depends(get_sink)):
    r = EvaluadorStockBajo(UnitOfWork(db), sink).alertar_ubicacion(location)
    if r is None:
        return None
    return AlertResultOut(location=location, success=r.success, message_id=r.message_id, error=r.error)


@router.post("/send-alert")
def send_alert(payload: SendAlertIn, sender: ResendEmailSender = Depends(get_email_sender)):
    try:
        result = AlertaCorreoService(sender).enviar(
            items=[i.model_dump() for i in payload.items],
            location=payload.location,
            admin_email=payload.adminEmail,
            admin_name=payload.adminName,
            base_url=payload.baseUrl,
        )
    except ValidacionError as e:
        logger.error("Solicitud de alerta inválida: %s", e)
        return JSONResponse(status_code=400, content={"error": str(e)})

    if not result.success:
        return JSONResponse(status_code=500, content={"error": result.error})
    logger.info("Correo de alerta enviado: %s", result.message_id)
    return {"success": True, "messageId": result.message_id}
