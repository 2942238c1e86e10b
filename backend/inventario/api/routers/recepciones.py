import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...application.dtos import ReceiptIn, ReceiptOut
from ...application.errors import InventarioError
from ...application.services_low_stock import EvaluadorStockBajo
from ...application.services_recepciones import RecepcionService
from ...dependencies import get_db, get_sink
from ...infrastructure.alert_client import AlertSink
from ...infrastructure.unit_of_work import UnitOfWork
from ...security.auth import CurrentUser, get_current_user
from ..errores import a_http

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recepciones", tags=["recepciones"])


@router.get("", response_model=List[ReceiptOut])
def list_receipts(
    supplier_id: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    return RecepcionService(UnitOfWork(db)).listar(supplier_id=supplier_id, search=search)


@router.post("", response_model=ReceiptOut)
def create_receipt(
    payload: ReceiptIn,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    uow = UnitOfWork(db)
    try:
        return RecepcionService(uow).registrar_recepcion(
            item_id=payload.item_id,
            supplier_id=payload.supplier_id,
            invoice_number=payload.invoice_number,
            quantity=payload.quantity,
            receipt_date=payload.receipt_date,
            cost=payload.cost,
            notes=payload.notes,
            user_name=current_user.name,
        )
    except InventarioError as e:
        uow.rollback()
        raise a_http(e)
    except Exception as e:
        uow.rollback()
        logger.error("Error al registrar recepción: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error inesperado: {str(e)}")
    finally:
        uow.close()


@router.delete("/{receipt_id}")
def delete_receipt(
    receipt_id: int,
    db: Session = Depends(get_db),
    sink: AlertSink = Depends(get_sink),
    current_user: CurrentUser = Depends(get_current_user),
):
    uow = UnitOfWork(db)
    try:
        RecepcionService(uow, EvaluadorStockBajo(uow, sink)).eliminar_recepcion(receipt_id, user_name=current_user.name)
        return {"deleted": True, "id": receipt_id}
    except InventarioError as e:
        uow.rollback()
        raise a_http(e)
    except Exception as e:
        uow.rollback()
        logger.error("Error al eliminar recepción %s: %s", receipt_id, e, exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error inesperado: {str(e)}")
    finally:
        uow.close()
