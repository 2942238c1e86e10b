import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...application.dtos import TransactionIn, TransactionOut
from ...application.errors import InventarioError
from ...application.services_low_stock import EvaluadorStockBajo
from ...application.services_transacciones import MetaTransaccion, TransaccionService
from ...dependencies import get_db, get_sink
from ...infrastructure.alert_client import AlertSink
from ...infrastructure.unit_of_work import UnitOfWork
from ...security.auth import CurrentUser, get_current_user
from ..errores import a_http

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transacciones", tags=["transacciones"])


@router.get("", response_model=List[TransactionOut])
def list_transactions(
    type: Optional[str] = Query(None, description="IN, OUT o Traslado"),
    location: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    limit: int = Query(200, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    return TransaccionService(UnitOfWork(db)).listar(
        type=type, location=location, search=search,
        date_from=date_from, date_to=date_to, limit=limit, offset=offset,
    )


@router.post("", response_model=TransactionOut)
def create_transaction(
    payload: TransactionIn,
    db: Session = Depends(get_db),
    sink: AlertSink = Depends(get_sink),
    current_user: CurrentUser = Depends(get_current_user),
):
    """
    Registra una entrada (IN) o salida (OUT). Una salida mayor al stock
    disponible se rechaza sin modificar nada.
    """
    uow = UnitOfWork(db)
    try:
        meta = MetaTransaccion(
            user_id=current_user.user_id,
            user_name=current_user.name,
            date=payload.transaction_date,
            notes=payload.notes,
            has_proof=payload.has_proof,
            proof_url=payload.proof_url,
            voucher_number=payload.voucher_number,
            min_stock=payload.min_stock,
            cost=payload.cost,
            asset_type=payload.asset_type,
        )
        service = TransaccionService(uow, EvaluadorStockBajo(uow, sink))
        transaccion = service.registrar(
            payload.type, payload.item, payload.category, payload.location, payload.quantity, meta,
        )
        uow.commit()
        db.refresh(transaccion)
        return transaccion
    except InventarioError as e:
        uow.rollback()
        raise a_http(e)
    except Exception as e:
        uow.rollback()
        logger.error("Error al registrar transacción: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error inesperado: {str(e)}")
    finally:
        uow.close()


@router.delete("/{transaction_id}")
def delete_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
    sink: AlertSink = Depends(get_sink),
    current_user: CurrentUser = Depends(get_current_user),
):
    uow = UnitOfWork(db)
    try:
        TransaccionService(uow, EvaluadorStockBajo(uow, sink)).eliminar(transaction_id, user_name=current_user.name)
        return {"deleted": True, "id": transaction_id}
    except InventarioError as e:
        uow.rollback()
        raise a_http(e)
    except Exception as e:
        uow.rollback()
        logger.error("Error al eliminar transacción %s: %s", transaction_id, e, exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error inesperado: {str(e)}")
    finally:
        uow.close()
