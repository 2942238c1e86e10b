import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ...application.dtos import MoveIn, MoveOut
from ...application.errors import InventarioError
from ...application.services_low_stock import EvaluadorStockBajo
from ...application.services_traslados import TrasladoService
from ...dependencies import get_db, get_sink
from ...infrastructure.alert_client import AlertSink
from ...infrastructure.unit_of_work import UnitOfWork
from ...security.auth import CurrentUser, get_current_user
from ..errores import a_http

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/traslados", tags=["traslados"])


@router.post("", response_model=MoveOut)
def move_item(
    payload: MoveIn,
    db: Session = Depends(get_db),
    sink: AlertSink = Depends(get_sink),
    current_user: CurrentUser = Depends(get_current_user),
):
    """
    Traslada `quantity` unidades del artículo a `destination`.
    Si el origen queda en 0 se elimina su registro.
    """
    uow = UnitOfWork(db)
    try:
        resultado = TrasladoService(uow, EvaluadorStockBajo(uow, sink)).trasladar(
            payload.item_id,
            payload.quantity,
            payload.destination,
            user_id=current_user.user_id,
            user_name=current_user.name,
            notes=payload.notes,
        )
        return MoveOut(**resultado.__dict__)
    except InventarioError as e:
        uow.rollback()
        raise a_http(e)
    except Exception as e:
        uow.rollback()
        logger.error("Error al trasladar artículo %s: %s", payload.item_id, e, exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error inesperado: {str(e)}")
    finally:
        uow.close()
