"""
API de Inventario
=================

Artículos por ubicación con su estado de stock (Normal, Bajo, Crítico,
Agotado, Exceso) y valor total.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...application.dtos import ItemIn, ItemOut, ItemUpdate, ItemWithStatusOut
from ...application.errors import InventarioError
from ...application.services_ledger import ArticuloConEstado, LedgerService
from ...application.services_low_stock import EvaluadorStockBajo
from ...dependencies import get_db, get_sink
from ...infrastructure.alert_client import AlertSink
from ...infrastructure.unit_of_work import UnitOfWork
from ..errores import a_http

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/inventario", tags=["inventario"])


def _con_estado(a: ArticuloConEstado) -> ItemWithStatusOut:
    data = ItemOut.model_validate(a.item).model_dump()
    data["min_stock"] = a.min_stock
    return ItemWithStatusOut(**data, status=a.status.value, total_value=a.total_value)


@router.get("", response_model=List[ItemWithStatusOut])
def list_items(
    location: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    asset_type: Optional[str] = Query(None),
    status: Optional[str] = Query(None, description="Normal, Bajo, Crítico, Agotado o Exceso"),
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    uow = UnitOfWork(db)
    articulos = LedgerService(uow).listar_articulos(
        location=location, category=category, asset_type=asset_type, status=status, search=search,
    )
    return [_con_estado(a) for a in articulos]


@router.get("/{item_id}", response_model=ItemOut)
def get_item(item_id: int, db: Session = Depends(get_db)):
    try:
        return LedgerService(UnitOfWork(db)).get(item_id)
    except InventarioError as e:
        raise a_http(e)


@router.post("", response_model=ItemOut)
def create_item(payload: ItemIn, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    try:
        item = LedgerService(uow).crear_articulo(payload.model_dump())
        uow.commit()
        db.refresh(item)
        return item
    except InventarioError as e:
        uow.rollback()
        raise a_http(e)
    except Exception as e:
        uow.rollback()
        logger.error("Error al crear artículo: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error inesperado: {str(e)}")
    finally:
        uow.close()


@router.put("/{item_id}", response_model=ItemOut)
def update_item(
    item_id: int,
    payload: ItemUpdate,
    db: Session = Depends(get_db),
    sink: AlertSink = Depends(get_sink),
):
    uow = UnitOfWork(db)
    try:
        service = LedgerService(uow, EvaluadorStockBajo(uow, sink))
        item = service.actualizar_articulo(item_id, payload.model_dump(exclude_unset=True))
        uow.commit()
        db.refresh(item)
        return item
    except InventarioError as e:
        uow.rollback()
        raise a_http(e)
    except Exception as e:
        uow.rollback()
        logger.error("Error al actualizar artículo %s: %s", item_id, e, exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error inesperado: {str(e)}")
    finally:
        uow.close()


@router.delete("/{item_id}")
def delete_item(item_id: int, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    try:
        LedgerService(uow).eliminar_articulo(item_id)
        uow.commit()
        return {"deleted": True, "id": item_id}
    except InventarioError as e:
        uow.rollback()
        raise a_http(e)
    except Exception as e:
        uow.rollback()
        logger.error("Error al eliminar artículo %s: %s", item_id, e, exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error inesperado: {str(e)}")
    finally:
        uow.close()
