import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ...application.dtos import SupplierIn, SupplierOut, SupplierUpdate
from ...application.errors import InventarioError
from ...application.services_recepciones import ProveedorService
from ...dependencies import get_db
from ...infrastructure.unit_of_work import UnitOfWork
from ..errores import a_http

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/proveedores", tags=["proveedores"])


@router.get("", response_model=List[SupplierOut])
def list_suppliers(db: Session = Depends(get_db)):
    return ProveedorService(UnitOfWork(db)).listar()


@router.post("", response_model=SupplierOut)
def create_supplier(payload: SupplierIn, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    try:
        proveedor = ProveedorService(uow).crear(payload.model_dump())
        uow.commit()
        db.refresh(proveedor)
        return proveedor
    except InventarioError as e:
        uow.rollback()
        raise a_http(e)
    except Exception as e:
        uow.rollback()
        logger.error("Error al crear proveedor: %s", e, exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error inesperado: {str(e)}")
    finally:
        uow.close()


@router.put("/{supplier_id}", response_model=SupplierOut)
def update_supplier(supplier_id: int, payload: SupplierUpdate, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    try:
        proveedor = ProveedorService(uow).actualizar(supplier_id, payload.model_dump(exclude_unset=True))
        uow.commit()
        db.refresh(proveedor)
        return proveedor
    except InventarioError as e:
        uow.rollback()
        raise a_http(e)
    except Exception as e:
        uow.rollback()
        logger.error("Error al actualizar proveedor %s: %s", supplier_id, e, exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error inesperado: {str(e)}")
    finally:
        uow.close()


@router.delete("/{supplier_id}")
def delete_supplier(supplier_id: int, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    try:
        ProveedorService(uow).eliminar(supplier_id)
        uow.commit()
        return {"deleted": True, "id": supplier_id}
    except InventarioError as e:
        uow.rollback()
        raise a_http(e)
    finally:
        uow.close()
