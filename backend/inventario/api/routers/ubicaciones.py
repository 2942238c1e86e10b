from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...application.dtos import LocationIn, LocationOut
from ...application.errors import InventarioError
from ...application.services_catalogos import UbicacionService
from ...dependencies import get_db
from ...infrastructure.unit_of_work import UnitOfWork
from ..errores import a_http

router = APIRouter(prefix="/ubicaciones", tags=["ubicaciones"])


@router.get("", response_model=List[LocationOut])
def list_locations(db: Session = Depends(get_db)):
    return UbicacionService(UnitOfWork(db)).listar()


@router.get("/nombres", response_model=List[str])
def location_names(db: Session = Depends(get_db)):
    """Catálogo más las ubicaciones que solo existen en el inventario."""
    return UbicacionService(UnitOfWork(db)).nombres()


@router.post("", response_model=LocationOut)
def create_location(payload: LocationIn, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    try:
        ubicacion = UbicacionService(uow).crear(payload.name, payload.address, payload.manager)
        uow.commit()
        db.refresh(ubicacion)
        return ubicacion
    except InventarioError as e:
        uow.rollback()
        raise a_http(e)
    finally:
        uow.close()


@router.delete("/{location_id}")
def delete_location(location_id: int, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    try:
        UbicacionService(uow).eliminar(location_id)
        uow.commit()
        return {"deleted": True, "id": location_id}
    except InventarioError as e:
        uow.rollback()
        raise a_http(e)
    finally:
        uow.close()
