from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...application.dtos import CategoryIn, CategoryOut
from ...application.errors import InventarioError
from ...application.services_catalogos import CategoriaService
from ...dependencies import get_db
from ...infrastructure.unit_of_work import UnitOfWork
from ..errores import a_http

router = APIRouter(prefix="/categorias", tags=["categorias"])


@router.get("", response_model=List[CategoryOut])
def list_categories(db: Session = Depends(get_db)):
    return CategoriaService(UnitOfWork(db)).listar()


@router.post("", response_model=CategoryOut)
def create_category(payload: CategoryIn, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    try:
        categoria = CategoriaService(uow).crear(payload.name)
        uow.commit()
        db.refresh(categoria)
        return categoria
    except InventarioError as e:
        uow.rollback()
        raise a_http(e)
    finally:
        uow.close()


@router.delete("/{category_id}")
def delete_category(category_id: int, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    try:
        CategoriaService(uow).eliminar(category_id)
        uow.commit()
        return {"deleted": True, "id": category_id}
    except InventarioError as e:
        uow.rollback()
        raise a_http(e)
    finally:
        uow.close()
