from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...application.dtos import UserIn, UserOut, UserUpdate
from ...application.errors import InventarioError
from ...application.services_catalogos import UsuarioService
from ...dependencies import get_db
from ...infrastructure.unit_of_work import UnitOfWork
from ..errores import a_http

router = APIRouter(prefix="/usuarios", tags=["usuarios"])


@router.get("", response_model=List[UserOut])
def list_users(db: Session = Depends(get_db)):
    return UsuarioService(UnitOfWork(db)).listar()


@router.post("", response_model=UserOut)
def create_user(payload: UserIn, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    try:
        usuario = UsuarioService(uow).crear(payload.model_dump())
        uow.commit()
        db.refresh(usuario)
        return usuario
    except InventarioError as e:
        uow.rollback()
        raise a_http(e)
    finally:
        uow.close()


@router.put("/{user_id}", response_model=UserOut)
def update_user(user_id: int, payload: UserUpdate, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    try:
        usuario = UsuarioService(uow).actualizar(user_id, payload.model_dump(exclude_unset=True))
        uow.commit()
        db.refresh(usuario)
        return usuario
    except InventarioError as e:
        uow.rollback()
        raise a_http(e)
    finally:
        uow.close()


@router.delete("/{user_id}")
def delete_user(user_id: int, db: Session = Depends(get_db)):
    uow = UnitOfWork(db)
    try:
        UsuarioService(uow).eliminar(user_id)
        uow.commit()
        return {"deleted": True, "id": user_id}
    except InventarioError as e:
        uow.rollback()
        raise a_http(e)
    finally:
        uow.close()
