"""
Catálogos: ubicaciones, categorías y usuarios que reciben alertas.
"""
from typing import Any, Dict, List

from ..domain.enums import UserRole
from ..domain.models import Category, Location, User
from ..infrastructure.unit_of_work import UnitOfWork
from .errors import RegistroDuplicadoError, RegistroNoEncontradoError, ValidacionError


class UbicacionService:

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def listar(self) -> List[Location]:
        return self.uow.locations.list()

    def nombres(self) -> List[str]:
        return self.uow.locations.names()

    def crear(self, name: str, address: str = None, manager: str = None) -> Location:
        name = (name or "").strip()
        if not name:
            raise ValidacionError(["El nombre de la ubicación es requerido"])
        if self.uow.locations.by_name(name):
            raise RegistroDuplicadoError(f"La ubicación {name} ya existe")
        return self.uow.locations.add(Location(name=name, address=address, manager=manager))

    def eliminar(self, location_id: int) -> None:
        ubicacion = self.uow.locations.get(location_id)
        if not ubicacion:
            raise RegistroNoEncontradoError("Ubicación", location_id)
        if self.uow.inventory.by_location(ubicacion.name):
            raise ValidacionError([f"La ubicación {ubicacion.name} tiene artículos en inventario"])
        self.uow.locations.delete(ubicacion)


class CategoriaService:

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def listar(self) -> List[Category]:
        return self.uow.categories.list()

    def crear(self, name: str) -> Category:
        name = (name or "").strip()
        if not name:
            raise ValidacionError(["El nombre de la categoría es requerido"])
        if self.uow.categories.by_name(name):
            raise RegistroDuplicadoError(f"La categoría {name} ya existe")
        return self.uow.categories.add(Category(name=name))

    def eliminar(self, category_id: int) -> None:
        categoria = self.uow.categories.get(category_id)
        if not categoria:
            raise RegistroNoEncontradoError("Categoría", category_id)
        if self.uow.categories.in_use(categoria.name):
            raise ValidacionError([f"La categoría {categoria.name} está en uso por artículos del inventario"])
        self.uow.categories.delete(categoria)


class UsuarioService:

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def _validar(self, data: Dict[str, Any]) -> None:
        errores = []
        if not str(data.get("name") or "").strip():
            errores.append("El nombre es requerido")
        if "@" not in str(data.get("email") or ""):
            errores.append("El email no es válido")
        if not str(data.get("location") or "").strip():
            errores.append("La ubicación es requerida")
        roles = [r.value for r in UserRole]
        if data.get("role") not in roles:
            errores.append(f"Rol inválido. Use uno de: {', '.join(roles)}")
        if errores:
            raise ValidacionError(errores)

    def get(self, user_id: int) -> User:
        usuario = self.uow.users.get(user_id)
        if not usuario:
            raise RegistroNoEncontradoError("Usuario", user_id)
        return usuario

    def listar(self) -> List[User]:
        return self.uow.users.list()

    def crear(self, data: Dict[str, Any]) -> User:
        data = {"role": UserRole.COLABORADOR.value, **data}
        self._validar(data)
        if self.uow.users.by_email(data["email"]):
            raise RegistroDuplicadoError(f"Ya existe un usuario con el email {data['email']}")
        return self.uow.users.add(User(**data))

    def actualizar(self, user_id: int, cambios: Dict[str, Any]) -> User:
        usuario = self.get(user_id)
        actual = {"name": usuario.name, "email": usuario.email, "location": usuario.location, "role": usuario.role}
        self._validar({**actual, **cambios})
        if "email" in cambios and cambios["email"] != usuario.email and self.uow.users.by_email(cambios["email"]):
            raise RegistroDuplicadoError(f"Ya existe un usuario con el email {cambios['email']}")
        for campo, valor in cambios.items():
            setattr(usuario, campo, valor)
        self.uow.db.flush()
        return usuario

    def eliminar(self, user_id: int) -> None:
        self.uow.users.delete(self.get(user_id))
