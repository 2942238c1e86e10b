from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
import logging

import jwt
from fastapi import Depends, Header
from fastapi.security import OAuth2PasswordBearer

from ..config import settings

logger = logging.getLogger(__name__)

oauth2_scheme_optional = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


@dataclass
class CurrentUser:
    """Quién hace el cambio. Solo se usa para registrar user_name; no autoriza."""
    name: str
    role: Optional[str] = None
    user_id: str = "system"


def create_access_token(data: dict, expires_minutes: int = 60 * 8):
    to_encode = data.copy()
    expire = datetime.utcnow() + timedelta(minutes=expires_minutes)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm="HS256")


def _usuario_desde_token(token: str) -> Optional[CurrentUser]:
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=["HS256"])
    except jwt.PyJWTError as e:
        logger.warning("Token ignorado: %s", e)
        return None
    name = payload.get("name") or payload.get("sub")
    if not name:
        return None
    return CurrentUser(name=name, role=payload.get("role"), user_id=str(payload.get("sub") or "system"))


def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme_optional),
    x_user_name: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> CurrentUser:
    """
    Bearer JWT, luego cabeceras X-User-Name / X-User-Role, luego el
    usuario por defecto de settings.
    """
    if token:
        usuario = _usuario_desde_token(token)
        if usuario:
            return usuario
    if x_user_name and x_user_name.strip():
        return CurrentUser(name=x_user_name.strip(), role=x_user_role, user_id=x_user_name.strip())
    return CurrentUser(name=settings.default_user_name, role=x_user_role)
