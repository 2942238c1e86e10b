"""
Registro de operaciones multi-paso (traslados, auditorías, eliminaciones).

Cada paso se confirma por separado; esta tabla guarda el último paso
completado para poder reconciliar a mano una operación que falló a medias.
"""
from datetime import datetime
from typing import Any, Dict
from sqlalchemy import Integer, String, DateTime, Text, JSON
from sqlalchemy.orm import Mapped, mapped_column
from ..db import Base
from .enums import OperationStatus


class OperationLog(Base):
    __tablename__ = "operation_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    operation: Mapped[str] = mapped_column(String(50), index=True)  # TRASLADO, GUARDAR_AUDITORIA, ...
    entity_type: Mapped[str] = mapped_column(String(50))
    entity_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)
    status: Mapped[str] = mapped_column(String(20), default=OperationStatus.EN_CURSO.value, index=True)
    last_step: Mapped[str | None] = mapped_column(String(100), nullable=True)
    failed_step: Mapped[str | None] = mapped_column(String(100), nullable=True)
    context: Mapped[Dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    user_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    started_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now)
    finished_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
