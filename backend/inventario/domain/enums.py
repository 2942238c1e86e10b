from enum import Enum


class AssetType(str, Enum):
    INSUMO = "Insumo"  # Consumible
    ACTIVO = "Activo"  # Activo asignable a personas


class TransactionType(str, Enum):
    IN = "IN"
    OUT = "OUT"
    TRASLADO = "Traslado"


class StockStatus(str, Enum):
    NORMAL = "Normal"
    BAJO = "Bajo"
    CRITICO = "Crítico"
    AGOTADO = "Agotado"
    EXCESO = "Exceso"

    @property
    def requiere_alerta(self) -> bool:
        return self in (StockStatus.BAJO, StockStatus.CRITICO, StockStatus.AGOTADO)


class AuditState(str, Enum):
    NO_INICIADA = "NO_INICIADA"
    UBICACION_SELECCIONADA = "UBICACION_SELECCIONADA"
    CONTEO = "CONTEO"
    GUARDADA = "GUARDADA"
    REVERTIDA = "REVERTIDA"


class OperationStatus(str, Enum):
    EN_CURSO = "EN_CURSO"
    COMPLETADA = "COMPLETADA"
    FALLIDA = "FALLIDA"


class UserRole(str, Enum):
    ADMIN = "admin"
    COLABORADOR = "colaborador"
    AUDITOR = "auditor"
