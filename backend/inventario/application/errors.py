"""
Errores del dominio de inventario.

Todos heredan de InventarioError; los routers los traducen a HTTPException.
"""
from typing import List, Optional, Sequence


class InventarioError(Exception):
    """Excepción base para errores del módulo de inventario"""
    status_code = 400


class ValidacionError(InventarioError):
    """Datos de entrada inválidos (formulario de artículo, proveedor, etc.)"""

    def __init__(self, errores: Sequence[str]):
        self.errores: List[str] = list(errores)
        super().__init__("; ".join(self.errores))


class CantidadInvalidaError(InventarioError):
    """Cantidad negativa o cero donde no se permite"""
    pass


class RegistroNoEncontradoError(InventarioError):
    """Artículo, auditoría, transacción u otro registro inexistente"""
    status_code = 404

    def __init__(self, entidad: str, referencia):
        self.entidad = entidad
        self.referencia = referencia
        super().__init__(f"{entidad} {referencia} no encontrado")


class RegistroDuplicadoError(InventarioError):
    """Ya existe un registro con la misma clave de negocio"""
    status_code = 409


class StockInsuficienteError(InventarioError):
    """La salida supera la cantidad disponible"""

    def __init__(self, articulo: str, ubicacion: str, disponible: int, solicitado: int):
        self.articulo = articulo
        self.ubicacion = ubicacion
        self.disponible = disponible
        self.solicitado = solicitado
        super().__init__(
            f"Stock insuficiente de {articulo} en {ubicacion}. "
            f"Disponible: {disponible}, Solicitado: {solicitado}"
        )


class MovimientoInvalidoError(InventarioError):
    """Cantidad o destino inválido en un traslado"""
    pass


class OperacionNoReversibleError(InventarioError):
    """El registro no se puede eliminar con un ajuste compensatorio"""
    pass


class AuditoriaIncompletaError(InventarioError):
    """Se intentó guardar una auditoría con artículos sin contar"""

    def __init__(self, ubicacion: str, sin_contar: Sequence[str]):
        self.ubicacion = ubicacion
        self.sin_contar = list(sin_contar)
        super().__init__(
            f"La auditoría de {ubicacion} tiene {len(self.sin_contar)} artículo(s) sin contar: "
            + ", ".join(self.sin_contar)
        )


class TransicionAuditoriaError(InventarioError):
    """Acción no permitida en el estado actual de la sesión de auditoría"""
    pass


class ActualizacionConcurrenteError(InventarioError):
    """Otro usuario modificó el registro entre la lectura y la escritura"""
    status_code = 409

    def __init__(self, entidad: str, referencia):
        self.entidad = entidad
        self.referencia = referencia
        super().__init__(
            f"{entidad} {referencia} fue modificado por otra operación. Recargue e intente nuevamente."
        )


class EscrituraParcialError(InventarioError):
    """
    Una operación multi-paso falló después de confirmar al menos un paso.
    No hay compensación automática: el estado queda como lo dejaron los
    pasos completados.
    """
    status_code = 500

    def __init__(
        self,
        operacion: str,
        paso_fallido: str,
        pasos_completados: Sequence[str],
        operation_id: Optional[int] = None,
        causa: Optional[BaseException] = None,
    ):
        self.operacion = operacion
        self.paso_fallido = paso_fallido
        self.pasos_completados = list(pasos_completados)
        self.operation_id = operation_id
        self.causa = causa
        super().__init__(
            f"La operación {operacion} (#{operation_id}) falló en el paso '{paso_fallido}' "
            f"después de completar: {', '.join(self.pasos_completados)}. "
            f"Causa: {causa}"
        )
