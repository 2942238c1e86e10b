from fastapi import HTTPException

from ..application.errors import EscrituraParcialError, InventarioError, ValidacionError


def a_http(e: InventarioError) -> HTTPException:
    """Traduce un error del dominio a la respuesta HTTP correspondiente."""
    if isinstance(e, ValidacionError):
        return HTTPException(status_code=e.status_code, detail={"message": str(e), "errors": e.errores})
    if isinstance(e, EscrituraParcialError):
        return HTTPException(status_code=e.status_code, detail={
            "message": str(e),
            "operation_id": e.operation_id,
            "failed_step": e.paso_fallido,
            "completed_steps": e.pasos_completados,
        })
    return HTTPException(status_code=e.status_code, detail=str(e))
