"""
Validaciones del formulario de artículos de inventario.
"""
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Tuple

from ..domain.enums import AssetType


def validar_articulo(data: Dict[str, Any], parcial: bool = False) -> Tuple[bool, List[str]]:
    """
    Valida los datos de un artículo.

    Con parcial=True solo se validan los campos presentes (edición).

    Returns:
        (es_valido, errores)
    """
    errores: List[str] = []

    def presente(campo: str) -> bool:
        return not parcial or campo in data

    if presente("name") and not str(data.get("name") or "").strip():
        errores.append("El nombre del artículo es requerido")

    if presente("category") and not str(data.get("category") or "").strip():
        errores.append("La categoría es requerida")

    if presente("location") and not str(data.get("location") or "").strip():
        errores.append("La ubicación es requerida")

    if presente("quantity"):
        quantity = data.get("quantity")
        if quantity is None or int(quantity) < 0:
            errores.append("La cantidad no puede ser negativa")

    if "min_stock" in data and data["min_stock"] is not None and int(data["min_stock"]) < 0:
        errores.append("El stock mínimo no puede ser negativo")

    if "cost" in data and data["cost"] is not None:
        try:
            if Decimal(str(data["cost"])) < 0:
                errores.append("El costo no puede ser negativo")
        except InvalidOperation:
            errores.append("El costo debe ser numérico")

    if "asset_type" in data and data["asset_type"] is not None:
        valores = [t.value for t in AssetType]
        if data["asset_type"] not in valores:
            errores.append(f"Tipo de activo inválido. Use uno de: {', '.join(valores)}")

    return len(errores) == 0, errores
