"""
Correo de alerta de stock bajo (POST /low-stock/send-alert).

Recibe la lista de artículos ya clasificados y arma el correo para el
administrador de la ubicación. La urgencia es CRÍTICO si algún artículo
está Crítico o Agotado; si no, BAJO.

El HTML sale de templates/email/alerta_stock_bajo.html (Jinja2 con
autoescape).
"""
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..domain.enums import StockStatus
from ..infrastructure.email_sender import EmailResult, ResendEmailSender
from .errors import ValidacionError

logger = logging.getLogger(__name__)

COLOR_CRITICO = "#ef4444"
COLOR_BAJO = "#f97316"

_CRITICOS = (StockStatus.CRITICO.value, StockStatus.AGOTADO.value)

_TEMPLATE_ENV = Environment(
    loader=FileSystemLoader(str(Path(__file__).resolve().parents[1] / "templates")),
    autoescape=select_autoescape(enabled_extensions=("html", "xml"), default=True),
)


def nivel_urgencia(items: List[Dict[str, Any]]) -> str:
    return "CRÍTICO" if any(i.get("status") in _CRITICOS for i in items) else "BAJO"


def asunto_alerta(items: List[Dict[str, Any]], location: str) -> str:
    return f"[{nivel_urgencia(items)}] Alerta de Stock Bajo en {location}"


def html_alerta(
    items: List[Dict[str, Any]],
    location: str,
    admin_name: Optional[str] = None,
    base_url: Optional[str] = None,
) -> str:
    criticos = sum(1 for i in items if i.get("status") in _CRITICOS)
    bajos = sum(1 for i in items if i.get("status") == StockStatus.BAJO.value)
    template = _TEMPLATE_ENV.get_template("email/alerta_stock_bajo.html")
    return template.render(
        items=items,
        location=location,
        admin_name=admin_name,
        base_url=(base_url or "").rstrip("/") or None,
        color=COLOR_CRITICO if criticos else COLOR_BAJO,
        color_critico=COLOR_CRITICO,
        color_bajo=COLOR_BAJO,
        estados_criticos=_CRITICOS,
        criticos=criticos,
        bajos=bajos,
    )


class AlertaCorreoService:

    def __init__(self, sender: Optional[ResendEmailSender] = None):
        self.sender = sender or ResendEmailSender()

    def enviar(
        self,
        items: List[Dict[str, Any]],
        location: str,
        admin_email: Optional[str],
        admin_name: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> EmailResult:
        if not items:
            raise ValidacionError(["No se proporcionaron artículos con stock bajo"])
        if not admin_email:
            raise ValidacionError(["No se proporcionó email de administrador"])

        logger.info("Enviando alerta a %s para %s con %d artículos", admin_email, location, len(items))
        return self.sender.send(
            to=admin_email,
            subject=asunto_alerta(items, location),
            html=html_alerta(items, location, admin_name, base_url),
        )
