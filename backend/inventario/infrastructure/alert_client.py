"""
Cliente del servicio de alertas de stock bajo.

El servicio externo se encarga de la plantilla y la entrega del correo;
aquí solo se le envía "alerta para la ubicación X con los artículos Y".
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol
import logging

import httpx

from ..config import settings

logger = logging.getLogger(__name__)


@dataclass
class AlertResult:
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


class AlertSink(Protocol):
    def send_low_stock_alert(
        self,
        location: str,
        items: List[Dict[str, Any]],
        admin_email: str,
        admin_name: Optional[str] = None,
    ) -> AlertResult:
        ...


class HttpAlertSink:
    """POST {items, location, adminEmail, adminName, baseUrl} al servicio de alertas."""

    def __init__(self, url: str = None, timeout: float = None, base_url: str = None):
        self.url = url or settings.alert_service_url
        self.timeout = timeout if timeout is not None else settings.alert_timeout_seconds
        self.base_url = base_url or settings.base_url

    def send_low_stock_alert(self, location, items, admin_email, admin_name=None) -> AlertResult:
        payload = {
            "items": items,
            "location": location,
            "adminEmail": admin_email,
            "adminName": admin_name,
            "baseUrl": self.base_url,
        }
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(self.url, json=payload)
        except httpx.TimeoutException:
            return AlertResult(success=False, error=f"Timeout al contactar el servicio de alertas: {self.url}")
        except httpx.HTTPError as e:
            return AlertResult(success=False, error=f"Error de conexión con el servicio de alertas: {e}")

        try:
            data = response.json()
        except ValueError:
            data = {"error": response.text[:500]}

        if response.status_code != 200 or not data.get("success"):
            return AlertResult(
                success=False,
                error=f"Error {response.status_code}: {data.get('error', 'respuesta inválida')}",
            )
        return AlertResult(success=True, message_id=data.get("messageId"))


class NullAlertSink:
    """Se usa cuando ALERTS_ENABLED=false."""

    def send_low_stock_alert(self, location, items, admin_email, admin_name=None) -> AlertResult:
        logger.info("Alertas deshabilitadas: se omite alerta de %s (%d artículos)", location, len(items))
        return AlertResult(success=False, error="Alertas deshabilitadas")


def get_alert_sink() -> AlertSink:
    if not settings.alerts_enabled:
        return NullAlertSink()
    return HttpAlertSink()
