"""
Envío de correos por el API REST de Resend
==========================================

POST {resend_api_url} con Authorization: Bearer {resend_api_key}.
Respuesta exitosa: {"id": "..."}; error: {"message": "...", "name": "..."}.
"""
from dataclasses import dataclass
from typing import Optional
import logging

import httpx

from ..config import settings

logger = logging.getLogger(__name__)


@dataclass
class EmailResult:
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


class ResendEmailSender:
    """
    Cliente mínimo de Resend
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        sender: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.resend_api_key
        self.api_url = api_url or settings.resend_api_url
        self.sender = sender or settings.email_from
        self.timeout = timeout if timeout is not None else settings.alert_timeout_seconds

    def send(self, to: str, subject: str, html: str) -> EmailResult:
        if not self.api_key:
            return EmailResult(success=False, error="RESEND_API_KEY no configurada")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {"from": self.sender, "to": [to], "subject": subject, "html": html}

        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(self.api_url, json=payload, headers=headers)
        except httpx.TimeoutException:
            return EmailResult(success=False, error="Timeout al contactar Resend")
        except httpx.HTTPError as e:
            return EmailResult(success=False, error=f"Error de conexión con Resend: {e}")

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.status_code >= 400:
            mensaje = data.get("message") or response.text[:500]
            logger.error("Resend respondió %s al enviar a %s: %s", response.status_code, to, mensaje)
            return EmailResult(success=False, error=mensaje)

        return EmailResult(success=True, message_id=data.get("id"))
