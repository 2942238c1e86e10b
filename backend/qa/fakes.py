"""
Dobles de prueba compartidos por los tests de servicios y de API.
"""
from inventario.infrastructure.alert_client import AlertResult
from inventario.infrastructure.email_sender import EmailResult


class RecordingSink:
    """Sink de alertas que solo registra las llamadas."""

    def __init__(self, result=None, error=None):
        self.calls = []
        self.result = result or AlertResult(success=True, message_id="msg-test")
        self.error = error

    def send_low_stock_alert(self, location, items, admin_email, admin_name=None):
        self.calls.append({
            "location": location,
            "items": items,
            "admin_email": admin_email,
            "admin_name": admin_name,
        })
        if self.error:
            raise self.error
        return self.result

    def locations(self):
        return [c["location"] for c in self.calls]


class FakeEmailSender:
    """Reemplaza a ResendEmailSender; guarda los correos enviados."""

    def __init__(self, result=None):
        self.sent = []
        self.result = result or EmailResult(success=True, message_id="email-123")

    def send(self, to, subject, html):
        self.sent.append({"to": to, "subject": subject, "html": html})
        return self.result
