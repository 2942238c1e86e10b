from typing import Generator

from sqlalchemy.orm import Session

from .db import SessionLocal
from .infrastructure.alert_client import AlertSink, get_alert_sink
from .infrastructure.email_sender import ResendEmailSender


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_sink() -> AlertSink:
    return get_alert_sink()


def get_email_sender() -> ResendEmailSender:
    return ResendEmailSender()
