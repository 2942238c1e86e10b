from pathlib import Path
from pydantic_settings import BaseSettings
from pydantic import Field, model_validator, field_validator
import secrets

BASE_DIR = Path(__file__).resolve().parent.parent  # backend/

ESTADOS_STOCK_CERO = ("Agotado", "Crítico")


class Settings(BaseSettings):
    # ===== ENTORNO =====
    environment: str = Field(default="development", env="ENVIRONMENT")
    debug: bool = Field(default=False, env="DEBUG")

    # ===== DATABASE =====
    database_url: str = Field(default="sqlite:///./data/inventario.db", env="DATABASE_URL")

    # ===== SECURITY =====
    # Solo se usa para leer la identidad del token (no se aplica autorización)
    secret_key: str = Field(
        default_factory=lambda: secrets.token_urlsafe(32),
        env="SECRET_KEY"
    )
    default_user_name: str = Field(default="Usuario", env="DEFAULT_USER_NAME")

    @field_validator("default_user_name", mode="after")
    @classmethod
    def empty_to_default(cls, v: str) -> str:
        return v.strip() if v and v.strip() else "Usuario"

    # ===== CORS =====
    allowed_origins: str = Field(
        default="http://localhost:5173,http://localhost:8080",
        env="ALLOWED_ORIGINS"
    )
    base_url: str = Field(default="http://localhost:8080", env="BASE_URL")

    # ===== INVENTARIO =====
    default_min_stock: int = Field(default=5, env="DEFAULT_MIN_STOCK")
    audit_pending_days: int = Field(default=30, env="AUDIT_PENDING_DAYS")

    # ===== STOCK BAJO =====
    # Estado para cantidad 0: el evaluador general usa "Agotado",
    # la verificación por transacción usa "Crítico".
    low_stock_zero_status_evaluator: str = Field(default="Agotado", env="LOW_STOCK_ZERO_STATUS_EVALUATOR")
    low_stock_zero_status_transaction: str = Field(default="Crítico", env="LOW_STOCK_ZERO_STATUS_TRANSACTION")
    low_stock_excess_factor: int = Field(default=3, env="LOW_STOCK_EXCESS_FACTOR")

    @field_validator("low_stock_zero_status_evaluator", "low_stock_zero_status_transaction", mode="after")
    @classmethod
    def validar_estado_cero(cls, v: str) -> str:
        v = v.strip()
        if v not in ESTADOS_STOCK_CERO:
            raise ValueError(f"Estado para stock cero inválido: {v}. Use uno de {ESTADOS_STOCK_CERO}")
        return v

    # ===== ALERTAS =====
    alerts_enabled: bool = Field(default=True, env="ALERTS_ENABLED")
    alert_service_url: str = Field(
        default="http://localhost:3001/api/low-stock/send-alert",
        env="ALERT_SERVICE_URL"
    )
    alert_timeout_seconds: float = Field(default=10.0, env="ALERT_TIMEOUT_SECONDS")
    alert_default_admin_email: str = Field(default="inventario@example.com", env="ALERT_DEFAULT_ADMIN_EMAIL")
    alert_default_admin_name: str = Field(default="Administrador", env="ALERT_DEFAULT_ADMIN_NAME")

    # ===== EMAIL (servicio de entrega de alertas) =====
    resend_api_key: str | None = Field(default=None, env="RESEND_API_KEY")
    resend_api_url: str = Field(default="https://api.resend.com/emails", env="RESEND_API_URL")
    email_from: str = Field(default="Inventario <onboarding@resend.dev>", env="EMAIL_FROM")

    # ===== LOGS =====
    log_dir: str = Field(default="logs", env="LOG_DIR")

    class Config:
        env_file = ".env"
        case_sensitive = False

    @model_validator(mode="after")
    def validate_secret_key(self):
        if self.environment == "production" and len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY debe tener al menos 32 caracteres en producción.")
        if self.low_stock_excess_factor < 1:
            raise ValueError("LOW_STOCK_EXCESS_FACTOR debe ser mayor o igual a 1.")
        return self

    @property
    def allowed_origins_list(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @property
    def log_path(self) -> Path:
        path = Path(self.log_dir)
        if path.is_absolute():
            return path
        return BASE_DIR / path


settings = Settings()
