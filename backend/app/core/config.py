# app/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from typing import List, Optional

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # —–– Fournisseur e-mail (Resend)
    RESEND_API_KEY: Optional[str] = None
    RESEND_API_URL: str = "https://api.resend.com/emails"
    MAIL_TIMEOUT_SECONDS: float = Field(10.0, gt=0)

    # —–– Adresses
    MAIL_FROM: Optional[str] = None   # ex: onboarding@resend.dev pour les tests
    MAIL_TO: Optional[str] = None     # boîte qui reçoit les notifications

    # —–– CORS (liste séparée par des virgules, vide = toutes origines)
    CORS_ORIGIN: Optional[str] = None

    # —–– Ingress
    MAX_BODY_BYTES: int = Field(100 * 1024, gt=0)
    ACCEPT_URLENCODED: bool = True
    TRUST_PROXY_HOPS: int = Field(1, ge=0)
    RATE_LIMIT: str = "30/minute"   # par IP, sur tout /api/

    # —–– Serveur
    PORT: int = 10000
    LOG_LEVEL: str = "INFO"

    def cors_list(self) -> List[str]:
        if not self.CORS_ORIGIN:
            return []
        return [origin.strip() for origin in self.CORS_ORIGIN.split(",") if origin.strip()]

    def missing_mail_settings(self) -> List[str]:
        names = ("RESEND_API_KEY", "MAIL_FROM", "MAIL_TO")
        return [name for name in names if not getattr(self, name)]


@lru_cache
def get_settings():
    return Settings()
