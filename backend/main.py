from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import form, health
from app.core.config import Settings, get_settings
from app.core.logging import setup_logging, logger, CorrelationIdMiddleware
from app.core.ratelimit import RateLimitMiddleware
from app.core.security import BodySizeLimitMiddleware, SecurityHeadersMiddleware
from app.services.mailer import EmailSender, ResendMailer


def create_app(settings: Optional[Settings] = None, mailer: Optional[EmailSender] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)

    missing = settings.missing_mail_settings()
    if missing:
        # on démarre quand même : les envois échoueront à la requête
        logger.warning("Missing mail settings", missing=missing)

    app = FastAPI(
        title="Form Intake API",
        description="Reçoit les soumissions de formulaire et envoie notification + accusé de réception",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.mailer = mailer or ResendMailer.from_settings(settings)

    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.MAX_BODY_BYTES)
    app.add_middleware(RateLimitMiddleware, limit=settings.RATE_LIMIT)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_list() or ["*"],
        allow_credentials=False,
        allow_methods=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"],
        allow_headers=["*"],
    )
    app.add_middleware(CorrelationIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    # Include routers
    app.include_router(health.router, tags=["health"])
    app.include_router(form.router, prefix="/api/form", tags=["form"])
    return app


app = create_app()


if __name__ == "__main__":
    settings = get_settings()
    logger.info("Server starting", port=settings.PORT)
    # X-Forwarded-For est interprété par app.core.ratelimit.client_ip
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT, proxy_headers=False, server_header=False)
