# app/core/ratelimit.py
import math
import time

from fastapi import Request
from fastapi.responses import JSONResponse
from limits import parse
from slowapi import Limiter
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from app.core.logging import logger


def client_ip(request: Request) -> str:
    """
    Adresse du client pour le rate limiting.
    On fait confiance à TRUST_PROXY_HOPS proxys : X-Forwarded-For est lu de
    droite à gauche, le dernier saut étant l'adresse du socket.
    """
    peer = request.client.host if request.client else "127.0.0.1"
    settings = getattr(request.app.state, "settings", None)
    hops = settings.TRUST_PROXY_HOPS if settings else 0
    if not hops:
        return peer

    forwarded = [h.strip() for h in request.headers.get("x-forwarded-for", "").split(",") if h.strip()]
    chain = forwarded + [peer]
    return chain[max(len(chain) - 1 - hops, 0)]


# Stockage mémoire, fenêtre fixe
limiter = Limiter(key_func=client_ip, strategy="fixed-window", headers_enabled=False)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Compte toutes les requêtes dont le chemin commence par `prefix`, qu'une
    route existe ou non. En-têtes RateLimit-* (draft IETF) : Reset est un
    nombre de secondes, pas un timestamp.
    """

    def __init__(self, app: ASGIApp, limit: str, prefix: str = "/api/", scope: str = "api"):
        super().__init__(app)
        self.item = parse(limit)
        self.prefix = prefix
        self.scope = scope

    def _headers(self, key: str) -> dict:
        reset_at, remaining = limiter.limiter.get_window_stats(self.item, self.scope, key)
        return {
            "RateLimit-Policy": f"{self.item.amount};w={self.item.get_expiry()}",
            "RateLimit-Limit": str(self.item.amount),
            "RateLimit-Remaining": str(max(remaining, 0)),
            "RateLimit-Reset": str(max(math.ceil(reset_at - time.time()), 0)),
        }

    async def dispatch(self, request: Request, call_next):
        if not request.url.path.startswith(self.prefix):
            return await call_next(request)

        key = client_ip(request)
        allowed = limiter.limiter.hit(self.item, self.scope, key)
        headers = self._headers(key)

        if not allowed:
            logger.info("Rate limit exceeded", client=key, path=request.url.path)
            headers["Retry-After"] = headers["RateLimit-Reset"]
            return JSONResponse(
                status_code=429,
                content={"ok": False, "error": "RateLimitExceeded"},
                headers=headers,
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response
