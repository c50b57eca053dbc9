# app/core/security.py
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

# En-têtes par défaut de helmet
SECURITY_HEADERS = {
    "Content-Security-Policy": (
        "default-src 'self';base-uri 'self';font-src 'self' https: data:;"
        "form-action 'self';frame-ancestors 'self';img-src 'self' data:;"
        "object-src 'none';script-src 'self';script-src-attr 'none';"
        "style-src 'self' https: 'unsafe-inline';upgrade-insecure-requests"
    ),
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Origin-Agent-Cluster": "?1",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Frame-Options": "SAMEORIGIN",
    "X-Permitted-Cross-Domain-Policies": "none",
    "X-XSS-Protection": "0",
}

STRIPPED_HEADERS = ("server", "x-powered-by")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name in STRIPPED_HEADERS:
            if name in response.headers:
                del response.headers[name]
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response


def payload_too_large() -> JSONResponse:
    return JSONResponse(status_code=413, content={"ok": False, "error": "PayloadTooLarge"})


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """
    Refuse les requêtes dont le Content-Length annoncé dépasse la limite.
    Les corps envoyés en chunked sont revérifiés à la lecture (services.intake).
    """

    def __init__(self, app: ASGIApp, max_bytes: int):
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(self, request: Request, call_next):
        declared = request.headers.get("content-length")
        if declared is not None:
            try:
                size = int(declared)
            except ValueError:
                return JSONResponse(status_code=400, content={"ok": False, "error": "InvalidBody"})
            if size > self.max_bytes:
                return payload_too_large()
        return await call_next(request)
