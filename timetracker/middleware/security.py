"""
Security Middleware

Every API response depends on who is asking and on their role at that moment.
Those responses are marked uncacheable and vary on Authorization, so a browser
or proxy never serves a view rendered for an earlier role.
"""

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from timetracker.core.config import settings

API_PREFIX = "/api/"

STATIC_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
    "Content-Security-Policy": "default-src 'self'; frame-ancestors 'none';",
    "API-Version": "v1",
}

NO_STORE_HEADERS = {
    "Cache-Control": "no-store",
    "Pragma": "no-cache",
}


def append_vary(response: Response, header: str) -> None:
    current = response.headers.get("Vary")
    if not current:
        response.headers["Vary"] = header
    elif header.lower() not in {part.strip().lower() for part in current.split(",")}:
        response.headers["Vary"] = f"{current}, {header}"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        # Preflight responses are owned by CORSMiddleware
        if request.method == "OPTIONS":
            return await call_next(request)

        response = await call_next(request)
        response.headers.update(STATIC_HEADERS)
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        if request.url.path.startswith(API_PREFIX):
            response.headers.update(NO_STORE_HEADERS)
            append_vary(response, "Authorization")

        if "server" in response.headers:
            del response.headers["server"]
        return response
