"""Permissive cross-origin headers for the HTTP trigger."""

from fastapi import Request
from fastapi.responses import Response
from starlette.middleware.base import BaseHTTPMiddleware

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """Answer pre-flight requests and add CORS headers to every response."""

    async def dispatch(self, request: Request, call_next):
        # Pre-flight: empty 200 on any path
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)

        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response
