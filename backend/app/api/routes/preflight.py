"""CORS Preflight — explicit OPTIONS answers for the browser-facing endpoints.

Invariants:
    - OPTIONS returns an empty 200 with permissive CORS headers, never auth-checked
    - The header set is identical for every endpoint that registers it
    - Browser preflights (Origin + Access-Control-Request-Method) on PREFLIGHT_PATHS
      reach the route handler; CORSMiddleware answers every other path

Design Decisions:
    - Subclass CORSMiddleware instead of replacing it: simple requests on every
      path still get Starlette's origin checks and response headers
"""

from fastapi import Response, status
from fastapi.middleware.cors import CORSMiddleware

PREFLIGHT_PATHS = frozenset({
    "/api/v1/generate-sheet",
    "/api/v1/activate-vip",
})

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": ", ".join((
        "authorization",
        "x-client-info",
        "apikey",
        "content-type",
        "x-supabase-client-platform",
        "x-supabase-client-platform-version",
        "x-supabase-client-runtime",
        "x-supabase-client-runtime-version",
    )),
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


def preflight_response() -> Response:
    return Response(status_code=status.HTTP_200_OK, headers=CORS_HEADERS)


class EndpointPreflightCORSMiddleware(CORSMiddleware):
    """CORSMiddleware that leaves OPTIONS on `preflight_paths` to the routes."""

    def __init__(
        self, app, preflight_paths=PREFLIGHT_PATHS, **kwargs,
    ) -> None:
        super().__init__(app, **kwargs)
        self.preflight_paths = frozenset(preflight_paths)

    async def __call__(self, scope, receive, send) -> None:
        if (
            scope["type"] == "http"
            and scope["method"] == "OPTIONS"
            and scope["path"] in self.preflight_paths
        ):
            await self.app(scope, receive, send)
            return
        await super().__call__(scope, receive, send)
