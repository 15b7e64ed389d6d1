"""CORS headers added to every response of the log server."""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

# Credentials are advertised next to a wildcard origin. Browsers refuse
# credentialed requests against "*", which is fine: the API has no auth and
# sets no cookies, so plain cross-origin reads are all a viewer needs.
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, GET, PATCH, OPTIONS, DELETE",
    "Access-Control-Allow-Headers": "*",
    "Access-Control-Allow-Credentials": "true",
}


def is_preflight(request: Request) -> bool:
    return request.method == "OPTIONS" and "access-control-request-method" in request.headers


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """Add the CORS headers to every routed response, keeping the route's status code.

    Preflight requests are answered here with 204. Responses produced outside
    the app's middleware stack get no headers: uvicorn's own 400 for requests
    it cannot parse, and the 500 from Starlette's ServerErrorMiddleware.
    """

    async def dispatch(self, request: Request, call_next):
        if is_preflight(request):
            return Response(status_code=204, headers=CORS_HEADERS)
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response
