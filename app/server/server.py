import re
import uuid

from fastapi import FastAPI, Request

from api.dependencies.rate_limits import setup_rate_limiter
from api.router import api_router
from infrastructure.logging import bind_request_context
from server.lifespan import lifespan

CORRELATION_HEADER = "X-Correlation-ID"
_CORRELATION_PATTERN = re.compile(r"[A-Za-z0-9._-]{1,128}")


handler = FastAPI(title="Tenant Credential Broker", lifespan=lifespan)
setup_rate_limiter(handler)


@handler.middleware("http")
async def correlation_id_middleware(request: Request, call_next):
    """Bind a correlation id to every log line emitted for this request."""
    correlation_id = request.headers.get(CORRELATION_HEADER, "")
    if not _CORRELATION_PATTERN.fullmatch(correlation_id):
        correlation_id = str(uuid.uuid4())

    with bind_request_context(
        correlation_id=correlation_id,
        request_path=request.url.path,
        request_method=request.method,
    ):
        response = await call_next(request)

    response.headers[CORRELATION_HEADER] = correlation_id
    return response


handler.include_router(api_router)
