"""Rate limiting for the broker API.

Credential routes are limited per workload: the key is the `sub` claim of the
bearer token. Requests without a usable token, such as `/health` and
`/version`, fall back to the client address.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from infrastructure.security.jwt import get_subject_from_token


def workload_key_func(request: Request) -> str:
    """Rate-limit key for a request.

    The token dependency runs before the limit is checked on credential
    routes, so a subject used there has already been verified.
    """
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        subject = get_subject_from_token(token.strip())
        if subject:
            return f"subject:{subject}"
    return get_remote_address(request)


limiter = Limiter(key_func=workload_key_func)


async def rate_limit_handler(_request: Request, exc: Exception):
    """Answer a RateLimitExceeded with a 429 and a short message."""
    if isinstance(exc, RateLimitExceeded):
        return JSONResponse(
            status_code=429,
            content={"message": "Rate limit exceeded"},
        )


def setup_rate_limiter(app: FastAPI):
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)


def get_limiter() -> Limiter:
    return limiter
