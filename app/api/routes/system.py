from fastapi import APIRouter, Request

from api.dependencies.rate_limits import get_limiter
from infrastructure.services.dependencies import SettingsDep

router = APIRouter(tags=["System"])
limiter = get_limiter()


# Kubernetes probes hit these every few seconds, so the limit is generous
@router.get("/version")
@limiter.limit("50/minute")
def get_version(request: Request, settings: SettingsDep):  # pylint: disable=unused-argument
    """Get the version of the application."""
    return {"version": settings.GIT_SHA}


@router.get("/health")
@limiter.limit("50/minute")
def get_health(request: Request):  # pylint: disable=unused-argument
    """Healthcheck endpoint."""
    return {"status": "ok"}
