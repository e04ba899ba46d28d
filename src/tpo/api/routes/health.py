from __future__ import annotations

from fastapi import APIRouter, Response, status

from tpo.infrastructure.cache.redis_client import ping_redis
from tpo.infrastructure.collaborators.http_client import get_collaborator_client

router = APIRouter()


def _collaborator_ready() -> bool:
    try:
        client = get_collaborator_client()
    except RuntimeError:
        return False
    return client.ping()


@router.get("/health/live")
def live() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/health/ready")
def ready(response: Response) -> dict[str, object]:
    redis_ready = ping_redis(timeout_seconds=1.0)
    collaborator_ready = _collaborator_ready()

    if redis_ready and collaborator_ready:
        return {"status": "ok"}

    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return {
        "status": "unavailable",
        "checks": {"redis": redis_ready, "collaborator": collaborator_ready},
    }
