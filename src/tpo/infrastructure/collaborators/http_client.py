from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

import requests

from tpo.application.ports.collaborators import CollaboratorUnavailableError
from tpo.infrastructure import settings

logger = logging.getLogger(__name__)


class HttpCollaboratorClient:
    """Thin ``requests`` wrapper for the ordering backend's ``{success, data}`` API.

    ``request`` returns the unwrapped ``data`` member. A 404 on a GET yields ``None``; timeouts,
    connection failures, other HTTP errors, non-JSON bodies and ``success: false``
    envelopes all raise ``CollaboratorUnavailableError``.
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout_seconds: float = settings.DEFAULT_COLLABORATOR_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/json"})
        if token:
            self._session.headers.update({"Authorization": f"Bearer {token}"})

    def request(
        self,
        method: str,
        path: str,
        operation: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        url = f"{self._base_url}/{path.lstrip('/')}"
        try:
            response = self._session.request(
                method,
                url,
                params=params,
                json=json,
                timeout=self._timeout_seconds,
            )
        except requests.exceptions.Timeout as exc:
            raise CollaboratorUnavailableError(f"{operation} timed out", operation) from exc
        except requests.exceptions.RequestException as exc:
            raise CollaboratorUnavailableError(f"{operation} failed: {exc}", operation) from exc

        if response.status_code == 404 and method.upper() == "GET":
            return None
        try:
            response.raise_for_status()
            body = response.json()
        except requests.exceptions.HTTPError as exc:
            raise CollaboratorUnavailableError(
                f"{operation} returned HTTP {response.status_code}",
                operation,
            ) from exc
        except ValueError as exc:
            raise CollaboratorUnavailableError(f"{operation} returned a non-JSON body", operation) from exc

        if not isinstance(body, dict):
            return body
        if body.get("success") is False:
            message = body.get("message") or "request rejected"
            raise CollaboratorUnavailableError(f"{operation} rejected: {message}", operation)
        return body.get("data")

    def ping(self) -> bool:
        try:
            self.request("GET", "/business-rules", "ping")
        except CollaboratorUnavailableError:
            logger.warning("collaborator_ping_failed", extra={"operation": "ping"})
            return False
        return True


@lru_cache(maxsize=1)
def get_collaborator_client() -> HttpCollaboratorClient:
    return HttpCollaboratorClient(
        base_url=settings.collaborator_api_url(),
        token=settings.collaborator_api_token(),
        timeout_seconds=settings.collaborator_timeout_seconds(),
    )
