"""
Shared HTTP plumbing for the remote collaborators.

ApiClient wraps a requests.Session: base URL, bounded timeout, status check,
and envelope validation. Every failure surfaces as RemoteError so callers
only need one except clause.
"""

import logging
from typing import Any, Optional, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from coursereader.config import DEFAULT_REQUEST_TIMEOUT
from coursereader.schemas import ApiResponse

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class RemoteError(Exception):
    """A remote call failed (network, timeout, HTTP status, or payload shape)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ApiClient:
    """
    Minimal JSON API client.

    Usage::

        api = ApiClient("http://localhost:5000/api", timeout=10)
        data = api.get("/courses/abc/progress")      # envelope `data` dict
        api.post("/courses/abc/bookmark", {"topicId": "t1", "imageIndex": 3})
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def request(self, method: str, path: str, payload: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Send a request and return the envelope's `data` member ({} if absent).

        Raises:
            RemoteError: On any transport, HTTP, or envelope failure
        """
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            status = e.response.status_code if e.response is not None else None
            raise RemoteError(f"{method} {path} failed: {e}", status_code=status) from e

        try:
            body = response.json()
        except ValueError as e:
            raise RemoteError(f"{method} {path} returned invalid JSON: {e}") from e

        try:
            envelope = ApiResponse.model_validate(body)
        except ValidationError as e:
            raise RemoteError(f"{method} {path} returned an unexpected envelope: {e}") from e

        if not envelope.success:
            raise RemoteError(
                f"{method} {path} was rejected: {envelope.message or envelope.error or 'no message'}",
                status_code=response.status_code,
            )
        return envelope.data or {}

    def get(self, path: str) -> dict[str, Any]:
        return self.request("GET", path)

    def post(self, path: str, payload: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        return self.request("POST", path, payload)

    @staticmethod
    def parse(model: type[M], data: dict[str, Any]) -> M:
        """Narrow an envelope `data` dict to a schema, raising RemoteError on mismatch."""
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise RemoteError(f"Unexpected {model.__name__} payload: {e}") from e
