"""
Curriculum Manager - REST API Client
Async client for the curriculum REST API, used by the remote store.
"""
import logging
from typing import Any

import httpx

from curriculum_manager.core.config import settings
from curriculum_manager.schemas.curriculum import (
    CurriculumData,
    CurriculumUpload,
    ParsedCurriculum,
    UploadResponse,
)

logger = logging.getLogger(__name__)

# REST collection per entity kind
RESOURCES = {
    "curriculum": "curriculums",
    "grade": "grades",
    "book": "books",
    "unit": "units",
    "lesson": "lessons",
    "stage": "stages",
    "activity": "activities",
    "standard": "standards",
    "standard_code": "standard-codes",
    "activity_type": "activity-types",
}


class ApiError(Exception):
    """
    API call failed.

    ``status`` is the HTTP status code, or 0 when the server could not be
    reached at all.
    """

    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status
        self.message = message


class CurriculumApiClient:
    """Thin wrapper over the curriculum endpoints."""

    def __init__(
        self,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=(base_url or settings.API_BASE_URL).rstrip("/"),
            transport=transport,
            timeout=timeout or settings.API_TIMEOUT_SECONDS,
            headers={"Content-Type": "application/json"},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "CurriculumApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(self, method: str, endpoint: str, json: Any = None) -> Any:
        """
        Send a request and decode the JSON body.

        Raises:
            ApiError: On connectivity failures and non-2xx responses
        """
        try:
            response = await self._client.request(method, endpoint, json=json)
        except httpx.HTTPError as e:
            raise ApiError(0, str(e) or "Network error") from e

        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = {}
            message = None
            if isinstance(body, dict):
                message = body.get("detail") or body.get("error")
            if not isinstance(message, str):
                message = f"HTTP {response.status_code}"
            raise ApiError(response.status_code, message)

        try:
            return response.json()
        except ValueError as e:
            raise ApiError(response.status_code, "Invalid JSON response") from e

    async def check_health(self) -> dict[str, Any]:
        return await self._request("GET", "/health")

    async def get_curriculums(self) -> CurriculumData:
        return CurriculumData.model_validate(await self._request("GET", "/curriculums"))

    async def create(self, kind: str, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", f"/{RESOURCES[kind]}", json=payload)

    async def update(self, kind: str, node_id: str, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._request("PUT", f"/{RESOURCES[kind]}/{node_id}", json=payload)

    async def delete(self, kind: str, node_id: str) -> dict[str, Any]:
        return await self._request("DELETE", f"/{RESOURCES[kind]}/{node_id}")

    async def upload_curriculums(self, curriculums: list[ParsedCurriculum]) -> UploadResponse:
        payload = CurriculumUpload(curriculums=curriculums).model_dump(mode="json", by_alias=True)
        return UploadResponse.model_validate(
            await self._request("POST", "/curriculum/upload", json=payload)
        )
