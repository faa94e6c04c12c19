"""HTTP client for the classroom backend used by activity sessions."""

from __future__ import annotations

import logging
from typing import Any, Protocol, TypeVar

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from codelab.activity.config import ActivityConfig
from codelab.runner.libraries import LibraryInfo

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A collaborator request failed. ``message`` is safe to show to the user."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


# --- Payloads ---


class SubmitRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    code_base: str = Field(alias="codeBase")


class SaveProgressRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    project_title: str = Field(alias="projectTitle")
    code_base: str = Field(alias="codeBase")


class AnalyzeCodeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    code_base: str = Field(alias="codeBase")
    project_title: str = Field(alias="projectTitle")
    requirements: str | list[str] = ""
    language: str = "java"


class ApiResult(BaseModel):
    success: bool = True
    message: str = ""


class AnalyzeCodeResult(BaseModel):
    hint: str = ""


class ActivityBackend(Protocol):
    """The collaborator calls an activity session depends on."""

    async def submit_activity(self, activity_id: str, code: str) -> ApiResult: ...

    async def save_progress(self, project_title: str, code: str) -> ApiResult: ...

    async def analyze_code(
        self,
        code: str,
        project_title: str,
        requirements: str | list[str],
        language: str,
    ) -> str: ...


# --- Client ---


_M = TypeVar("_M", bound=BaseModel)


def _validate(model: type[_M], data: Any) -> _M:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.warning("Unexpected %s body: %s", model.__name__, e)
        raise ApiError("Unexpected response from server") from e


def _result(data: Any) -> ApiResult:
    """Validate a ``{success, message}`` body; ``success: false`` is an error."""
    result = _validate(ApiResult, data if isinstance(data, dict) else {})
    if not result.success:
        raise ApiError(result.message or "Request was not successful")
    return result


class ActivityClient:
    """Bearer-token client over ``httpx.AsyncClient``.

    Non-2xx responses and transport failures raise :class:`ApiError`, using
    the server's ``message`` field when it sends one.
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    @classmethod
    def from_config(
        cls, config: ActivityConfig, *, transport: httpx.AsyncBaseTransport | None = None
    ) -> ActivityClient:
        return cls(config.api_url, config.token, timeout=config.request_timeout, transport=transport)

    async def __aenter__(self) -> ActivityClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, payload: BaseModel | None = None) -> Any:
        body = payload.model_dump(by_alias=True) if payload is not None else None
        try:
            resp = await self._client.request(method, path, json=body)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise ApiError(f"Network error: {e}") from e

        try:
            data = resp.json()
        except ValueError:
            data = None

        if not resp.is_success:
            message = data.get("message") if isinstance(data, dict) else None
            logger.info("%s %s -> %d", method, path, resp.status_code)
            raise ApiError(message or f"Request failed with status {resp.status_code}", resp.status_code)
        return data

    async def submit_activity(self, activity_id: str, code: str) -> ApiResult:
        data = await self._request("POST", f"/activities/{activity_id}/submit", SubmitRequest(code_base=code))
        return _result(data)

    async def save_progress(self, project_title: str, code: str) -> ApiResult:
        payload = SaveProgressRequest(project_title=project_title, code_base=code)
        data = await self._request("POST", "/mini-projects/save-progress", payload)
        return _result(data)

    async def analyze_code(
        self,
        code: str,
        project_title: str,
        requirements: str | list[str],
        language: str,
    ) -> str:
        payload = AnalyzeCodeRequest(
            code_base=code,
            project_title=project_title,
            requirements=requirements,
            language=language,
        )
        data = await self._request("POST", "/mini-projects/analyze-code", payload)
        return _validate(AnalyzeCodeResult, data or {}).hint

    async def list_libraries(self) -> list[LibraryInfo]:
        data = await self._request("GET", "/compiler/libraries")
        raw = data.get("libraries", []) if isinstance(data, dict) else data or []
        if not isinstance(raw, list):
            raise ApiError("Unexpected response from server")
        return [_validate(LibraryInfo, item) for item in raw]
