"""
HTTP client for the task store API, used by the board engine.
"""

import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

import httpx
from pydantic import ValidationError

from taskboard.core.config import settings
from taskboard.core.enums import TaskStatus
from taskboard.schemas.task import TaskCreate, TaskRead, TaskUpdate

logger = logging.getLogger(__name__)


class TaskStoreError(Exception):
    """
    A task store call failed.

    code follows the server's error codes (forbidden, not_found, ...);
    transport failures use "internal" with no status code.
    """

    def __init__(self, message: str, code: str = "internal", status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code

    @property
    def is_forbidden(self) -> bool:
        return self.code == "forbidden"


def _error_from_response(response: httpx.Response) -> TaskStoreError:
    code = "internal"
    message = f"Request failed with status {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        code = body["error"].get("code", code)
        message = body["error"].get("message", message)
    return TaskStoreError(message, code=code, status_code=response.status_code)


def _task_from(body: Any) -> TaskRead:
    try:
        return TaskRead.model_validate(body)
    except ValidationError as exc:
        logger.warning("Malformed task in task store response: %s", exc)
        raise TaskStoreError("The task store sent a malformed task") from exc


class TaskStoreClient:
    """
    Async client for the /tasks endpoints.

    Pass an existing httpx.AsyncClient to share a connection pool or to talk
    to an in-process app; otherwise one is created for base_url (and
    transport, when given).
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token = token
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            base_url=base_url or settings.BOARD_API_URL,
            timeout=timeout or settings.BOARD_REQUEST_TIMEOUT,
            transport=transport,
        )

    async def __aenter__(self) -> "TaskStoreClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    def _headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    async def _request(self, method: str, path: str, json: Any = None) -> Any:
        try:
            response = await self._http.request(method, path, json=json, headers=self._headers())
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise TaskStoreError(f"Could not reach the task store: {exc}") from exc

        if response.is_error:
            error = _error_from_response(response)
            logger.info("%s %s -> %s %s", method, path, response.status_code, error.code)
            raise error
        try:
            return response.json()
        except ValueError as exc:
            logger.warning("%s %s returned a body that is not JSON", method, path)
            raise TaskStoreError(
                "The task store sent an unreadable response", status_code=response.status_code
            ) from exc

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        """Log in and keep the bearer token for later calls."""
        body = await self._request("POST", "/auth/login", json={"email": email, "password": password})
        try:
            self.token = body["access_token"]
            return body["user"]
        except (KeyError, TypeError) as exc:
            raise TaskStoreError("The task store sent an unexpected login response") from exc

    async def list_tasks(self) -> List[TaskRead]:
        body = await self._request("GET", "/tasks")
        if not isinstance(body, list):
            raise TaskStoreError("The task store sent an unexpected task list")
        return [_task_from(item) for item in body]

    async def create_task(self, data: TaskCreate) -> TaskRead:
        body = await self._request("POST", "/tasks", json=data.model_dump(mode="json"))
        return _task_from(body)

    async def update_task(self, task_id: UUID, data: TaskUpdate) -> TaskRead:
        """Partial field update (PUT). Only fields set on data are sent."""
        payload = data.model_dump(mode="json", exclude_unset=True)
        body = await self._request("PUT", f"/tasks/{task_id}", json=payload)
        return _task_from(body)

    async def move_task(self, task_id: UUID, status: TaskStatus) -> TaskRead:
        """Status-only move (PATCH)."""
        body = await self._request("PATCH", f"/tasks/{task_id}", json={"status": TaskStatus(status).value})
        return _task_from(body)

    async def delete_task(self, task_id: UUID) -> None:
        await self._request("DELETE", f"/tasks/{task_id}")
