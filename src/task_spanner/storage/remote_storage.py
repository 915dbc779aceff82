# src/task_spanner/storage/remote_storage.py

from __future__ import annotations

"""
HTTP task storage.

Each operation is one request against a fixed base URL; the server applies
the mutation itself. Every response is an envelope:

    {"code": 0, "msg": "...", "data": ...}

- non-2xx status / connection error / timeout -> RemoteTransportError
- code != 0                                   -> RemoteAppError(code, msg)
"""

import logging
from typing import Any

import httpx

from ..core.errors import RemoteAppError, RemoteTransportError
from ..tasks.task_models import (
    Forest,
    TaskMode,
    TaskNode,
    TaskPatch,
    forest_from_list,
    forest_to_list,
    node_from_dict,
    node_to_dict,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:7021"
DEFAULT_TIMEOUT = 10.0

API_LIST_TASKS = "/api/listTasks"
API_ADD_TASK = "/api/addTask"
API_UPDATE_TASK = "/api/updateTask"
API_REMOVE_TASK = "/api/removeTask"
API_EXCHANGE_ORDER = "/api/exchangeOrder"
API_ADD_TASK_NOTE = "/api/addTaskNote"
API_UPDATE_TASK_NOTE = "/api/updateTaskNote"
API_SAVE_TASKS = "/api/saveTasks"


class RemoteTaskStorage:
    """TaskStorage over the JSON/HTTP task server."""

    name = "remote"

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )
        logger.info("RemoteTaskStorage ready base_url=%s", self._base_url)

    def describe(self) -> str:
        return f"remote:{self._base_url}"

    async def _request(
        self,
        method: str,
        api: str,
        *,
        params: dict[str, str] | None = None,
        body: Any = None,
    ) -> Any:
        logger.debug("Remote request %s %s params=%s", method, api, params)
        try:
            resp = await self._client.request(method, api, params=params, json=body)
        except httpx.HTTPError as e:
            raise RemoteTransportError(f"{method} {api} failed: {e.__class__.__name__}: {e}") from e

        if not resp.is_success:
            logger.warning("Remote %s %s -> HTTP %s body=%s", method, api, resp.status_code, resp.text[:500])
            raise RemoteTransportError(
                f"{method} {api} returned HTTP {resp.status_code}",
                status_code=resp.status_code,
            )

        try:
            envelope = resp.json()
        except ValueError as e:
            logger.warning("Remote %s %s: undecodable body=%s", method, api, resp.text[:500])
            raise RemoteTransportError(f"{method} {api} returned a non-JSON body") from e

        code = envelope.get("code") if isinstance(envelope, dict) else None
        if isinstance(code, bool) or not isinstance(code, int):
            raise RemoteTransportError(f"{method} {api} returned no response envelope")

        if code != 0:
            msg = envelope.get("msg")
            logger.info("Remote %s %s -> code=%s msg=%s", method, api, code, msg)
            raise RemoteAppError(code, msg if isinstance(msg, str) else None)

        return envelope.get("data")

    # ---- TaskStorage ----

    async def load(self, mode: TaskMode | None = None) -> Forest:
        params = {"mode": mode.to_wire()} if mode is not None else None
        data = await self._request("GET", API_LIST_TASKS, params=params)
        return forest_from_list(data if data is not None else [])

    async def save(self, forest: Forest) -> None:
        await self._request("POST", API_SAVE_TASKS, body=forest_to_list(forest))

    async def add(self, node: TaskNode) -> TaskNode:
        data = await self._request("POST", API_ADD_TASK, body=node_to_dict(node))
        return node_from_dict(data)

    async def update(self, task_id: int, patch: TaskPatch) -> None:
        await self._request("POST", API_UPDATE_TASK, body={"taskID": task_id, "update": patch.to_dict()})

    async def remove(self, task_id: int) -> None:
        await self._request("POST", API_REMOVE_TASK, body={"taskID": task_id})

    async def exchange_order(self, a_id: int, b_id: int) -> None:
        await self._request("POST", API_EXCHANGE_ORDER, body={"taskID": a_id, "exchangeTaskID": b_id})

    async def add_note(self, task_id: int, text: str) -> None:
        await self._request("POST", API_ADD_TASK_NOTE, body={"taskID": task_id, "note": text})

    async def update_note(self, task_id: int, index: int, text: str) -> None:
        await self._request(
            "POST",
            API_UPDATE_TASK_NOTE,
            body={"taskID": task_id, "noteIndex": index, "newText": text},
        )

    async def close(self) -> None:
        await self._client.aclose()
