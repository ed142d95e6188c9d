from __future__ import annotations

import json
import logging
from typing import Any, Protocol

import httpx

from fwupload.config import Settings
from fwupload.errors import RequestError
from fwupload.logging_context import run_id_var


log = logging.getLogger(__name__)


class TokenSource(Protocol):
    def get(self) -> str | None: ...


class ApiClient:
    """
    JSON-over-HTTP client for the firmware backend.

    Attaches the bearer token when one is stored and lets the server decide what
    an unauthenticated request may do. Never caches, never retries.
    """

    def __init__(
        self,
        settings: Settings,
        credentials: TokenSource,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings
        self.credentials = credentials
        self._transport = transport

    async def get(self, path: str) -> Any | None:
        resp = await self._send("GET", path)
        if resp.status_code == 204:
            return None
        return self._parse(resp)

    async def post(self, path: str, body: Any) -> Any:
        resp = await self._send("POST", path, content=json.dumps(body))
        return self._parse(resp)

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        token = self.credentials.get()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        rid = run_id_var.get()
        if rid:
            headers["X-Request-ID"] = rid
        return headers

    async def _send(self, method: str, path: str, content: str | None = None) -> httpx.Response:
        url = self.settings.api_url(path)
        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=float(self.settings.request_timeout_s),
            ) as client:
                resp = await client.request(method, url, headers=self._headers(), content=content)
        except httpx.TransportError as e:
            log.warning("%s %s failed before a response: %s", method, path, e)
            raise RequestError(None, f"Request failed: {e}") from e

        log.debug("%s %s -> %s", method, path, resp.status_code)
        if not resp.is_success:
            raise RequestError(resp.status_code, resp.text)
        return resp

    @staticmethod
    def _parse(resp: httpx.Response) -> Any | None:
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise RequestError(resp.status_code, f"Invalid JSON in response: {resp.text[:200]}") from e
