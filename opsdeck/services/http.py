from __future__ import annotations

import logging
import time
from typing import Any, Mapping

import httpx

from opsdeck.core.config import Settings, get_settings
from opsdeck.core.errors import ApiError, ApiTransportError
from opsdeck.services.telemetry import record_api_call


logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
    # Prefer the API's error envelope message over the bare reason phrase.
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
        if payload.get("message"):
            return str(payload["message"])
    return response.reason_phrase


def _clean_params(params: Mapping[str, Any] | None) -> dict[str, Any] | None:
    # Only set filters reach the query string.
    if not params:
        return None
    cleaned = {key: value for key, value in params.items() if value is not None and value != ""}
    return cleaned or None


class ApiHttpClient:
    """Thin async JSON client for the monitoring REST API.

    Responses are returned as decoded JSON. HTTP error statuses raise
    ``ApiError``; network failures and timeouts raise ``ApiTransportError``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        timeout_s: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout_s,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "ApiHttpClient":
        settings = settings or get_settings()
        return cls(
            settings.api_base_url,
            token=settings.api_token,
            timeout_s=settings.http_timeout_ms / 1000.0,
            transport=transport,
        )

    async def __aenter__(self) -> "ApiHttpClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any | None = None,
    ) -> Any:
        start = time.monotonic()
        try:
            response = await self._client.request(
                method,
                path,
                params=_clean_params(params),
                json=json,
            )
        except httpx.HTTPError as exc:
            record_api_call(
                method=method,
                path=path,
                status_code=None,
                latency_ms=(time.monotonic() - start) * 1000.0,
            )
            logger.warning("api_transport_error method=%s path=%s", method, path, exc_info=exc)
            raise ApiTransportError(f"{method} {path} failed: {exc}") from exc

        record_api_call(
            method=method,
            path=path,
            status_code=response.status_code,
            latency_ms=(time.monotonic() - start) * 1000.0,
        )
        if response.status_code >= 400:
            message = _error_message(response)
            logger.info("api_error method=%s path=%s status=%s", method, path, response.status_code)
            payload: Any | None
            try:
                payload = response.json()
            except ValueError:
                payload = None
            raise ApiError(response.status_code, message, payload)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    async def get(self, path: str, *, params: Mapping[str, Any] | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Any | None = None) -> Any:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: Any | None = None) -> Any:
        return await self.request("PUT", path, json=json)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)
