"""HTTP transport with bearer authentication and JSON decoding."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from shopsync._constants import USER_AGENT
from shopsync._redact import redact_for_log
from shopsync.config import ShopSyncConfig
from shopsync.exceptions import AccessForbiddenError, MalformedPayloadError, NetworkError

_logger = logging.getLogger(__name__)

Params = Mapping[str, str | int]


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpTransport`) concrete.
    """

    async def get_json(self, endpoint: str, params: Params, token: str) -> Any: ...

    async def put_json(self, endpoint: str, token: str, params: Params | None = None) -> Any: ...


class HttpTransport:
    """aiohttp-backed transport for the shop REST API."""

    def __init__(self, config: ShopSyncConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def get_json(self, endpoint: str, params: Params, token: str) -> Any:
        return await self._request("GET", endpoint, params, token)

    async def put_json(self, endpoint: str, token: str, params: Params | None = None) -> Any:
        return await self._request("PUT", endpoint, params, token)

    async def _request(self, method: str, endpoint: str, params: Params | None, token: str) -> Any:
        """Send one request and decode its JSON body.

        Raises
        ------
        NetworkError
            Connection failure, timeout, or a non-2xx status.
        MalformedPayloadError
            The body is not valid UTF-8 JSON.
        """
        headers: dict[str, str] = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        if token:
            headers["authorization"] = f"Bearer {token}"

        url = f"{self._config.base_url}{endpoint}"
        query = {k: str(v) for k, v in (params or {}).items()}
        _logger.debug("%s %s params=%s", method, url, redact_for_log(query))

        try:
            async with self._http.request(
                method,
                url,
                params=query,
                headers=headers,
                timeout=self._timeout,
            ) as resp:
                body_bytes = await resp.read()
                if resp.status == 403:
                    raise AccessForbiddenError(
                        f"HTTP 403 from {endpoint}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
                if not 200 <= resp.status < 300:
                    detail = body_bytes.decode("utf-8", errors="replace")
                    raise NetworkError(
                        f"HTTP {resp.status} from {endpoint}: {detail[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except NetworkError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise NetworkError(
                f"Request to {endpoint} failed: {exc!r}",
                endpoint=endpoint,
            ) from exc

        try:
            text = body_bytes.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedPayloadError(f"Body from {endpoint} is not UTF-8", endpoint=endpoint) from exc

        if not text.strip():
            return None

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            raise MalformedPayloadError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                endpoint=endpoint,
            ) from exc

        _logger.debug("%s %s -> %s", method, endpoint, redact_for_log(body, max_string=128))
        return body
