# src/flowscribe/engine/remote.py
"""HTTP-backed execution engine.

Talks to a plugin service that owns plugin storage and sandboxed execution:

    POST {base_url}/plugins/{slug}/execute
         {"bucket": ..., "interface": ..., "payload": {...}}  ->  {"code": "...", ...}
    GET  {base_url}/plugins/{slug}/manifest?bucket=...        ->  manifest JSON
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx
import structlog
from pydantic import ValidationError

from flowscribe.contracts import (
    ExecutionResult,
    PluginExecutionError,
    PluginManifest,
    PluginNotFoundError,
)

logger = structlog.get_logger(__name__)


class RemotePluginEngine:
    """Execution engine backed by an httpx.AsyncClient.

    Example:
        engine = RemotePluginEngine(
            base_url="https://plugins.example.com/v1",
            bucket="workflow-plugins",
            api_token="...",
            timeout_seconds=30.0,
        )
        result = await engine.get_execution_result("linear", {"inFeatures": 4}, "CodeGenerator")
        await engine.dispose()
    """

    def __init__(
        self,
        base_url: str,
        bucket: str,
        *,
        api_token: str | None = None,
        headers: dict[str, str] | None = None,
        timeout_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        debug: bool = False,
    ) -> None:
        """Initialize the remote engine.

        Args:
            base_url: Plugin service root URL
            bucket: Bucket name forwarded with every request
            api_token: Optional bearer token
            headers: Extra default headers
            timeout_seconds: Per-request timeout (None disables)
            transport: Custom transport (tests use httpx.MockTransport)
            debug: Log every request at debug level
        """
        request_headers = dict(headers or {})
        if api_token:
            request_headers["Authorization"] = f"Bearer {api_token}"
        self._bucket = bucket
        self._timeout_seconds = timeout_seconds
        self._debug = debug
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=request_headers,
            timeout=timeout_seconds,
            transport=transport,
        )

    @property
    def is_disposed(self) -> bool:
        return self._client.is_closed

    @staticmethod
    def _plugin_url(plugin_slug: str, action: str) -> str:
        return f"/plugins/{quote(plugin_slug, safe='')}/{action}"

    async def _request(self, plugin_slug: str, method: str, url: str, **kwargs: Any) -> Any:
        if self._debug:
            logger.debug("remote_plugin_request", slug=plugin_slug, method=method, url=url)
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise PluginExecutionError(
                f"Plugin '{plugin_slug}' timed out after {self._timeout_seconds}s",
                slug=plugin_slug,
            ) from e
        except httpx.HTTPError as e:
            raise PluginExecutionError(f"Plugin service unreachable for '{plugin_slug}': {e}", slug=plugin_slug) from e

        if response.status_code == 404:
            raise PluginNotFoundError(plugin_slug, self._bucket)
        if response.is_error:
            raise PluginExecutionError(
                f"Plugin service returned {response.status_code} for '{plugin_slug}': {response.text[:200]}",
                slug=plugin_slug,
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise PluginExecutionError(f"Plugin service returned non-JSON body for '{plugin_slug}'", slug=plugin_slug) from e

    async def get_execution_result(
        self,
        plugin_slug: str,
        payload: dict[str, Any],
        interface_name: str,
    ) -> ExecutionResult:
        body = await self._request(
            plugin_slug,
            "POST",
            self._plugin_url(plugin_slug, "execute"),
            json={"bucket": self._bucket, "interface": interface_name, "payload": payload},
        )
        try:
            return ExecutionResult.model_validate(body)
        except ValidationError as e:
            raise PluginExecutionError(f"Malformed execution result for '{plugin_slug}': {e}", slug=plugin_slug) from e

    async def get_plugin_manifest(self, plugin_slug: str) -> PluginManifest:
        body = await self._request(
            plugin_slug,
            "GET",
            self._plugin_url(plugin_slug, "manifest"),
            params={"bucket": self._bucket},
        )
        try:
            return PluginManifest.model_validate(body)
        except ValidationError as e:
            raise PluginExecutionError(f"Malformed manifest for '{plugin_slug}': {e}", slug=plugin_slug) from e

    async def dispose(self) -> None:
        await self._client.aclose()
        logger.debug("remote_engine_disposed", bucket=self._bucket)
