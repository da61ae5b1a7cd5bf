"""
Script Store - Where scripts live and get compiled

ScriptStore is the collaborator the editor reads and writes through.
HiseScriptStore talks to a running HISE instance over its REST API.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any

import aiohttp

from ..models.script import ScriptError, ScriptFetchResult, ScriptWriteResult

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:1900"


class ScriptStoreError(Exception):
    """Raised when the store cannot be reached or rejects a request"""


class ScriptStore(ABC):
    """Fetch, write and recompile scripts"""

    @abstractmethod
    async def fetch(self, module_id: str, callback: str | None = None) -> ScriptFetchResult:
        ...

    @abstractmethod
    async def write(
        self,
        module_id: str,
        content: str,
        callback: str | None = None,
        compile: bool = True,
    ) -> ScriptWriteResult:
        ...

    @abstractmethod
    async def recompile(self, module_id: str) -> ScriptWriteResult:
        ...


def parse_errors(data: dict[str, Any]) -> list[ScriptError]:
    """Parse the runtime's error list"""
    return [
        ScriptError(
            error_message=error.get("errorMessage", ""),
            callstack=error.get("callstack") or [],
        )
        for error in data.get("errors") or []
    ]


class HiseScriptStore(ScriptStore):
    """ScriptStore backed by the HISE REST API"""

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        status_timeout: float = 3.0,
        script_timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.status_timeout = status_timeout
        self.script_timeout = script_timeout
        self._compile_timeout: float | None = None

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "HiseScriptStore":
        cfg = config.get("hise", {})
        timeouts = cfg.get("timeouts", {})
        return cls(
            base_url=cfg.get("apiUrl", DEFAULT_API_URL),
            status_timeout=float(timeouts.get("status", 3.0)),
            script_timeout=float(timeouts.get("script", 30.0)),
        )

    @property
    def compile_timeout(self) -> float:
        """Timeout for compile-bound calls; the runtime's own setting wins once known"""
        return self._compile_timeout or self.script_timeout

    # ========== HTTP Helpers ==========

    @asynccontextmanager
    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, str] | None = None,
        payload: dict[str, Any] | None = None,
        timeout_seconds: float = 3.0,
    ):
        """Context manager for HTTP requests with automatic session cleanup"""
        url = f"{self.base_url}{path}"
        timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.request(method, url, params=params, json=payload) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        logger.error("[HiseScriptStore] API error (%s): %s", response.status, error_text)
                        raise ScriptStoreError(f"HISE API error ({response.status}): {error_text}")
                    yield response
        except asyncio.TimeoutError:
            raise ScriptStoreError(f"HISE API timeout after {timeout_seconds}s") from None
        except aiohttp.ClientConnectionError as e:
            raise ScriptStoreError(
                f"Cannot connect to HISE at {self.base_url}. "
                "Ensure HISE is running with the REST API enabled."
            ) from e

    async def _request_json(
        self,
        method: str,
        path: str,
        params: dict[str, str] | None = None,
        payload: dict[str, Any] | None = None,
        timeout_seconds: float = 3.0,
    ) -> dict[str, Any]:
        """Make request and return JSON response"""
        try:
            async with self._request(method, path, params, payload, timeout_seconds) as response:
                data = await response.json(content_type=None)
        except ValueError as e:
            raise ScriptStoreError(f"Invalid JSON from HISE at {path}: {e}") from e
        except aiohttp.ClientError as e:
            raise ScriptStoreError(f"HISE API request to {path} failed: {e}") from e
        if not isinstance(data, dict):
            raise ScriptStoreError(f"Unexpected response from HISE at {path}: {data!r}")
        return data

    # ========== Runtime Status ==========

    async def is_available(self) -> bool:
        """Check if HISE is responding"""
        try:
            await self._request_json("GET", "/api/status", timeout_seconds=self.status_timeout)
        except ScriptStoreError:
            return False
        return True

    async def get_status(self) -> dict[str, Any]:
        """Get runtime status and remember its compile timeout"""
        status = await self._request_json("GET", "/api/status", timeout_seconds=self.status_timeout)

        compile_timeout = (status.get("server") or {}).get("compileTimeout")
        if status.get("success") and compile_timeout:
            try:
                seconds = float(compile_timeout)
            except (TypeError, ValueError):
                seconds = 0
            if seconds > 0:
                self._compile_timeout = seconds
        return status

    # ========== ScriptStore ==========

    async def fetch(self, module_id: str, callback: str | None = None) -> ScriptFetchResult:
        params = {"moduleId": module_id}
        if callback:
            params["callback"] = callback

        data = await self._request_json(
            "GET", "/api/get_script", params=params, timeout_seconds=self.compile_timeout
        )
        return ScriptFetchResult(
            success=bool(data.get("success")),
            module_id=data.get("moduleId", module_id),
            callback=data.get("callback", callback),
            script=data.get("script") or "",
            logs=data.get("logs") or [],
            errors=parse_errors(data),
        )

    async def write(
        self,
        module_id: str,
        content: str,
        callback: str | None = None,
        compile: bool = True,
    ) -> ScriptWriteResult:
        payload = {"moduleId": module_id, "script": content, "compile": compile}
        if callback:
            payload["callback"] = callback

        logger.info("[HiseScriptStore] Writing %s%s", module_id, f".{callback}" if callback else "")
        data = await self._request_json(
            "POST", "/api/set_script", payload=payload, timeout_seconds=self.compile_timeout
        )
        return self._parse_write(data)

    async def recompile(self, module_id: str) -> ScriptWriteResult:
        data = await self._request_json(
            "POST", "/api/recompile", payload={"moduleId": module_id}, timeout_seconds=self.compile_timeout
        )
        return self._parse_write(data)

    def _parse_write(self, data: dict[str, Any]) -> ScriptWriteResult:
        return ScriptWriteResult(
            success=bool(data.get("success")),
            result=data.get("result"),
            logs=data.get("logs") or [],
            errors=parse_errors(data),
        )
