"""Automation client — request approvals and poll until a reviewer decides.

The server never blocks; waiting is a plain polling loop owned by the caller::

    async with ApprovalClient("http://127.0.0.1:8000") as client:
        approval_id = await client.request("Design", "design.md", "spec", "payments")
        report = await client.wait_for_resolution(approval_id, interval=2, timeout=600)
        if report["can_proceed"]:
            await client.delete(approval_id)
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class ApprovalClientError(Exception):
    def __init__(self, status_code: int, kind: str, detail: str):
        super().__init__(f"{status_code} {kind}: {detail}")
        self.status_code = status_code
        self.kind = kind
        self.detail = detail


class ApprovalClient:
    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8000",
        *,
        http: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ):
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def __aenter__(self) -> "ApprovalClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def _call(self, method: str, url: str, **kwargs: Any) -> Any:
        resp = await self._http.request(method, url, **kwargs)
        if resp.is_error:
            try:
                body = resp.json()
            except ValueError:
                body = {}
            raise ApprovalClientError(
                resp.status_code,
                body.get("error", "http_error"),
                str(body.get("detail", resp.text)),
            )
        return resp.json() if resp.content else None

    async def request(
        self,
        title: str,
        file_path: str,
        category: str,
        category_name: str,
        type: str = "document",
    ) -> str:
        data = await self._call(
            "POST",
            "/api/approvals/",
            json={
                "title": title,
                "file_path": file_path,
                "category": category,
                "category_name": category_name,
                "type": type,
            },
        )
        return data["approval_id"]

    async def status(self, approval_id: str) -> dict[str, Any]:
        return await self._call("GET", f"/api/approvals/{approval_id}/status")

    async def delete(self, approval_id: str) -> None:
        await self._call("DELETE", f"/api/approvals/{approval_id}")

    async def wait_for_resolution(
        self, approval_id: str, interval: float = 2.0, timeout: float | None = None
    ) -> dict[str, Any]:
        """Poll until the approval leaves ``pending``; raises ``TimeoutError`` past *timeout*."""
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            report = await self.status(approval_id)
            if report["status"] != "pending":
                return report
            if deadline is not None and time.monotonic() + interval > deadline:
                raise TimeoutError(f"Approval {approval_id} still pending after {timeout}s")
            logger.debug("Approval %s still pending; retrying in %.1fs", approval_id, interval)
            await asyncio.sleep(interval)
