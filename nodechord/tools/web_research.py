"""Web-research backend using the Firecrawl v2 REST API."""

from __future__ import annotations

import asyncio
from typing import Any

import httpx

from nodechord.errors.exceptions import ToolServerError
from nodechord.logging import get_logger

DEFAULT_BASE_URL = "https://api.firecrawl.dev"
ACTIONS = ("scrape", "search", "map", "crawl")


class FirecrawlBackend:
    """Scrape, search, map and crawl through Firecrawl.

    Each method returns the payload with Firecrawl's ``success``/``data``
    wrapper removed: scrape returns the document, search returns
    ``{"web": [...]}``, map returns ``{"links": [...]}`` and crawl returns the
    final job status with its pages under ``data``.

    Example:
        >>> backend = FirecrawlBackend(api_key="fc-...")
        >>> doc = await backend.scrape("https://example.com", formats=["markdown"])
        >>> doc["markdown"][:40]
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
        poll_interval: float = 2.0,
        crawl_timeout: float = 300.0,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._poll_interval = poll_interval
        self._crawl_timeout = crawl_timeout

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json",
            },
        )

    async def _send(
        self,
        client: httpx.AsyncClient,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        try:
            response = await client.request(method, path, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            raise ToolServerError(
                f"HTTP {e.response.status_code}: {_error_text(e.response)}", server="Firecrawl"
            ) from e
        except httpx.HTTPError as e:
            raise ToolServerError(str(e) or type(e).__name__, server="Firecrawl") from e
        except ValueError as e:
            raise ToolServerError("malformed JSON response", server="Firecrawl") from e

        if not isinstance(body, dict):
            raise ToolServerError("unexpected response shape", server="Firecrawl")
        if body.get("success") is False:
            raise ToolServerError(body.get("error") or "request was not successful", server="Firecrawl")
        return body

    async def scrape(self, url: str, formats: list[str] | None = None) -> dict[str, Any]:
        """Scrape one page."""
        async with self._client() as client:
            body = await self._send(
                client, "POST", "/v2/scrape",
                {"url": url, "formats": formats or ["markdown", "html"]},
            )
        return body.get("data") or {}

    async def search(self, query: str, limit: int = 5) -> dict[str, Any]:
        """Search the web."""
        async with self._client() as client:
            body = await self._send(client, "POST", "/v2/search", {"query": query, "limit": limit})
        data = body.get("data")
        if isinstance(data, list):
            return {"web": data}
        return data or {"web": []}

    async def map(self, url: str) -> dict[str, Any]:
        """List the links of a site."""
        async with self._client() as client:
            body = await self._send(client, "POST", "/v2/map", {"url": url})
        links = body.get("links")
        if links is None and isinstance(body.get("data"), dict):
            links = body["data"].get("links")
        return {"links": links or []}

    async def crawl(self, url: str, limit: int = 10) -> dict[str, Any]:
        """Crawl a site and wait for the job to finish."""
        async with self._client() as client:
            job = await self._send(client, "POST", "/v2/crawl", {"url": url, "limit": limit})
            job_id = job.get("id")
            if not job_id:
                raise ToolServerError("crawl job id missing from response", server="Firecrawl")

            loop = asyncio.get_running_loop()
            deadline = loop.time() + self._crawl_timeout
            while True:
                status = await self._send(client, "GET", f"/v2/crawl/{job_id}")
                state = status.get("status")
                if state == "completed":
                    return status
                if state in ("failed", "cancelled"):
                    raise ToolServerError(f"crawl {job_id} {state}", server="Firecrawl")
                if loop.time() >= deadline:
                    raise ToolServerError(
                        f"crawl {job_id} did not finish within {self._crawl_timeout}s",
                        server="Firecrawl",
                    )
                get_logger().debug("Waiting for crawl", job_id=job_id, status=state)
                await asyncio.sleep(self._poll_interval)


def _error_text(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return response.reason_phrase
