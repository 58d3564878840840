"""HTTP request node executor."""

from __future__ import annotations

import base64
import json
import os
import time
from typing import Any

import httpx

from nodechord.core.config import EngineSettings
from nodechord.core.state import WorkflowNode, WorkflowState
from nodechord.core.templating import substitute_deep, substitute_variables
from nodechord.errors.exceptions import (
    HTTPError,
    HTTPRequestError,
    MissingFieldError,
    NodeChordError,
)
from nodechord.executors.base import HTTPResult, NodeExecutor
from nodechord.logging import get_logger

BODY_METHODS = ("POST", "PUT", "PATCH")


def resolve_env_reference(token: str) -> str:
    """Resolve a ``${NAME}`` token from the environment, else return it unchanged."""
    if token.startswith("${") and token.endswith("}"):
        return os.environ.get(token[2:-1]) or token
    return token


def _parse_json(text: str) -> tuple[bool, Any]:
    try:
        return True, json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return False, None


def build_body(template: Any, state: WorkflowState) -> tuple[str, bool]:
    """Render a request body template.

    The template is substituted as text first. When the result is JSON, keys
    and string leaves are substituted again structurally. When only the raw
    template is JSON (a substituted value broke the quoting), the raw
    template is substituted structurally instead.

    Returns:
        The body text and whether it is JSON.
    """
    if not isinstance(template, str):
        return json.dumps(substitute_deep(template, state)), True

    text = substitute_variables(template, state)
    is_json, parsed = _parse_json(text)
    if is_json:
        return json.dumps(substitute_deep(parsed, state)), True

    is_json, parsed = _parse_json(template)
    if is_json:
        return json.dumps(substitute_deep(parsed, state)), True
    return text, False


class HTTPExecutor(NodeExecutor):
    """Executor for ``http`` nodes.

    Example:
        >>> node = WorkflowNode(id="fetch", type="http", data={
        ...     "httpUrl": "https://api.example.com/items/{{input}}",
        ... })
        >>> result = await HTTPExecutor().execute(node, WorkflowState.start("42"))
        >>> result.status
        200
    """

    node_type = "http"

    def __init__(
        self,
        settings: EngineSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(settings)
        self._transport = transport

    async def execute(self, node: WorkflowNode, state: WorkflowState) -> HTTPResult:
        """Send the node's request.

        Raises:
            HTTPError: The server answered with a non-2xx status.
            HTTPRequestError: The request could not be completed.
        """
        logger = get_logger()
        logger.node_start(node.id, self.node_type, node.name)
        start_time = time.time()

        try:
            result = await self._send(node, state)
        except NodeChordError as e:
            logger.node_error(node.id, str(e))
            raise

        logger.node_end(node.id, duration_ms=int((time.time() - start_time) * 1000))
        return result

    async def _send(self, node: WorkflowNode, state: WorkflowState) -> HTTPResult:
        data = node.data
        url = substitute_variables(data.get("httpUrl") or "", state)
        if not url:
            raise MissingFieldError("httpUrl", node.id)
        method = (data.get("httpMethod") or "GET").upper()
        headers = self._build_headers(data, state)

        content: str | None = None
        if method in BODY_METHODS and data.get("httpBody"):
            content, is_json = build_body(data["httpBody"], state)
            if is_json and not any(k.lower() == "content-type" for k in headers):
                headers["Content-Type"] = "application/json"

        get_logger().debug("HTTP request", node=node.id, method=method, url=url)

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.http_timeout, transport=self._transport
            ) as client:
                response = await client.request(method, url, headers=headers, content=content)
        except httpx.HTTPError as e:
            raise HTTPRequestError(str(e) or type(e).__name__) from e

        try:
            body: Any = response.json()
        except ValueError:
            body = response.text

        if not response.is_success:
            raise HTTPError(response.status_code, response.reason_phrase, body)

        return HTTPResult(
            status=response.status_code,
            status_text=response.reason_phrase,
            headers=dict(response.headers),
            data=body,
            url=url,
            method=method,
        )

    @staticmethod
    def _build_headers(data: dict[str, Any], state: WorkflowState) -> dict[str, str]:
        headers: dict[str, str] = {}
        for header in data.get("httpHeaders") or []:
            if header.get("key") and header.get("value"):
                headers[header["key"]] = substitute_variables(str(header["value"]), state)

        auth_type = data.get("httpAuthType")
        raw_token = data.get("httpAuthToken")
        if not raw_token:
            return headers

        token = resolve_env_reference(substitute_variables(str(raw_token), state))
        if auth_type == "bearer":
            headers["Authorization"] = f"Bearer {token}"
        elif auth_type == "api-key":
            headers["X-API-Key"] = token
        elif auth_type == "basic":
            encoded = base64.b64encode(token.encode("utf-8")).decode("ascii")
            headers["Authorization"] = f"Basic {encoded}"
        return headers
