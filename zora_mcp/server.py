"""FastAPI application exposing the tool dispatcher over a JSON-RPC /mcp route."""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from zora_mcp import __version__
from zora_mcp.config import SERVER_NAME
from zora_mcp.mcp import Dispatcher

logger = logging.getLogger(__name__)

HEALTH_STATUS = {"status": "ok"}
MCP_SERVER_NAME = SERVER_NAME
MCP_SERVER_VERSION = __version__


def _jsonrpc_success_payload(rpc_id: Any, result: Any) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": rpc_id, "result": result}


def _jsonrpc_error_payload(rpc_id: Any, code: int, message: str) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": rpc_id, "error": {"code": code, "message": message}}


def create_app(dispatcher: Dispatcher) -> FastAPI:
    """Build the HTTP app around an already-configured dispatcher."""

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        aclose = getattr(dispatcher.platform, "aclose", None)
        if aclose is not None:
            await aclose()

    app = FastAPI(
        title="Zora Coins MCP Server",
        description="Zora coin-platform tool surface for LLM agents.",
        version=__version__,
        lifespan=lifespan,
    )
    metrics = dispatcher.metrics

    @app.middleware("http")
    async def add_request_context(request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        start = time.time()
        metrics.incr_request()
        response = await call_next(request)
        duration_ms = (time.time() - start) * 1000
        metrics.record_duration(request_id, duration_ms)
        response.headers["X-Request-ID"] = request_id
        return response

    @app.get("/health")
    async def health() -> JSONResponse:
        """Lightweight health endpoint for monitoring."""
        return JSONResponse(content=HEALTH_STATUS)

    @app.get("/metrics")
    async def metrics_route() -> JSONResponse:
        """Return in-process metrics snapshot."""
        return JSONResponse(content=metrics.snapshot())

    @app.post("/mcp")
    async def mcp_gateway(request: Request) -> Response:
        """
        Minimal JSON-RPC gateway for MCP-style integrations.

        Supported methods:
          - initialize
          - list_tools / tools/list
          - call_tool / tools/call
        """
        request_id = getattr(request.state, "request_id", None)
        start_time = time.time()

        def _respond(
            payload: Dict[str, Any],
            status_code: int = 200,
            *,
            outcome: str,
            method_label: Optional[str] = None,
            tool_label: Optional[str] = None,
            error_code: Optional[int] = None,
        ) -> JSONResponse:
            duration_ms = (time.time() - start_time) * 1000
            logger.debug(
                "mcp outcome=%s method=%s tool=%s id=%s status=%s duration_ms=%.2f error_code=%s",
                outcome,
                method_label,
                tool_label,
                payload.get("id"),
                status_code,
                duration_ms,
                error_code,
                extra={"request_id": request_id, "tool": tool_label, "error": error_code},
            )
            return JSONResponse(status_code=status_code, content=payload)

        try:
            body = await request.json()
        except ValueError:
            payload = _jsonrpc_error_payload(None, -32700, "Parse error")
            return _respond(payload, status_code=400, outcome="error", error_code=-32700)

        if not isinstance(body, dict):
            payload = _jsonrpc_error_payload(None, -32600, "Invalid request")
            return _respond(payload, status_code=400, outcome="error", error_code=-32600)

        method = body.get("method")
        rpc_id = body.get("id")
        raw_params = body.get("params")
        if raw_params is None:
            params: Dict[str, Any] = {}
        elif isinstance(raw_params, dict):
            params = raw_params
        else:
            payload = _jsonrpc_error_payload(rpc_id, -32602, "Invalid params")
            return _respond(payload, outcome="error", method_label=method, error_code=-32602)

        if not method:
            payload = _jsonrpc_error_payload(rpc_id, -32600, "Invalid request")
            return _respond(payload, outcome="error", error_code=-32600)

        if method == "initialize":
            protocol_version = params.get("protocolVersion")
            if not isinstance(protocol_version, str) or not protocol_version:
                payload = _jsonrpc_error_payload(rpc_id, -32602, "Invalid params")
                return _respond(payload, outcome="error", method_label=method, error_code=-32602)
            result = {
                "protocolVersion": protocol_version,
                "serverInfo": {"name": MCP_SERVER_NAME, "version": MCP_SERVER_VERSION},
                "capabilities": {"tools": {"listChanged": False}},
            }
            return _respond(_jsonrpc_success_payload(rpc_id, result), outcome="success", method_label=method)

        if method in ("list_tools", "tools/list"):
            result = {"tools": dispatcher.list_tools()}
            return _respond(_jsonrpc_success_payload(rpc_id, result), outcome="success", method_label=method)

        if method in ("call_tool", "tools/call"):
            tool_name = params.get("name") or params.get("tool")
            tool_args = params.get("arguments")
            if tool_args is None:
                tool_args = params.get("params") or {}
            if not isinstance(tool_name, str) or not tool_name.strip():
                payload = _jsonrpc_error_payload(rpc_id, -32602, "Invalid params")
                return _respond(payload, outcome="error", method_label=method, error_code=-32602)
            if not isinstance(tool_args, dict):
                payload = _jsonrpc_error_payload(rpc_id, -32602, "Invalid params")
                return _respond(
                    payload, outcome="error", method_label=method, tool_label=tool_name, error_code=-32602
                )
            # Tool-level failures come back in-band as an isError envelope.
            envelope = await dispatcher.invoke(tool_name, tool_args)
            return _respond(
                _jsonrpc_success_payload(rpc_id, envelope),
                outcome="error" if envelope.get("isError") else "success",
                method_label=method,
                tool_label=tool_name,
            )

        if method in ("notifications/initialized", "initialized"):
            # Notifications should not return a JSON-RPC response body.
            return Response(status_code=204)

        payload = _jsonrpc_error_payload(rpc_id, -32601, "Method not found")
        return _respond(payload, outcome="error", method_label=method, error_code=-32601)

    return app


# Run with: ZORA_MCP_TRANSPORT=http python -m zora_mcp
