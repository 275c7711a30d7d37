"""Minimal same-origin proxy for the Todoist REST API.

Keeps the Todoist token on the server so the client can run without one.
Only the routes the client uses are forwarded; upstream status codes and
bodies are relayed unchanged.

Usage:
    TODOIST_TOKEN=... python server.py
"""
import asyncio
import json
import logging
import webbrowser
from pathlib import Path
from typing import Any, Dict, Optional

import httpx
import uvicorn
from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

import config

logger = logging.getLogger(__name__)

_NO_BODY = object()


class ProxyError(Exception):
    """The request cannot be forwarded (no token configured)."""


def create_app(
    token: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    api_base: str = config.API_BASE_URL,
) -> FastAPI:
    """Build the proxy app.

    Args:
        token: Server-side Todoist token. Defaults to ``TODOIST_TOKEN``.
        transport: httpx transport for upstream calls (tests).
        api_base: Upstream base URL.
    """
    server_token = config.TODOIST_TOKEN if token is None else token
    api_base = api_base.rstrip("/")

    app = FastAPI(title="Todoissimus proxy")
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

    def auth_header(request: Request) -> Dict[str, str]:
        # Server token wins; X-Auth-Token is accepted for local testing
        resolved = server_token or request.headers.get("X-Auth-Token", "")
        if not resolved:
            raise ProxyError("Missing server token (TODOIST_TOKEN)")
        return {"Authorization": f"Bearer {resolved}"}

    async def forward(
        request: Request,
        path: str,
        method: Optional[str] = None,
        params: Optional[Dict[str, str]] = None,
        body: Any = _NO_BODY,
    ) -> Response:
        method = method or request.method
        try:
            headers = {"Content-Type": "application/json", **auth_header(request)}
            if body is not _NO_BODY:
                content = json.dumps(body).encode()
            elif request.method != "GET":
                content = await request.body() or None
            else:
                content = None

            async with httpx.AsyncClient(transport=transport, timeout=config.REQUEST_TIMEOUT_SECONDS) as client:
                upstream = await client.request(
                    method, f"{api_base}{path}", params=params, content=content, headers=headers,
                )
        except (ProxyError, httpx.HTTPError) as e:
            logger.warning(f"Proxy {method} {path} failed: {e}")
            return JSONResponse({"error": str(e)}, status_code=500)

        media_type = None
        if "application/json" in upstream.headers.get("content-type", ""):
            media_type = "application/json"
        return Response(content=upstream.content, status_code=upstream.status_code, media_type=media_type)

    @app.get("/api/tasks")
    async def list_tasks(
        request: Request,
        label: Optional[str] = None,
        project_id: Optional[str] = None,
        filter_: Optional[str] = Query(None, alias="filter"),
    ) -> Response:
        params = {k: v for k, v in (("label", label), ("project_id", project_id), ("filter", filter_)) if v}
        return await forward(request, "/tasks", params=params or None)

    @app.post("/api/tasks")
    async def create_task(request: Request) -> Response:
        return await forward(request, "/tasks", method="POST")

    @app.post("/api/tasks/{task_id}/close")
    async def close_task(request: Request, task_id: str) -> Response:
        return await forward(request, f"/tasks/{task_id}/close", method="POST", body={})

    @app.post("/api/tasks/{task_id}")
    async def update_task(request: Request, task_id: str) -> Response:
        return await forward(request, f"/tasks/{task_id}", method="POST")

    @app.patch("/api/tasks/{task_id}")
    async def patch_task(request: Request, task_id: str) -> Response:
        return await forward(request, f"/tasks/{task_id}", method="PATCH")

    @app.get("/api/projects")
    async def list_projects(request: Request) -> Response:
        return await forward(request, "/projects")

    @app.get("/api/comments")
    async def list_comments(request: Request, task_id: str) -> Response:
        return await forward(request, "/comments", params={"task_id": task_id})

    return app


def _open_browser(url: str) -> None:
    if config.NO_OPEN or config.BROWSER == "none":
        return
    try:
        webbrowser.open(url)
    except webbrowser.Error as e:
        logger.debug(f"Could not open browser: {e}")


async def serve(app: FastAPI) -> None:
    """Serve HTTP, plus HTTPS when a certificate and key are configured."""
    servers = [uvicorn.Server(uvicorn.Config(app, host="0.0.0.0", port=config.PORT))]
    logger.info(f"[Todoissimus] Server running: http://localhost:{config.PORT}")

    wants_https = bool(config.SSL_CERT_PATH and config.SSL_KEY_PATH)
    if wants_https and not (Path(config.SSL_CERT_PATH).is_file() and Path(config.SSL_KEY_PATH).is_file()):
        logger.warning("[Todoissimus] HTTPS not started: certificate or key file missing")
    elif wants_https:
        servers.append(uvicorn.Server(uvicorn.Config(
            app,
            host="0.0.0.0",
            port=config.HTTPS_PORT,
            ssl_certfile=config.SSL_CERT_PATH,
            ssl_keyfile=config.SSL_KEY_PATH,
        )))
        logger.info(f"[Todoissimus] HTTPS enabled: https://localhost:{config.HTTPS_PORT}")

    _open_browser(f"http://localhost:{config.PORT}")
    await asyncio.gather(*(s.serve() for s in servers))


def run() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    if not config.TODOIST_TOKEN:
        logger.warning("[Todoissimus] TODOIST_TOKEN is not set. Set it to use the proxy.")
    asyncio.run(serve(create_app()))


if __name__ == "__main__":
    run()
