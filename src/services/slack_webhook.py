"""
Default Slack webhook middleware.

Normalizes Slack's inbound requests (events, interactive callbacks, slash
commands and the OAuth install redirect) into ResponseLocals for the publish
step. Requests Slack expects answered directly, such as the Events API URL
challenge, come back as a ready Response instead.
"""

from __future__ import annotations

import json
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from slack_sdk.errors import SlackApiError
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from models.config import RelayConfig
from models.message import ResponseLocals
from models.response import ApiResponse
from utils.logging_config import get_logger

logger = get_logger(__name__)

WebhookResult = Union[ResponseLocals, Response]
WebhookMiddleware = Callable[[Request, str], Awaitable[WebhookResult]]


def _json_response(status: int, body: ApiResponse) -> JSONResponse:
    return JSONResponse(status_code=status, content=body.model_dump(exclude_none=True))


class SlackWebhook:
    """Route-aware translator from Slack HTTP requests to ResponseLocals."""

    def __init__(self, client, config: RelayConfig):
        self.client = client
        self.config = config

    async def __call__(self, request: Request, route: str) -> WebhookResult:
        method = request.method.upper()
        if method == "POST" and route == "/events":
            return await self.events(request)
        if method == "POST" and route == "/callbacks":
            return await self.callbacks(request)
        if method == "POST" and route.startswith("/slash/"):
            return await self.slash(request, route[len("/slash/"):])
        if method == "GET" and route == "/oauth":
            return await self.oauth(request)
        return _json_response(404, ApiResponse(message="Route not found", route=f"{method} {route}"))

    async def events(self, request: Request) -> WebhookResult:
        body = await _read_json(request)
        if body is None:
            return _json_response(400, ApiResponse(message="Invalid event payload"))
        if body.get("type") == "url_verification":
            return JSONResponse({"challenge": body.get("challenge")})
        event = body.get("event") or {}
        return ResponseLocals(type="event", id=event.get("type"), message=body)

    async def callbacks(self, request: Request) -> WebhookResult:
        form = await request.form()
        try:
            payload = json.loads(form.get("payload") or "")
        except json.JSONDecodeError:
            payload = None
        if not isinstance(payload, dict):
            return _json_response(400, ApiResponse(message="Invalid callback payload"))
        view = payload.get("view") or {}
        return ResponseLocals(
            type="callback",
            id=payload.get("type"),
            callback_id=payload.get("callback_id") or view.get("callback_id"),
            message=payload,
        )

    async def slash(self, request: Request, command: str) -> WebhookResult:
        form = await request.form()
        return ResponseLocals(type="slash", id=command, message=dict(form))

    async def oauth(self, request: Request) -> WebhookResult:
        params = request.query_params
        if params.get("error") or not params.get("code"):
            logger.warning("OAuth denied", extra={"error": params.get("error")})
            return _json_response(
                403, ApiResponse(message="OAuth failed", data={"error": params.get("error")})
            )
        try:
            response = await self.client.oauth_v2_access(
                client_id=self.config.slack_client_id,
                client_secret=self.config.slack_client_secret,
                code=params["code"],
                redirect_uri=self.config.slack_oauth_redirect_uri,
            )
        except SlackApiError as exc:
            error = exc.response.get("error")
            logger.warning("OAuth exchange failed", extra={"error": error})
            return _json_response(403, ApiResponse(message="OAuth failed", data={"error": error}))
        return ResponseLocals(type="oauth", message=response.data)


async def _read_json(request: Request) -> Optional[Dict[str, Any]]:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return body if isinstance(body, dict) else None
