"""
Webhook application served behind Mangum.

Every request under the base path goes through the webhook middleware first;
whatever it normalizes is handed to the publish step, which owns the reply.
"""

from fastapi import APIRouter, FastAPI, Request
from starlette.responses import Response

from models.config import RelayConfig
from services.publish_service import PublishService
from services.slack_webhook import WebhookMiddleware
from utils.logging_config import get_logger

logger = get_logger(__name__)


def create_app(
    config: RelayConfig,
    webhook: WebhookMiddleware,
    publisher: PublishService,
) -> FastAPI:
    """Mount the webhook -> publish pipeline under ``config.base_path``."""
    app = FastAPI(title="slack-sns-relay", docs_url=None, redoc_url=None, openapi_url=None)
    router = APIRouter()

    @router.api_route("/{path:path}", methods=["GET", "POST"])
    async def relay(path: str, request: Request) -> Response:
        route = "/" + path
        result = await webhook(request, route)
        if isinstance(result, Response):
            logger.info(f"RESPONSE [{result.status_code}]", extra={"route": route})
            return result
        return await publisher.respond(route, result)

    app.include_router(router, prefix=config.router_prefix)
    return app
