"""
Relay context: the process-wide collaborators shared by every invocation.

Each collaborator is built on first use behind a LazyCell, so a warm Lambda
builds the Slack client, the webhook app and the Mangum adapter once. The
secret is merged into config the first time anything needs configuration.
"""

from __future__ import annotations

from typing import Optional

import boto3
from fastapi import FastAPI
from mangum import Mangum
from slack_sdk.web.async_client import AsyncWebClient

from handlers.webhook_app import create_app
from models.config import RelayConfig
from services.config_store import ConfigStore
from services.dispatch_service import DispatchService
from services.publish_service import PublishService
from services.slack_webhook import SlackWebhook, WebhookMiddleware
from utils.error_handling import ConfigurationError
from utils.lazy import LazyCell
from utils.logging_config import get_logger

logger = get_logger(__name__)


class RelayContext:
    """Lazily built, build-once collaborators for one Lambda process."""

    def __init__(
        self,
        store: Optional[ConfigStore] = None,
        slack_client: Optional[AsyncWebClient] = None,
        sns_client=None,
        webhook: Optional[WebhookMiddleware] = None,
    ):
        self.store = store or ConfigStore()
        self._sns_client = sns_client
        self._webhook = webhook

        self._config = LazyCell(self._load_config)
        self._slack = LazyCell(lambda: slack_client or self._build_slack())
        self._publisher = LazyCell(self._build_publisher)
        self._dispatcher = LazyCell(lambda: DispatchService(self.get_slack()))
        self._app = LazyCell(self._build_app)
        self._adapter = LazyCell(lambda: Mangum(self.get_app(), lifespan="off"))

    @property
    def config(self) -> RelayConfig:
        return self._config.get()

    def get_slack(self) -> AsyncWebClient:
        return self._slack.get()

    def get_publisher(self) -> PublishService:
        return self._publisher.get()

    def get_dispatcher(self) -> DispatchService:
        return self._dispatcher.get()

    def get_app(self) -> FastAPI:
        return self._app.get()

    def get_adapter(self) -> Mangum:
        return self._adapter.get()

    def _load_config(self) -> RelayConfig:
        config = RelayConfig.from_mapping(self.store.load())
        logger.info(
            "Relay configured",
            extra={"base_path": config.base_path, "topic_arn": config.topic_arn},
        )
        return config

    def _build_slack(self) -> AsyncWebClient:
        if not self.config.slack_token:
            logger.warning("SLACK_TOKEN not set; chat calls will be rejected by Slack")
        return AsyncWebClient(token=self.config.slack_token)

    def _build_publisher(self) -> PublishService:
        if not self.config.topic_arn:
            raise ConfigurationError("AWS_SNS_TOPIC_ARN is required to publish")
        return PublishService(
            topic_arn=self.config.topic_arn,
            client=self._sns_client or boto3.client("sns"),
            oauth_success_uri=self.config.oauth_success_uri,
        )

    def _build_app(self) -> FastAPI:
        webhook = self._webhook or SlackWebhook(self.get_slack(), self.config)
        return create_app(self.config, webhook, self.get_publisher())
