"""
Environment-specific deployment settings.

Cost-optimized defaults for development/testing.
"""

from dataclasses import dataclass, field
import os
from typing import Dict


@dataclass
class Settings:
    """Deployment settings for the relay stack."""

    environment: str = "dev"
    aws_region: str = "eu-west-2"

    # Webhook routing
    base_path: str = "/"
    oauth_success_uri: str = "slack://channel?team={TEAM_ID}&id={CHANNEL_ID}"

    # Lambda Configuration
    lambda_memory_mb: int = 256
    lambda_timeout_seconds: int = 10
    log_level: str = "INFO"

    # One consumer Lambda per chat operation on the chat topic, filtered on the
    # SNS "type" attribute. An empty list takes every chat request.
    consumers: Dict[str, list] = field(
        default_factory=lambda: {"postMessage": [], "postEphemeral": []}
    )

    @property
    def webhook_topic_name(self) -> str:
        return f"slack-relay-{self.environment}"

    @property
    def chat_topic_name(self) -> str:
        return f"slack-relay-chat-{self.environment}"

    @classmethod
    def from_environment(cls) -> "Settings":
        """Load settings from environment variables."""
        env = os.environ.get("ENVIRONMENT", "dev")
        base = dict(
            environment=env,
            aws_region=os.environ.get("AWS_REGION", cls.aws_region),
            base_path=os.environ.get("BASE_PATH", cls.base_path),
            oauth_success_uri=os.environ.get("SLACK_OAUTH_SUCCESS_URI", cls.oauth_success_uri),
            log_level=os.environ.get("LOG_LEVEL", cls.log_level),
        )

        # Production overrides
        if env == "prod":
            return cls(**base, lambda_memory_mb=512, lambda_timeout_seconds=15)

        return cls(**base)
