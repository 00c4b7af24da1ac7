"""Validated relay configuration."""

from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_OAUTH_SUCCESS_URI = "slack://channel?team={TEAM_ID}&id={CHANNEL_ID}"


class RelayConfig(BaseModel):
    """
    Typed view over the merged process configuration.

    Field aliases are the environment/secret keys, so a ProcessConfig snapshot
    validates directly; attribute names work too for tests.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    base_path: str = Field("/", alias="BASE_PATH")
    secret_id: Optional[str] = Field(None, alias="AWS_SECRET")
    slack_token: Optional[str] = Field(None, alias="SLACK_TOKEN")
    slack_client_id: Optional[str] = Field(None, alias="SLACK_CLIENT_ID")
    slack_client_secret: Optional[str] = Field(None, alias="SLACK_CLIENT_SECRET")
    slack_oauth_redirect_uri: Optional[str] = Field(None, alias="SLACK_OAUTH_REDIRECT_URI")
    topic_arn: Optional[str] = Field(None, alias="AWS_SNS_TOPIC_ARN")
    oauth_success_uri: str = Field(DEFAULT_OAUTH_SUCCESS_URI, alias="SLACK_OAUTH_SUCCESS_URI")
    chat_operation: str = Field("postMessage", alias="SLACK_CHAT_OPERATION")

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "RelayConfig":
        """Build from environment-style keys, dropping blanks so defaults apply."""
        data = {key: value for key, value in values.items() if value not in (None, "")}
        if "BASE_PATH" not in data and "BASE_URL" in data:
            data["BASE_PATH"] = data["BASE_URL"]
        return cls.model_validate(data)

    @property
    def router_prefix(self) -> str:
        """Base path in the form FastAPI expects for a router prefix."""
        prefix = "/" + self.base_path.strip("/")
        return "" if prefix == "/" else prefix
