"""
Secrets-backed configuration.

The secret named by AWS_SECRET holds a JSON object whose fields are merged
over the Lambda environment. The merge runs on every ``load()``; the relay
context calls it once per process and keeps the result.
"""

from __future__ import annotations

import json
import os
from collections.abc import MutableMapping
from typing import Any, Dict, Iterator, Mapping, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from utils.error_handling import ConfigFetchError, ConfigParseError
from utils.logging_config import get_logger

logger = get_logger(__name__)


class ProcessConfig(MutableMapping):
    """Process-wide key/value configuration seeded from the environment."""

    def __init__(self, initial: Optional[Mapping[str, Any]] = None):
        self._values: Dict[str, str] = dict(initial or {})

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._values[key] = _as_config_value(value)

    def __delitem__(self, key: str) -> None:
        del self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def merge(self, fields: Mapping[str, Any]) -> "ProcessConfig":
        """Overlay ``fields`` in a single swap so readers never see half a merge."""
        merged = dict(self._values)
        merged.update({key: _as_config_value(value) for key, value in fields.items()})
        self._values = merged
        return self

    def snapshot(self) -> Dict[str, str]:
        return dict(self._values)


def _as_config_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    return "" if value is None else str(value)


class ConfigStore:
    """Fetches the relay secret from Secrets Manager and merges it into config."""

    def __init__(
        self,
        secret_id: Optional[str] = None,
        client=None,
        config: Optional[ProcessConfig] = None,
    ):
        self.config = config if config is not None else ProcessConfig(os.environ)
        self.secret_id = secret_id or self.config.get("AWS_SECRET")
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client("secretsmanager")
        return self._client

    def load(self) -> ProcessConfig:
        """Fetch the secret and merge its fields; returns the updated config."""
        if not self.secret_id:
            logger.warning("AWS_SECRET not set; using environment configuration only")
            return self.config

        fields = self._parse(self._fetch())
        self.config.merge(fields)
        logger.info(
            "Secret merged into config",
            extra={"secret_id": self.secret_id, "keys": sorted(fields)},
        )
        return self.config

    def _fetch(self) -> str:
        try:
            response = self.client.get_secret_value(SecretId=self.secret_id)
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code", "Unknown")
            logger.error("Secret fetch failed", extra={"secret_id": self.secret_id, "code": code})
            raise ConfigFetchError(f"Cannot fetch secret {self.secret_id}: {code}") from exc
        except BotoCoreError as exc:
            logger.error("Secrets Manager unreachable", extra={"error": str(exc)})
            raise ConfigFetchError(f"Cannot reach Secrets Manager: {exc}") from exc

        secret_string = response.get("SecretString")
        if secret_string is None:
            raise ConfigParseError(f"Secret {self.secret_id} has no SecretString")
        return secret_string

    def _parse(self, secret_string: str) -> Dict[str, Any]:
        try:
            fields = json.loads(secret_string)
        except json.JSONDecodeError as exc:
            raise ConfigParseError(f"Secret {self.secret_id} is not valid JSON") from exc
        if not isinstance(fields, dict):
            raise ConfigParseError(f"Secret {self.secret_id} must be a JSON object")
        return fields
