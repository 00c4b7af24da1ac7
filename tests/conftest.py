"""
Pytest configuration and shared fakes.

src/ goes on sys.path so tests import modules the way Lambda does
(`from handlers import main`), since the deployment asset is src/ itself.
"""

import asyncio
import os
import sys
from pathlib import Path
from types import SimpleNamespace

import boto3
import pytest


def _ensure_paths_on_sys_path() -> None:
    """Add repository root AND src/ to sys.path if missing."""
    repo_root = Path(__file__).resolve().parents[1]
    src_root = repo_root / "src"

    root_str = str(repo_root)
    if root_str not in sys.path:
        sys.path.insert(0, root_str)

    src_str = str(src_root)
    if src_str not in sys.path:
        sys.path.insert(0, src_str)


_ensure_paths_on_sys_path()

# Ensure boto3 has offline-friendly defaults so tests do not require AWS access.
os.environ.setdefault("AWS_REGION", "eu-west-2")
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-2")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "test")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "test")
os.environ.setdefault("AWS_SESSION_TOKEN", "test")

boto3.setup_default_session(region_name="eu-west-2")

TOPIC_ARN = "arn:aws:sns:eu-west-2:123456789012:slack-relay"


class FakeSecretsClient:
    """Stands in for boto3's secretsmanager client."""

    def __init__(self, secret_string=None, error=None):
        self.secret_string = secret_string
        self.error = error
        self.calls = []

    def get_secret_value(self, SecretId):
        self.calls.append(SecretId)
        if self.error:
            raise self.error
        return {"Name": SecretId, "SecretString": self.secret_string}


class FakeSnsClient:
    """Records publish calls; optionally fails them."""

    def __init__(self, error=None):
        self.error = error
        self.published = []

    def publish(self, **kwargs):
        if self.error:
            raise self.error
        self.published.append(kwargs)
        return {"MessageId": f"msg-{len(self.published)}"}


class FakeSlackClient:
    """Async stand-in for slack_sdk's AsyncWebClient chat/oauth methods."""

    def __init__(self, fail_on=None, oauth_response=None):
        self.fail_on = fail_on
        self.oauth_response = oauth_response or {}
        self.calls = []

    async def _call(self, method, kwargs):
        self.calls.append((method, kwargs))
        if self.fail_on is not None and self.fail_on(kwargs):
            from slack_sdk.errors import SlackApiError

            raise SlackApiError("boom", {"ok": False, "error": "channel_not_found"})
        return SimpleNamespace(data={"ok": True, "channel": kwargs.get("channel"), "method": method})

    async def chat_postMessage(self, **kwargs):
        return await self._call("chat_postMessage", kwargs)

    async def chat_postEphemeral(self, **kwargs):
        return await self._call("chat_postEphemeral", kwargs)

    async def chat_update(self, **kwargs):
        return await self._call("chat_update", kwargs)

    async def oauth_v2_access(self, **kwargs):
        self.calls.append(("oauth_v2_access", kwargs))
        return SimpleNamespace(data=self.oauth_response)


def sns_event(*messages, attributes=None):
    """Build an SNS -> Lambda event carrying JSON-encoded messages."""
    import json

    return {
        "Records": [
            {
                "EventSource": "aws:sns",
                "EventVersion": "1.0",
                "Sns": {
                    "MessageId": f"id-{index}",
                    "TopicArn": TOPIC_ARN,
                    "Message": json.dumps(message),
                    "MessageAttributes": attributes or {},
                },
            }
            for index, message in enumerate(messages)
        ]
    }


@pytest.fixture
def sns_client():
    return FakeSnsClient()


@pytest.fixture
def slack_client():
    return FakeSlackClient()


def run(coro):
    """Run a coroutine on a private loop, leaving the current loop untouched."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        pending = asyncio.all_tasks(loop)
        for task in pending:
            task.cancel()
        if pending:
            loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
        loop.close()
