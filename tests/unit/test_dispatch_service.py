import asyncio
from types import SimpleNamespace

import pytest

from conftest import FakeSlackClient, run, sns_event
from services.dispatch_service import (
    CLIENT_METHODS,
    ChatOperation,
    DispatchService,
    resolve_operation,
)
from utils.error_handling import ChatAPIError, ConfigurationError, DispatchOperationError


def _dispatch(client, operation, event):
    return run(DispatchService(client).dispatch(operation, event))


def test_results_align_with_records(slack_client):
    event = sns_event(
        {"channel": "C1", "text": "one"},
        {"channel": "C2", "text": "two"},
        {"channel": "C3", "text": "three"},
    )

    results = _dispatch(slack_client, "postMessage", event)

    assert [r["channel"] for r in results] == ["C1", "C2", "C3"]
    assert all(r["method"] == "chat_postMessage" for r in results)
    assert len(slack_client.calls) == 3


def test_post_ephemeral(slack_client):
    event = sns_event({"channel": "C1", "user": "U1", "text": "psst"})

    [result] = _dispatch(slack_client, ChatOperation.POST_EPHEMERAL, event)

    assert result["method"] == "chat_postEphemeral"
    assert slack_client.calls == [("chat_postEphemeral", {"channel": "C1", "user": "U1", "text": "psst"})]


def test_unknown_operation_rejected_before_any_call(slack_client):
    event = sns_event({"channel": "C1"})

    with pytest.raises(ConfigurationError) as exc_info:
        _dispatch(slack_client, "postCarrierPigeon", event)

    assert isinstance(exc_info.value, DispatchOperationError)
    assert slack_client.calls == []


def test_first_failure_rejects_batch():
    client = FakeSlackClient(fail_on=lambda kwargs: kwargs["channel"] == "C2")
    event = sns_event({"channel": "C1"}, {"channel": "C2"})

    with pytest.raises(ChatAPIError) as exc_info:
        _dispatch(client, "postMessage", event)

    assert exc_info.value.error == "channel_not_found"
    assert exc_info.value.operation == "postMessage"


def test_empty_batch(slack_client):
    assert _dispatch(slack_client, "postMessage", {"Records": []}) == []


def test_every_operation_has_a_client_method():
    assert set(CLIENT_METHODS) == set(ChatOperation)
    assert resolve_operation("update") is ChatOperation.UPDATE


class SlowSlackClient:
    """C1 fails at once; every other channel takes a while to answer."""

    def __init__(self):
        self.cancelled = []

    async def chat_postMessage(self, **kwargs):
        from slack_sdk.errors import SlackApiError

        if kwargs["channel"] == "C1":
            raise SlackApiError("boom", {"ok": False, "error": "channel_not_found"})
        try:
            await asyncio.sleep(0.05)
        except asyncio.CancelledError:
            self.cancelled.append(kwargs["channel"])
            raise
        return SimpleNamespace(data={"ok": True})


def test_failure_cancels_in_flight_calls():
    client = SlowSlackClient()
    event = sns_event({"channel": "C1"}, {"channel": "C2"}, {"channel": "C3"})
    loop = asyncio.new_event_loop()
    try:
        with pytest.raises(ChatAPIError):
            loop.run_until_complete(DispatchService(client).dispatch("postMessage", event))
        pending = [task for task in asyncio.all_tasks(loop) if not task.done()]
    finally:
        loop.close()

    assert pending == []
    assert sorted(client.cancelled) == ["C2", "C3"]
