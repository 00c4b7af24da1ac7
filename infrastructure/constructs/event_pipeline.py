"""
Event pipeline: webhook topic for inbound Slack payloads, chat topic feeding
one consumer Lambda per Slack chat operation.
"""

from typing import Dict, List

from aws_cdk import (
    Duration,
    aws_lambda as _lambda,
    aws_lambda_event_sources as event_sources,
    aws_logs as logs,
    aws_sns as sns,
)
from constructs import Construct

# Chat operation -> handler exported by handlers.main.
OPERATION_HANDLERS = {
    "postMessage": "handlers.main.post_message_handler",
    "postEphemeral": "handlers.main.post_ephemeral_handler",
}


class EventPipelineConstruct(Construct):
    """Own the relay topic and wire consumers to it."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        environment: str,
        lambda_code: _lambda.Code,
        shared_env: dict,
        consumers: Dict[str, List[str]],
        webhook_topic_name: str,
        chat_topic_name: str,
    ) -> None:
        super().__init__(scope, construct_id)

        # Inbound webhook payloads, for application subscribers.
        self.topic = sns.Topic(
            self,
            "SlackRelayTopic",
            topic_name=webhook_topic_name,
        )

        # Chat requests (postMessage kwargs); only these reach the chat consumers.
        self.chat_topic = sns.Topic(
            self,
            "SlackChatTopic",
            topic_name=chat_topic_name,
        )

        self.consumer_lambdas: Dict[str, _lambda.Function] = {}
        for operation, types in consumers.items():
            handler = OPERATION_HANDLERS.get(operation, "handlers.main.lambda_handler")
            env = dict(shared_env, SLACK_CHAT_OPERATION=operation)
            fn = _lambda.Function(
                self,
                f"{operation[0].upper()}{operation[1:]}Handler",
                runtime=_lambda.Runtime.PYTHON_3_12,
                handler=handler,
                code=lambda_code,
                timeout=Duration.seconds(30),
                memory_size=256,
                architecture=_lambda.Architecture.ARM_64,
                environment=env,
                log_retention=logs.RetentionDays.ONE_WEEK,
            )

            filter_policy = None
            if types:
                filter_policy = {
                    "type": sns.SubscriptionFilter.string_filter(allowlist=types)
                }
            fn.add_event_source(
                event_sources.SnsEventSource(self.chat_topic, filter_policy=filter_policy)
            )
            self.consumer_lambdas[operation] = fn
