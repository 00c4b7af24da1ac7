"""
Main CDK Stack for the Slack -> SNS relay.
"""

from aws_cdk import (
    BundlingOptions,
    Stack,
    Tags,
    CfnOutput,
    aws_lambda as _lambda,
    aws_secretsmanager as secretsmanager,
)
from constructs import Construct

from infrastructure.constructs.api_layer import ApiLayerConstruct
from infrastructure.constructs.event_pipeline import EventPipelineConstruct
from infrastructure.config.settings import Settings


class SlackRelayStack(Stack):
    """Main stack wiring all constructs together."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        settings: Settings,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        Tags.of(self).add("Project", "slack-sns-relay")
        Tags.of(self).add("Environment", settings.environment)
        Tags.of(self).add("ManagedBy", "cdk")

        # 1) Secret holding SLACK_TOKEN / client credentials (filled in by hand).
        secret = secretsmanager.Secret(
            self,
            "SlackSecret",
            secret_name=f"slack-relay/{settings.environment}",
            description="JSON object merged into the relay configuration",
        )

        # Bundle src/ with its dependencies using Docker.
        lambda_code = _lambda.Code.from_asset(
            "src",
            bundling=BundlingOptions(
                image=_lambda.Runtime.PYTHON_3_12.bundling_image,
                command=[
                    "bash", "-c",
                    "pip install -r requirements-lambda.txt -t /asset-output && "
                    "cp -r . /asset-output"
                ],
            ),
        )

        # 2) Topic + consumers.
        shared_env = {
            "ENVIRONMENT": settings.environment,
            "AWS_SECRET": secret.secret_arn,
            "LOG_LEVEL": settings.log_level,
        }
        event_construct = EventPipelineConstruct(
            self,
            "EventPipeline",
            environment=settings.environment,
            lambda_code=lambda_code,
            shared_env=shared_env,
            consumers=settings.consumers,
            webhook_topic_name=settings.webhook_topic_name,
            chat_topic_name=settings.chat_topic_name,
        )

        # 3) Webhook API.
        api_construct = ApiLayerConstruct(
            self,
            "ApiLayer",
            environment=settings.environment,
            lambda_code=lambda_code,
            shared_env=dict(
                shared_env,
                BASE_PATH=settings.base_path,
                AWS_SNS_TOPIC_ARN=event_construct.topic.topic_arn,
                SLACK_OAUTH_SUCCESS_URI=settings.oauth_success_uri,
            ),
            lambda_memory_mb=settings.lambda_memory_mb,
            lambda_timeout_seconds=settings.lambda_timeout_seconds,
        )

        # Permissions.
        event_construct.topic.grant_publish(api_construct.webhook_lambda)
        secret.grant_read(api_construct.webhook_lambda)
        for fn in event_construct.consumer_lambdas.values():
            secret.grant_read(fn)

        CfnOutput(self, "ApiEndpoint", value=api_construct.api.api_endpoint)
        CfnOutput(self, "TopicArn", value=event_construct.topic.topic_arn)
        CfnOutput(self, "ChatTopicArn", value=event_construct.chat_topic.topic_arn)
        CfnOutput(self, "SecretArn", value=secret.secret_arn)
