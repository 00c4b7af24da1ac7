"""
API layer construct: webhook Lambda + HTTP API.

Every route is proxied to the same Lambda; the FastAPI app inside does the
routing under BASE_PATH.
"""

from aws_cdk import (
    Duration,
    aws_lambda as _lambda,
    aws_apigatewayv2 as apigw,
    aws_apigatewayv2_integrations as integrations,
    aws_logs as logs,
)
from constructs import Construct


class ApiLayerConstruct(Construct):
    """Expose the Slack webhook endpoints via HTTP API."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        environment: str,
        lambda_code: _lambda.Code,
        shared_env: dict,
        lambda_memory_mb: int = 256,
        lambda_timeout_seconds: int = 10,
    ) -> None:
        super().__init__(scope, construct_id)

        self.webhook_lambda = _lambda.Function(
            self,
            "WebhookHandler",
            runtime=_lambda.Runtime.PYTHON_3_12,
            handler="handlers.main.lambda_handler",
            code=lambda_code,
            memory_size=lambda_memory_mb,
            timeout=Duration.seconds(lambda_timeout_seconds),
            architecture=_lambda.Architecture.ARM_64,
            environment=shared_env,
            log_retention=logs.RetentionDays.ONE_WEEK,
        )

        self.api = apigw.HttpApi(
            self,
            "HttpApi",
            api_name=f"slack-relay-{environment}",
        )

        integration = integrations.HttpLambdaIntegration(
            "WebhookIntegration", self.webhook_lambda
        )

        # Slack posts events/callbacks/slash commands and redirects OAuth with GET.
        self.api.add_routes(
            path="/{proxy+}",
            methods=[apigw.HttpMethod.GET, apigw.HttpMethod.POST],
            integration=integration,
        )
