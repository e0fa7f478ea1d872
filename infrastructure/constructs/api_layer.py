"""
API layer construct: shared Lambda + HTTP API routes.

A single Lambda keeps the store client warm and reduces cold start costs.
Uses Docker bundling for dependencies (runs in CI/CD pipeline).
"""

from aws_cdk import (
    BundlingOptions,
    Duration,
    aws_lambda as _lambda,
    aws_apigatewayv2 as apigw,
    aws_apigatewayv2_integrations as integrations,
    aws_logs as logs,
)
from constructs import Construct

ROUTE_DEFS = [
    (apigw.HttpMethod.GET, "/health"),
    (apigw.HttpMethod.GET, "/api/customers"),
    (apigw.HttpMethod.POST, "/api/customers"),
    (apigw.HttpMethod.GET, "/api/customers/{id}"),
    (apigw.HttpMethod.PUT, "/api/customers/{id}"),
    (apigw.HttpMethod.DELETE, "/api/customers/{id}"),
    (apigw.HttpMethod.GET, "/api/customers/{id}/meetings"),
    (apigw.HttpMethod.GET, "/api/meetings"),
    (apigw.HttpMethod.POST, "/api/meetings"),
    (apigw.HttpMethod.GET, "/api/meetings/{id}"),
    (apigw.HttpMethod.PUT, "/api/meetings/{id}"),
    (apigw.HttpMethod.DELETE, "/api/meetings/{id}"),
    (apigw.HttpMethod.POST, "/api/bulk-upload/customers"),
    (apigw.HttpMethod.POST, "/api/bulk-upload/meetings"),
]


class ApiLayerConstruct(Construct):
    """Expose customer and meeting endpoints via HTTP API."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        environment: str,
        customers_table_name: str,
        meetings_table_name: str,
        customer_emails_table_name: str,
        last_meeting_strategy: str = "forward",
        max_upload_bytes: int = 10 * 1024 * 1024,
        log_level: str = "INFO",
        lambda_memory_mb: int = 512,
        lambda_timeout_seconds: int = 30,
    ) -> None:
        super().__init__(scope, construct_id)

        # Installs python-json-logger; boto3 and pydantic ship in the Powertools layer.
        bundled_code = _lambda.Code.from_asset(
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

        # AWS-managed Powertools layer (includes pydantic, boto3 extras)
        powertools_layer = _lambda.LayerVersion.from_layer_version_arn(
            self,
            "PowertoolsLayer",
            f"arn:aws:lambda:{scope.region}:017000801446:layer:AWSLambdaPowertoolsPythonV3-python312-x86:7"
        )

        self.main_lambda = _lambda.Function(
            self,
            "ApiHandler",
            runtime=_lambda.Runtime.PYTHON_3_12,
            handler="handlers.main.lambda_handler",
            code=bundled_code,
            layers=[powertools_layer],
            memory_size=lambda_memory_mb,
            timeout=Duration.seconds(lambda_timeout_seconds),
            architecture=_lambda.Architecture.X86_64,
            environment={
                "ENVIRONMENT": environment,
                "STORE_BACKEND": "dynamodb",
                "CUSTOMERS_TABLE": customers_table_name,
                "MEETINGS_TABLE": meetings_table_name,
                "CUSTOMER_EMAILS_TABLE": customer_emails_table_name,
                "LAST_MEETING_STRATEGY": last_meeting_strategy,
                "MAX_UPLOAD_BYTES": str(max_upload_bytes),
                "LOG_LEVEL": log_level,
            },
            log_retention=logs.RetentionDays.ONE_WEEK,
        )

        self.api = apigw.HttpApi(
            self,
            "HttpApi",
            api_name=f"customer-meetings-api-{environment}",
            cors_preflight=apigw.CorsPreflightOptions(
                allow_origins=["*"],
                allow_methods=[apigw.CorsHttpMethod.ANY],
                allow_headers=["Content-Type"],
            ),
        )

        integration = integrations.HttpLambdaIntegration(
            "LambdaIntegration", self.main_lambda
        )

        for method, path in ROUTE_DEFS:
            self.api.add_routes(
                path=path,
                methods=[method],
                integration=integration,
            )
