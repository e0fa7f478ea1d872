"""
Main CDK Stack for the Customer Meetings API.
"""

from aws_cdk import (
    Stack,
    Tags,
    CfnOutput,
)
from constructs import Construct

from infrastructure.constructs.data_layer import DataLayerConstruct
from infrastructure.constructs.api_layer import ApiLayerConstruct
from infrastructure.config.settings import Settings


class CustomerMeetingsStack(Stack):
    """Main stack wiring the data and API constructs together."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        settings: Settings,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        # Global tags for cost/accounting.
        Tags.of(self).add("Project", "customer-meetings")
        Tags.of(self).add("Environment", settings.environment)
        Tags.of(self).add("ManagedBy", "cdk")

        # 1) Data layer.
        data_construct = DataLayerConstruct(
            self,
            "DataLayer",
            environment=settings.environment,
            point_in_time_recovery=settings.point_in_time_recovery,
        )

        # 2) API layer (single Lambda).
        api_construct = ApiLayerConstruct(
            self,
            "ApiLayer",
            environment=settings.environment,
            customers_table_name=data_construct.customers_table.table_name,
            meetings_table_name=data_construct.meetings_table.table_name,
            customer_emails_table_name=data_construct.customer_emails_table.table_name,
            last_meeting_strategy=settings.last_meeting_strategy,
            max_upload_bytes=settings.max_upload_bytes,
            log_level=settings.log_level,
            lambda_memory_mb=settings.lambda_memory_mb,
            lambda_timeout_seconds=settings.lambda_timeout_seconds,
        )

        # Permissions for the API Lambda (GSIs are covered by the table grants).
        for table in data_construct.tables:
            table.grant_read_write_data(api_construct.main_lambda)

        # Outputs to quickly find resources.
        CfnOutput(self, "ApiEndpoint", value=api_construct.api.api_endpoint)
        CfnOutput(self, "CustomersTable", value=data_construct.customers_table.table_name)
        CfnOutput(self, "MeetingsTable", value=data_construct.meetings_table.table_name)
        CfnOutput(
            self,
            "CustomerEmailsTable",
            value=data_construct.customer_emails_table.table_name,
        )
