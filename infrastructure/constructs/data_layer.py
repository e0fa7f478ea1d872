"""
Data layer construct: DynamoDB tables for customers, meetings and email locks.
"""

from aws_cdk import (
    RemovalPolicy,
    aws_dynamodb as dynamodb,
)
from constructs import Construct


class DataLayerConstruct(Construct):
    """Provision the record store tables."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        environment: str,
        point_in_time_recovery: bool = False,
    ) -> None:
        super().__init__(scope, construct_id)

        removal_policy = RemovalPolicy.RETAIN if environment == "prod" else RemovalPolicy.DESTROY
        string = dynamodb.AttributeType.STRING

        # Customers, with an email index for duplicate checks and lookups.
        self.customers_table = dynamodb.Table(
            self,
            "Customers",
            partition_key=dynamodb.Attribute(name="id", type=string),
            billing_mode=dynamodb.BillingMode.PAY_PER_REQUEST,
            point_in_time_recovery=point_in_time_recovery,
            removal_policy=removal_policy,
        )
        self.customers_table.add_global_secondary_index(
            index_name="email-index",
            partition_key=dynamodb.Attribute(name="email", type=string),
        )

        # One item per email; written in the same transaction as the customer.
        self.customer_emails_table = dynamodb.Table(
            self,
            "CustomerEmails",
            partition_key=dynamodb.Attribute(name="email", type=string),
            billing_mode=dynamodb.BillingMode.PAY_PER_REQUEST,
            removal_policy=removal_policy,
        )

        # Meetings, indexed by customer and ordered by meeting date.
        self.meetings_table = dynamodb.Table(
            self,
            "Meetings",
            partition_key=dynamodb.Attribute(name="id", type=string),
            billing_mode=dynamodb.BillingMode.PAY_PER_REQUEST,
            point_in_time_recovery=point_in_time_recovery,
            removal_policy=removal_policy,
        )
        self.meetings_table.add_global_secondary_index(
            index_name="customer-index",
            partition_key=dynamodb.Attribute(name="customer", type=string),
            sort_key=dynamodb.Attribute(name="meetingDate", type=string),
        )

    @property
    def tables(self):
        return (self.customers_table, self.customer_emails_table, self.meetings_table)
