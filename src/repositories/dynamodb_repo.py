"""DynamoDB collections for customers and meetings."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from functools import reduce
from typing import Any, Dict, Iterable, Iterator, List, Optional

import boto3
from boto3.dynamodb.conditions import Attr, Key
from boto3.dynamodb.types import TypeSerializer
from botocore.exceptions import ClientError

from repositories.base import (
    Document,
    DuplicateKeyError,
    RecordStore,
    StoreError,
    new_document,
    sort_documents,
    touch,
)
from utils.logging_config import get_logger

logger = get_logger(__name__)

_serializer = TypeSerializer()


@dataclass(frozen=True)
class IndexSpec:
    """A global secondary index usable for equality lookups."""

    name: str
    partition_key: str
    sort_key: Optional[str] = None


@dataclass(frozen=True)
class UniqueLock:
    """A unique field enforced through a lock table keyed by that field."""

    field: str
    table_name: str


def _error_code(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Code", "")


def _serialize(item: Document) -> Dict[str, Any]:
    return {k: _serializer.serialize(v) for k, v in item.items()}


@contextmanager
def _store_errors(operation: str, table_name: str) -> Iterator[None]:
    """Re-raise botocore failures as StoreError."""
    try:
        yield
    except ClientError as exc:
        logger.error(
            "DynamoDB call failed",
            extra={"operation": operation, "table": table_name, "code": _error_code(exc)},
        )
        raise StoreError(f"{operation} on {table_name} failed: {exc}") from exc


class DynamoDbCollection:
    """One table keyed by `id`, with optional GSIs and a unique-field lock table."""

    def __init__(
        self,
        table_name: str,
        indexes: Iterable[IndexSpec] = (),
        unique: Optional[UniqueLock] = None,
        resource=None,
    ):
        self.resource = resource or boto3.resource("dynamodb")
        self.table_name = table_name
        self.table = self.resource.Table(table_name)
        self.indexes = tuple(indexes)
        self.unique = unique

    @property
    def client(self):
        return self.resource.meta.client

    def get(self, item_id: str) -> Optional[Document]:
        with _store_errors("get_item", self.table_name):
            resp = self.table.get_item(Key={"id": item_id}, ConsistentRead=True)
        return resp.get("Item")

    def find(
        self,
        filters: Optional[Dict[str, Any]] = None,
        sort_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Document]:
        """Query a matching GSI when one exists, otherwise scan."""
        filters = dict(filters or {})
        index = self._index_for(filters)
        sorted_by_index = index is not None and index.sort_key is not None and sort_by == index.sort_key

        if index:
            # Limit is only safe to push down when no filter expression trims pages.
            page_limit = limit if sorted_by_index and len(filters) == 1 else None
            items = self._query(index, filters, descending, page_limit)
        else:
            items = self._scan(filters)

        if not sorted_by_index:
            items = sort_documents(items, sort_by, descending)
        return items[:limit] if limit else items

    def insert(self, document: Document) -> Document:
        item = new_document(document)
        if self.unique is None:
            with _store_errors("put_item", self.table_name):
                self.table.put_item(
                    Item=item,
                    ConditionExpression="attribute_not_exists(#pk)",
                    ExpressionAttributeNames={"#pk": "id"},
                )
            return item

        value = item[self.unique.field]
        self._transact(
            [
                {
                    "Put": {
                        "TableName": self.table_name,
                        "Item": _serialize(item),
                        "ConditionExpression": "attribute_not_exists(#pk)",
                        "ExpressionAttributeNames": {"#pk": "id"},
                    }
                },
                self._lock_put(value, item["id"]),
            ],
            lock_position=1,
            value=value,
        )
        return item

    def update(self, item_id: str, changes: Document) -> Optional[Document]:
        """Apply a partial update; returns None when the id does not exist."""
        changes = touch(changes)
        if self.unique and self.unique.field in changes:
            return self._update_unique(item_id, changes)

        names, values, expression = self._set_expression(changes)
        names["#pk"] = "id"
        try:
            resp = self.table.update_item(
                Key={"id": item_id},
                UpdateExpression=expression,
                ConditionExpression="attribute_exists(#pk)",
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ReturnValues="ALL_NEW",
            )
        except ClientError as exc:
            if _error_code(exc) == "ConditionalCheckFailedException":
                return None
            raise StoreError(f"update_item on {self.table_name} failed: {exc}") from exc
        return resp.get("Attributes")

    def delete(self, item_id: str) -> bool:
        with _store_errors("delete_item", self.table_name):
            resp = self.table.delete_item(Key={"id": item_id}, ReturnValues="ALL_OLD")
        old = resp.get("Attributes")
        if not old:
            return False
        if self.unique and old.get(self.unique.field) is not None:
            with _store_errors("delete_item", self.unique.table_name):
                self.resource.Table(self.unique.table_name).delete_item(
                    Key={self.unique.field: old[self.unique.field]}
                )
        return True

    def delete_many(self, filters: Dict[str, Any]) -> int:
        """Delete every match. Reads the base table consistently; GSIs may lag."""
        doomed = self._scan(filters, consistent=True)
        if self.unique:
            return sum(1 for item in doomed if self.delete(item["id"]))
        with _store_errors("batch_write_item", self.table_name):
            with self.table.batch_writer() as batch:
                for item in doomed:
                    batch.delete_item(Key={"id": item["id"]})
        return len(doomed)

    def _index_for(self, filters: Dict[str, Any]) -> Optional[IndexSpec]:
        for index in self.indexes:
            if index.partition_key in filters:
                return index
        return None

    def _query(
        self,
        index: IndexSpec,
        filters: Dict[str, Any],
        descending: bool,
        limit: Optional[int],
    ) -> List[Document]:
        kwargs: Dict[str, Any] = {
            "IndexName": index.name,
            "KeyConditionExpression": Key(index.partition_key).eq(filters[index.partition_key]),
            "ScanIndexForward": not descending,
        }
        rest = {k: v for k, v in filters.items() if k != index.partition_key}
        if rest:
            kwargs["FilterExpression"] = self._conditions(rest)
        if limit:
            kwargs["Limit"] = limit
        with _store_errors("query", self.table_name):
            return self._paginate(self.table.query, kwargs, limit)

    def _scan(self, filters: Dict[str, Any], consistent: bool = False) -> List[Document]:
        kwargs: Dict[str, Any] = {}
        if consistent:
            kwargs["ConsistentRead"] = True
        if filters:
            kwargs["FilterExpression"] = self._conditions(filters)
        with _store_errors("scan", self.table_name):
            return self._paginate(self.table.scan, kwargs, None)

    @staticmethod
    def _paginate(call, kwargs: Dict[str, Any], limit: Optional[int]) -> List[Document]:
        items: List[Document] = []
        while True:
            resp = call(**kwargs)
            items.extend(resp.get("Items", []))
            last_key = resp.get("LastEvaluatedKey")
            if not last_key or (limit and len(items) >= limit):
                return items
            kwargs["ExclusiveStartKey"] = last_key

    @staticmethod
    def _conditions(filters: Dict[str, Any]):
        return reduce(lambda acc, cond: acc & cond, [Attr(k).eq(v) for k, v in filters.items()])

    @staticmethod
    def _set_expression(changes: Document):
        names: Dict[str, str] = {}
        values: Dict[str, Any] = {}
        clauses = []
        for position, (field, value) in enumerate(changes.items()):
            names[f"#u{position}"] = field
            values[f":u{position}"] = value
            clauses.append(f"#u{position} = :u{position}")
        return names, values, "SET " + ", ".join(clauses)

    def _lock_put(self, value: Any, item_id: str) -> Dict[str, Any]:
        return {
            "Put": {
                "TableName": self.unique.table_name,
                "Item": _serialize({self.unique.field: value, "id": item_id}),
                "ConditionExpression": "attribute_not_exists(#lk)",
                "ExpressionAttributeNames": {"#lk": self.unique.field},
            }
        }

    def _update_unique(self, item_id: str, changes: Document) -> Optional[Document]:
        """Move the unique-field lock and update the item in one transaction."""
        current = self.get(item_id)
        if current is None:
            return None

        field = self.unique.field
        old_value, new_value = current.get(field), changes[field]
        if old_value == new_value:
            plain = {k: v for k, v in changes.items() if k != field}
            return self.update(item_id, plain)

        names, values, expression = self._set_expression(changes)
        names["#pk"] = "id"
        actions = [
            {
                "Update": {
                    "TableName": self.table_name,
                    "Key": _serialize({"id": item_id}),
                    "UpdateExpression": expression,
                    "ConditionExpression": "attribute_exists(#pk)",
                    "ExpressionAttributeNames": names,
                    "ExpressionAttributeValues": _serialize(values),
                }
            },
            self._lock_put(new_value, item_id),
        ]
        if old_value is not None:
            actions.append(
                {"Delete": {"TableName": self.unique.table_name, "Key": _serialize({field: old_value})}}
            )
        self._transact(actions, lock_position=1, value=new_value)
        return self.get(item_id)

    def _transact(self, actions: List[Dict[str, Any]], lock_position: int, value: Any) -> None:
        try:
            self.client.transact_write_items(TransactItems=actions)
        except ClientError as exc:
            reasons = exc.response.get("CancellationReasons") or []
            if (
                _error_code(exc) == "TransactionCanceledException"
                and len(reasons) > lock_position
                and reasons[lock_position].get("Code") == "ConditionalCheckFailed"
            ):
                raise DuplicateKeyError(self.unique.field, value) from exc
            raise StoreError(f"transact_write_items on {self.table_name} failed: {exc}") from exc


def build_dynamodb_store(settings) -> RecordStore:
    """Wire the customer and meeting tables named in AppSettings."""
    resource = boto3.resource("dynamodb")
    return RecordStore(
        customers=DynamoDbCollection(
            settings.customers_table,
            indexes=(IndexSpec("email-index", "email"),),
            unique=UniqueLock("email", settings.customer_emails_table),
            resource=resource,
        ),
        meetings=DynamoDbCollection(
            settings.meetings_table,
            indexes=(IndexSpec("customer-index", "customer", "meetingDate"),),
            resource=resource,
        ),
    )
