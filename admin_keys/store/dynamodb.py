"""DynamoDB implementation of the durable store."""

from collections.abc import Sequence
from decimal import Decimal
from functools import reduce
from typing import Any

import aioboto3
from boto3.dynamodb.conditions import Attr, ConditionBase, Key
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from admin_keys.config import Settings
from admin_keys.logging.config import get_logger
from admin_keys.store.base import (
    AttrRef,
    ConditionFailedError,
    DurableStore,
    Filter,
    Page,
    StoreError,
)

logger = get_logger(__name__)


def get_dynamodb_config(settings: Settings) -> dict[str, Any]:
    """
    Build DynamoDB client configuration based on environment.

    For AWS Lambda with IAM roles, returns minimal config (region only).
    For LocalStack, includes endpoint_url and explicit credentials.

    Args:
        settings: Application settings

    Returns:
        Dictionary of boto3 client parameters
    """
    config: dict[str, Any] = {
        "region_name": settings.aws_region,
        "config": Config(
            connect_timeout=settings.dynamodb_connect_timeout,
            read_timeout=settings.dynamodb_read_timeout,
            retries={"max_attempts": 3, "mode": "standard"},
        ),
    }

    # Only add endpoint_url if explicitly configured (LocalStack)
    if settings.dynamodb_endpoint_url:
        config["endpoint_url"] = settings.dynamodb_endpoint_url

    # In Lambda, all three credential values must be passed for temporary credentials
    if settings.aws_access_key_id:
        config["aws_access_key_id"] = settings.aws_access_key_id
    if settings.aws_secret_access_key:
        config["aws_secret_access_key"] = settings.aws_secret_access_key
    if settings.aws_session_token:
        config["aws_session_token"] = settings.aws_session_token

    logger.debug(
        "DynamoDB config built",
        extra={"context": {"config_keys": sorted(config.keys())}},
    )
    return config


def from_dynamodb(value: Any) -> Any:
    """Convert Decimal values returned by DynamoDB into int or float."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: from_dynamodb(v) for k, v in value.items()}
    if isinstance(value, list):
        return [from_dynamodb(v) for v in value]
    return value


def build_condition(filters: Sequence[Filter]) -> ConditionBase | None:
    """
    Translate store filters into a boto3 condition expression.

    Args:
        filters: Filters to AND together

    Returns:
        Combined condition, or None when no filters are given
    """
    if not filters:
        return None

    def _one(f: Filter) -> ConditionBase:
        attr = Attr(f.attribute)
        if f.op == "exists":
            return attr.exists()
        if f.op == "not_exists":
            return attr.not_exists()
        operand = Attr(f.value.name) if isinstance(f.value, AttrRef) else f.value
        return getattr(attr, f.op)(operand)

    return reduce(lambda a, b: a & b, (_one(f) for f in filters))


def build_update_expression(
    set_fields: dict[str, Any] | None, increment: dict[str, int] | None
) -> tuple[str, dict[str, str], dict[str, Any]]:
    """
    Build a SET/ADD update expression with placeholder names.

    Every attribute goes through a ``#`` placeholder because several of ours
    (``limit``, ``status``) are DynamoDB reserved words.

    Returns:
        Tuple of (expression, attribute names, attribute values)
    """
    names: dict[str, str] = {}
    values: dict[str, Any] = {}
    set_parts: list[str] = []
    add_parts: list[str] = []

    for i, (attr, value) in enumerate((set_fields or {}).items()):
        names[f"#s{i}"] = attr
        values[f":s{i}"] = value
        set_parts.append(f"#s{i} = :s{i}")

    for i, (attr, amount) in enumerate((increment or {}).items()):
        names[f"#a{i}"] = attr
        values[f":a{i}"] = amount
        add_parts.append(f"#a{i} :a{i}")

    clauses = []
    if set_parts:
        clauses.append("SET " + ", ".join(set_parts))
    if add_parts:
        clauses.append("ADD " + ", ".join(add_parts))
    return " ".join(clauses), names, values


class DynamoDBStore(DurableStore):
    """
    Durable store backed by DynamoDB through aioboto3.

    A resource context is opened per call; aioboto3 sessions are cheap and
    this keeps the store safe to share across concurrent requests.
    """

    def __init__(self, settings: Settings) -> None:
        """
        Initialize the store.

        Args:
            settings: Application settings with region, endpoint and credentials
        """
        self.settings = settings
        self.session = aioboto3.Session()

    def _resource(self):
        return self.session.resource("dynamodb", **get_dynamodb_config(self.settings))

    @staticmethod
    def _translate(exc: Exception, operation: str, table: str) -> StoreError:
        if isinstance(exc, ClientError):
            code = exc.response.get("Error", {}).get("Code")
            if code == "ConditionalCheckFailedException":
                return ConditionFailedError(f"{operation} condition failed on {table}")
        return StoreError(f"DynamoDB {operation} failed on {table}: {exc}")

    async def get(self, table: str, key: dict[str, Any]) -> dict[str, Any] | None:
        async with self._resource() as dynamodb:
            tbl = await dynamodb.Table(table)
            try:
                response = await tbl.get_item(Key=key, ConsistentRead=True)
            except (ClientError, BotoCoreError) as exc:
                raise self._translate(exc, "get_item", table) from exc
            item = response.get("Item")
            return from_dynamodb(item) if item else None

    async def put(
        self,
        table: str,
        item: dict[str, Any],
        conditions: Sequence[Filter] = (),
    ) -> None:
        params: dict[str, Any] = {"Item": item}
        condition = build_condition(conditions)
        if condition is not None:
            params["ConditionExpression"] = condition

        async with self._resource() as dynamodb:
            tbl = await dynamodb.Table(table)
            try:
                await tbl.put_item(**params)
            except (ClientError, BotoCoreError) as exc:
                raise self._translate(exc, "put_item", table) from exc

    async def update(
        self,
        table: str,
        key: dict[str, Any],
        set_fields: dict[str, Any] | None = None,
        increment: dict[str, int] | None = None,
        conditions: Sequence[Filter] = (),
    ) -> dict[str, Any]:
        expression, names, values = build_update_expression(set_fields, increment)
        params: dict[str, Any] = {
            "Key": key,
            "UpdateExpression": expression,
            "ExpressionAttributeNames": names,
            "ExpressionAttributeValues": values,
            "ReturnValues": "ALL_NEW",
        }
        condition = build_condition(conditions)
        if condition is not None:
            params["ConditionExpression"] = condition

        async with self._resource() as dynamodb:
            tbl = await dynamodb.Table(table)
            try:
                response = await tbl.update_item(**params)
            except (ClientError, BotoCoreError) as exc:
                raise self._translate(exc, "update_item", table) from exc
            return from_dynamodb(response.get("Attributes", {}))

    async def delete(self, table: str, key: dict[str, Any]) -> None:
        async with self._resource() as dynamodb:
            tbl = await dynamodb.Table(table)
            try:
                await tbl.delete_item(Key=key)
            except (ClientError, BotoCoreError) as exc:
                raise self._translate(exc, "delete_item", table) from exc

    async def query(
        self,
        table: str,
        index: str,
        key_name: str,
        key_value: Any,
        limit: int | None = None,
        start_key: dict[str, Any] | None = None,
        newest_first: bool = False,
        filters: Sequence[Filter] = (),
    ) -> Page:
        params: dict[str, Any] = {
            "IndexName": index,
            "KeyConditionExpression": Key(key_name).eq(key_value),
            "ScanIndexForward": not newest_first,
        }
        condition = build_condition(filters)
        if condition is not None:
            params["FilterExpression"] = condition
        if limit:
            params["Limit"] = limit
        if start_key:
            params["ExclusiveStartKey"] = start_key

        async with self._resource() as dynamodb:
            tbl = await dynamodb.Table(table)
            try:
                response = await tbl.query(**params)
            except (ClientError, BotoCoreError) as exc:
                raise self._translate(exc, "query", table) from exc
            return Page(
                items=from_dynamodb(response.get("Items", [])),
                last_evaluated_key=from_dynamodb(response.get("LastEvaluatedKey")),
            )

    async def scan(
        self,
        table: str,
        filters: Sequence[Filter] = (),
        limit: int | None = None,
        start_key: dict[str, Any] | None = None,
    ) -> Page:
        params: dict[str, Any] = {}
        condition = build_condition(filters)
        if condition is not None:
            params["FilterExpression"] = condition
        if limit:
            params["Limit"] = limit
        if start_key:
            params["ExclusiveStartKey"] = start_key

        async with self._resource() as dynamodb:
            tbl = await dynamodb.Table(table)
            try:
                response = await tbl.scan(**params)
            except (ClientError, BotoCoreError) as exc:
                raise self._translate(exc, "scan", table) from exc
            return Page(
                items=from_dynamodb(response.get("Items", [])),
                last_evaluated_key=from_dynamodb(response.get("LastEvaluatedKey")),
            )
