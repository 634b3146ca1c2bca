"""Tests for DynamoDB table provisioning."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from admin_keys.store.schema import table_schemas
from infrastructure.dynamodb_tables import create_table, table_definition


def client_error(code: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, "CreateTable")


def mock_dynamodb() -> MagicMock:
    dynamodb = MagicMock()
    dynamodb.create_table = AsyncMock()
    dynamodb.meta.client.update_time_to_live = AsyncMock()
    return dynamodb


def test_admin_keys_table_definition(settings) -> None:
    name = settings.dynamodb_table_admin_keys
    definition = table_definition(name, table_schemas(settings)[name])

    assert definition["TableName"] == name
    assert definition["KeySchema"] == [{"AttributeName": "key_id", "KeyType": "HASH"}]
    assert definition["AttributeDefinitions"] == [
        {"AttributeName": "key_id", "AttributeType": "S"},
        {"AttributeName": "secret", "AttributeType": "S"},
    ]
    [index] = definition["GlobalSecondaryIndexes"]
    assert index["IndexName"] == "AdminKeyIndex"
    assert index["Projection"] == {"ProjectionType": "ALL"}


def test_audit_table_definition(settings) -> None:
    name = settings.dynamodb_table_audit_logs
    definition = table_definition(name, table_schemas(settings)[name])

    attributes = {a["AttributeName"] for a in definition["AttributeDefinitions"]}
    assert attributes == {"log_id", "key_id", "secret", "created_at"}
    indexes = {i["IndexName"]: i["KeySchema"] for i in definition["GlobalSecondaryIndexes"]}
    assert indexes["KeyIdIndex"] == [
        {"AttributeName": "key_id", "KeyType": "HASH"},
        {"AttributeName": "created_at", "KeyType": "RANGE"},
    ]
    assert "SecretIndex" in indexes


@pytest.mark.asyncio
async def test_create_table_enables_ttl(settings) -> None:
    name = settings.dynamodb_table_audit_logs
    dynamodb = mock_dynamodb()

    with patch("builtins.print"):
        await create_table(dynamodb, name, table_schemas(settings)[name])

    dynamodb.create_table.assert_awaited_once()
    dynamodb.meta.client.update_time_to_live.assert_awaited_once_with(
        TableName=name,
        TimeToLiveSpecification={"Enabled": True, "AttributeName": "retention_deadline"},
    )


@pytest.mark.asyncio
async def test_create_table_is_idempotent(settings) -> None:
    name = settings.dynamodb_table_audit_logs
    dynamodb = mock_dynamodb()
    dynamodb.create_table.side_effect = client_error("ResourceInUseException")
    dynamodb.meta.client.update_time_to_live.side_effect = client_error("ValidationException")

    with patch("builtins.print"):
        await create_table(dynamodb, name, table_schemas(settings)[name])


@pytest.mark.asyncio
async def test_create_table_without_ttl(settings) -> None:
    name = settings.dynamodb_table_users
    dynamodb = mock_dynamodb()

    with patch("builtins.print"):
        await create_table(dynamodb, name, table_schemas(settings)[name])

    dynamodb.meta.client.update_time_to_live.assert_not_awaited()


@pytest.mark.asyncio
async def test_create_table_propagates_other_errors(settings) -> None:
    name = settings.dynamodb_table_users
    dynamodb = mock_dynamodb()
    dynamodb.create_table.side_effect = client_error("AccessDeniedException")

    with patch("builtins.print"), pytest.raises(ClientError):
        await create_table(dynamodb, name, table_schemas(settings)[name])
