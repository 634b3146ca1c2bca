"""Script to create DynamoDB tables for LocalStack or AWS."""

import asyncio
from typing import Any, Dict

import aioboto3
from botocore.exceptions import ClientError

from admin_keys.config import Settings
from admin_keys.store.dynamodb import get_dynamodb_config
from admin_keys.store.schema import TableSchema, table_schemas

THROUGHPUT = {"ReadCapacityUnits": 5, "WriteCapacityUnits": 5}


def _key_schema(partition_key: str, sort_key: str | None) -> list[Dict[str, str]]:
    schema = [{"AttributeName": partition_key, "KeyType": "HASH"}]
    if sort_key:
        schema.append({"AttributeName": sort_key, "KeyType": "RANGE"})
    return schema


def table_definition(table_name: str, schema: TableSchema) -> Dict[str, Any]:
    """
    Build ``create_table`` parameters for a table layout.

    All key attributes are strings.

    Args:
        table_name: Name of the table
        schema: Table layout with its global secondary indexes

    Returns:
        Keyword arguments for ``create_table``
    """
    definition: Dict[str, Any] = {
        "TableName": table_name,
        "KeySchema": _key_schema(schema.partition_key, schema.sort_key),
        "AttributeDefinitions": [
            {"AttributeName": name, "AttributeType": "S"}
            for name in schema.key_attributes()
        ],
        "BillingMode": "PROVISIONED",
        "ProvisionedThroughput": THROUGHPUT,
    }
    if schema.indexes:
        definition["GlobalSecondaryIndexes"] = [
            {
                "IndexName": index_name,
                "KeySchema": _key_schema(index.partition_key, index.sort_key),
                "Projection": {"ProjectionType": "ALL"},
                "ProvisionedThroughput": THROUGHPUT,
            }
            for index_name, index in schema.indexes.items()
        ]
    return definition


async def create_table(dynamodb: Any, table_name: str, schema: TableSchema) -> None:
    """
    Create one table and enable TTL if the layout has a TTL attribute.

    Args:
        dynamodb: DynamoDB resource
        table_name: Name of the table
        schema: Table layout
    """
    try:
        table = await dynamodb.create_table(**table_definition(table_name, schema))
        await table.wait_until_exists()
        print(f"✓ Created table: {table_name}")
    except ClientError as e:
        if e.response["Error"]["Code"] == "ResourceInUseException":
            print(f"→ Table already exists: {table_name}")
        else:
            raise

    if schema.ttl_attribute:
        try:
            await dynamodb.meta.client.update_time_to_live(
                TableName=table_name,
                TimeToLiveSpecification={
                    "Enabled": True,
                    "AttributeName": schema.ttl_attribute,
                },
            )
            print(f"✓ TTL enabled on {table_name}.{schema.ttl_attribute}")
        except ClientError as e:
            # Raised when TTL is already enabled
            if e.response["Error"]["Code"] != "ValidationException":
                raise
            print(f"→ TTL already enabled on {table_name}")


async def create_all(settings: Settings) -> None:
    """Create the admin key, audit log and user tables."""
    session = aioboto3.Session()
    async with session.resource("dynamodb", **get_dynamodb_config(settings)) as dynamodb:
        for table_name, schema in table_schemas(settings).items():
            await create_table(dynamodb, table_name, schema)


async def main() -> None:
    """Create all required DynamoDB tables."""
    settings = Settings()

    print("Creating DynamoDB tables...")
    print(f"Region: {settings.aws_region}")
    print(f"Endpoint: {settings.dynamodb_endpoint_url or 'AWS'}")
    print()

    await create_all(settings)

    print()
    print("✓ All tables created successfully!")


if __name__ == "__main__":
    asyncio.run(main())
