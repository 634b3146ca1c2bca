"""Table layouts shared by the DynamoDB provisioning script and the memory store."""

from dataclasses import dataclass, field

from admin_keys.config import Settings

ADMIN_KEY_SECRET_INDEX = "AdminKeyIndex"
AUDIT_KEY_ID_INDEX = "KeyIdIndex"
AUDIT_SECRET_INDEX = "SecretIndex"
USER_EMAIL_INDEX = "EmailIndex"


@dataclass(frozen=True)
class IndexSchema:
    """Global secondary index definition."""

    partition_key: str
    sort_key: str | None = None


@dataclass(frozen=True)
class TableSchema:
    """Key layout of one table."""

    partition_key: str
    sort_key: str | None = None
    indexes: dict[str, IndexSchema] = field(default_factory=dict)
    ttl_attribute: str | None = None

    def primary_key(self, item: dict) -> dict:
        """Extract the primary key attributes from an item."""
        key = {self.partition_key: item[self.partition_key]}
        if self.sort_key:
            key[self.sort_key] = item[self.sort_key]
        return key

    def key_attributes(self) -> list[str]:
        """All attribute names that take part in a key (table or index)."""
        names = [self.partition_key]
        if self.sort_key:
            names.append(self.sort_key)
        for index in self.indexes.values():
            for name in (index.partition_key, index.sort_key):
                if name and name not in names:
                    names.append(name)
        return names


def table_schemas(settings: Settings) -> dict[str, TableSchema]:
    """
    Build the table layouts for the configured table names.

    Args:
        settings: Application settings

    Returns:
        Mapping of table name to its schema
    """
    return {
        settings.dynamodb_table_admin_keys: TableSchema(
            partition_key="key_id",
            indexes={ADMIN_KEY_SECRET_INDEX: IndexSchema(partition_key="secret")},
        ),
        settings.dynamodb_table_audit_logs: TableSchema(
            partition_key="log_id",
            indexes={
                AUDIT_KEY_ID_INDEX: IndexSchema(
                    partition_key="key_id", sort_key="created_at"
                ),
                AUDIT_SECRET_INDEX: IndexSchema(
                    partition_key="secret", sort_key="created_at"
                ),
            },
            ttl_attribute="retention_deadline",
        ),
        settings.dynamodb_table_users: TableSchema(
            partition_key="user_id",
            indexes={USER_EMAIL_INDEX: IndexSchema(partition_key="email")},
        ),
    }
