"""
Configuration for warehouse connections and collection provisioning.
"""

import os
from dataclasses import dataclass
from typing import Optional

WAREHOUSE_CONFIG = {
    "region_name": "us-east-1",

    # Tables
    "table_name_separator": ".",
    "id_attribute": "id",
    "billing_mode": "PAY_PER_REQUEST",
    "provisioned_billing_mode": "PROVISIONED",

    # Catalog (database) table layout
    "catalog_partition_key": "pk",
    "catalog_sort_key": "sk",
    "catalog_metadata_sk": "metadata",
    "catalog_database_prefix": "database#",
    "catalog_collection_prefix": "collection#",

    # Waiters
    "waiter_delay_seconds": 2,
    "waiter_max_attempts": 30
}


@dataclass(frozen=True)
class WarehouseSettings:
    """
    Connection and provisioning settings.

    Attributes:
        region_name: AWS region of the DynamoDB endpoint
        endpoint_url: Custom endpoint, e.g. a local DynamoDB
        aws_access_key_id: Access key; the boto3 credential chain is used when unset
        aws_secret_access_key: Secret key paired with the access key
        throughput: Provisioned read/write capacity; on-demand when unset
        page_size: Items evaluated per scan page; store default when unset
        table_name_separator: Joins database and collection names into a table name
    """

    region_name: str = WAREHOUSE_CONFIG["region_name"]
    endpoint_url: Optional[str] = None
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    throughput: Optional[int] = None
    page_size: Optional[int] = None
    table_name_separator: str = WAREHOUSE_CONFIG["table_name_separator"]

    def table_name(self, database_name: str, collection_name: str) -> str:
        """Name of the table backing a collection."""
        return f"{database_name}{self.table_name_separator}{collection_name}"


def _env_int(name: str) -> Optional[int]:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"Environment variable {name} must be an integer, got '{raw}'") from e
    if value <= 0:
        raise ValueError(f"Environment variable {name} must be positive, got {value}")
    return value


def get_settings() -> WarehouseSettings:
    """Build settings from environment variables."""
    return WarehouseSettings(
        region_name=os.environ.get('AWS_REGION', WAREHOUSE_CONFIG["region_name"]),
        endpoint_url=os.environ.get('WAREHOUSE_ENDPOINT_URL') or None,
        aws_access_key_id=os.environ.get('AWS_ACCESS_KEY_ID') or None,
        aws_secret_access_key=os.environ.get('AWS_SECRET_ACCESS_KEY') or None,
        throughput=_env_int('WAREHOUSE_THROUGHPUT'),
        page_size=_env_int('WAREHOUSE_PAGE_SIZE'),
        table_name_separator=os.environ.get(
            'WAREHOUSE_TABLE_SEPARATOR', WAREHOUSE_CONFIG["table_name_separator"]
        )
    )
