"""Infrastructure adapters."""

from .dynamodb_adapter import DynamoDBWarehouse

__all__ = [
    'DynamoDBWarehouse'
]
