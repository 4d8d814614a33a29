"""
Warehouse: generic document store access over DynamoDB.

    warehouse = DynamoDBWarehouse(JsonDocument)
    await warehouse.initialize("inventory", "items")
    await warehouse.store(JsonDocument(id="a1", body={"qty": 3}), "a1")
"""

from .config import WarehouseSettings, get_settings
from .domain.entities import CollectionInfo, JsonDocument, SerializableDocument
from .domain.repositories import (
    CollectionConfigurationError,
    CollectionNotFoundError,
    DocumentNotFoundError,
    RepositoryError,
    WarehouseNotInitializedError,
    WarehouseRepository,
)
from .infrastructure.adapters import DynamoDBWarehouse

__all__ = [
    'DynamoDBWarehouse',
    'WarehouseRepository',
    'WarehouseSettings',
    'get_settings',
    'CollectionInfo',
    'JsonDocument',
    'SerializableDocument',
    'RepositoryError',
    'DocumentNotFoundError',
    'CollectionNotFoundError',
    'WarehouseNotInitializedError',
    'CollectionConfigurationError'
]
