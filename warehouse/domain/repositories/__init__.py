"""Repository interfaces for the domain layer."""

from .warehouse_repository import (
    CollectionConfigurationError,
    CollectionNotFoundError,
    DocumentNotFoundError,
    RepositoryError,
    WarehouseNotInitializedError,
    WarehouseRepository,
)

__all__ = [
    'WarehouseRepository',
    'RepositoryError',
    'DocumentNotFoundError',
    'CollectionNotFoundError',
    'WarehouseNotInitializedError',
    'CollectionConfigurationError'
]
