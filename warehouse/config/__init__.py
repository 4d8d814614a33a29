"""Warehouse configuration."""

from .warehouse_config import WAREHOUSE_CONFIG, WarehouseSettings, get_settings

__all__ = [
    'WAREHOUSE_CONFIG',
    'WarehouseSettings',
    'get_settings'
]
