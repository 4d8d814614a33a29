"""Domain entities for the warehouse."""

from .document import JsonDocument, SerializableDocument
from .collection import CollectionInfo, parse_partition_key_path

__all__ = [
    'JsonDocument',
    'SerializableDocument',
    'CollectionInfo',
    'parse_partition_key_path'
]
