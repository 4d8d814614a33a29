"""Collection entity describing where a warehouse keeps its documents."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


@dataclass(frozen=True)
class CollectionInfo:
    """
    Coordinates of a provisioned collection.

    A collection lives in a database and maps to exactly one table.
    When partitioned, ``partition_key`` is the top-level document
    attribute the table is hashed on and ``id`` becomes the range key.
    """
    database: str
    name: str
    table_name: str
    partition_key: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_partitioned(self) -> bool:
        """Check if the collection is partitioned."""
        return self.partition_key is not None

    @property
    def partition_key_path(self) -> Optional[str]:
        """Partition key expressed as a document path ("/tenant")."""
        if self.partition_key is None:
            return None
        return f"/{self.partition_key}"

    def to_dict(self) -> dict:
        """Convert collection info to dictionary for serialization."""
        return {
            "database": self.database,
            "name": self.name,
            "table_name": self.table_name,
            "partition_key_path": self.partition_key_path,
            "created_at": self.created_at.isoformat() if self.created_at else None
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'CollectionInfo':
        """Create collection info from dictionary."""
        return cls(
            database=data['database'],
            name=data['name'],
            table_name=data['table_name'],
            partition_key=parse_partition_key_path(data.get('partition_key_path')),
            created_at=datetime.fromisoformat(data['created_at']) if data.get('created_at') else None
        )

    def with_created_at(self, created_at: Optional[datetime] = None) -> 'CollectionInfo':
        """Return a copy stamped with a creation time (now by default)."""
        return CollectionInfo(
            database=self.database,
            name=self.name,
            table_name=self.table_name,
            partition_key=self.partition_key,
            created_at=created_at or datetime.now(timezone.utc)
        )


def parse_partition_key_path(path: Optional[str]) -> Optional[str]:
    """
    Turn a partition key path into the attribute name it designates.

    Accepts "/tenant" or "tenant". Only top-level attributes can be
    table keys, so nested paths such as "/address/city" are rejected.

    Raises:
        ValueError: If the path is empty or nested
    """
    if path is None:
        return None

    attribute = path.strip()
    if attribute.startswith('/'):
        attribute = attribute[1:]

    if not attribute:
        raise ValueError(f"Invalid partition key path: '{path}'")
    if '/' in attribute:
        raise ValueError(
            f"Partition key path '{path}' is nested; only top-level attributes are supported"
        )
    return attribute
