"""Document entities stored in a warehouse collection."""

from dataclasses import dataclass, field
from typing import Any, Dict, Protocol, Type, TypeVar, runtime_checkable


D = TypeVar('D', bound='SerializableDocument')


@runtime_checkable
class SerializableDocument(Protocol):
    """
    Shape every document type handled by a warehouse must have.

    The warehouse never inspects payload fields; it asks the document
    type to convert itself to and from a plain dictionary.
    """

    def to_dict(self) -> dict:
        ...

    @classmethod
    def from_dict(cls: Type[D], data: dict) -> D:
        ...


@dataclass
class JsonDocument:
    """
    Schemaless document: an identifier plus arbitrary JSON-like fields.

    Useful when the caller has no domain entity for a collection,
    e.g. inspection scripts.
    """
    id: str
    body: Dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a payload field."""
        return self.body.get(key, default)

    def to_dict(self) -> dict:
        """Convert document to dictionary for serialization."""
        data = dict(self.body)
        data['id'] = self.id
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'JsonDocument':
        """Create document from dictionary."""
        body = {k: v for k, v in data.items() if k != 'id'}
        return cls(id=data['id'], body=body)
