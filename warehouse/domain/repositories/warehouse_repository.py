"""Warehouse repository interface."""

from abc import ABC, abstractmethod
from typing import Any, Generic, List, Optional, TypeVar

from ..entities import CollectionInfo


T = TypeVar('T')


class WarehouseRepository(ABC, Generic[T]):
    """
    Repository interface for a collection of documents of type ``T``.

    Defines the contract for provisioning a database and collection and
    for storing, retrieving and removing documents keyed by identifier,
    so callers never touch the database client directly.
    """

    @abstractmethod
    async def initialize(self, database_name: str, collection_name: str,
                         partition_key_path: Optional[str] = None) -> CollectionInfo:
        """
        Provision the database and collection if they do not exist and
        bind the repository to them.

        Safe to call repeatedly and from several processes at once.

        Args:
            database_name: Database to connect to
            collection_name: Collection to connect to
            partition_key_path: Optional partition key path, e.g. "/tenant"

        Returns:
            The bound collection
        """
        pass

    @abstractmethod
    async def get(self, document_id: str, partition_key: Optional[str] = None) -> Optional[T]:
        """
        Retrieve a single document.

        Args:
            document_id: Identifier of the document
            partition_key: Partition value, required for partitioned collections

        Returns:
            The document if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_all(self, predicate: Optional[Any] = None) -> List[T]:
        """
        Retrieve every document, or every document matching a predicate.

        The predicate is evaluated by the backing store; all result pages
        are drained in the order the store returns them.

        Args:
            predicate: Optional store-native filter condition

        Returns:
            List of documents
        """
        pass

    @abstractmethod
    async def store(self, obj: T, document_id: str, partition_key: Optional[str] = None) -> str:
        """
        Create a document unless one with the same identifier exists.

        An existing document is left untouched.

        Args:
            obj: Document to be stored
            document_id: Identifier of the document
            partition_key: Partition value, taken from the document if omitted

        Returns:
            The document identifier
        """
        pass

    @abstractmethod
    async def update(self, obj: T, document_id: str, partition_key: Optional[str] = None) -> None:
        """
        Replace an existing document.

        Args:
            obj: New document content
            document_id: Identifier of the document to replace
            partition_key: Partition value, taken from the document if omitted

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        pass

    @abstractmethod
    async def delete(self, document_id: str, partition_key: Optional[str] = None) -> None:
        """
        Delete a document.

        Args:
            document_id: Identifier of the document to delete
            partition_key: Partition value, required for partitioned collections

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        pass

    @abstractmethod
    async def clean_collection(self) -> None:
        """
        Delete the whole collection, not just its documents.

        The repository must be initialized again before further use.
        """
        pass

    @abstractmethod
    async def list_collections(self) -> List[str]:
        """
        List the collections recorded in the bound database.

        Returns:
            Collection names
        """
        pass


class RepositoryError(Exception):
    """Raised when repository operations fail."""
    pass


class DocumentNotFoundError(RepositoryError):
    """Raised when a document to replace or delete does not exist."""

    def __init__(self, document_id: str, collection: Optional[str] = None):
        self.document_id = document_id
        self.collection = collection
        where = f" in collection '{collection}'" if collection else ""
        super().__init__(f"Document '{document_id}' not found{where}")


class CollectionNotFoundError(RepositoryError):
    """Raised when the collection behind the repository no longer exists."""

    def __init__(self, collection: str):
        self.collection = collection
        super().__init__(f"Collection '{collection}' not found")


class WarehouseNotInitializedError(RepositoryError):
    """Raised when the repository is used before initialize()."""
    pass


class CollectionConfigurationError(RepositoryError):
    """Raised when an existing collection does not match the requested layout."""
    pass
