"""DynamoDB adapter for warehouse persistence."""

import asyncio
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar

import boto3
from boto3.dynamodb.conditions import Attr, ConditionBase, Key
from botocore.exceptions import ClientError

from ...config import WAREHOUSE_CONFIG, WarehouseSettings, get_settings
from ...domain.entities import CollectionInfo, parse_partition_key_path
from ...domain.repositories import (
    CollectionConfigurationError,
    CollectionNotFoundError,
    DocumentNotFoundError,
    WarehouseNotInitializedError,
    WarehouseRepository,
)

logger = logging.getLogger(__name__)

T = TypeVar('T')

ID_ATTRIBUTE = WAREHOUSE_CONFIG["id_attribute"]
CATALOG_PK = WAREHOUSE_CONFIG["catalog_partition_key"]
CATALOG_SK = WAREHOUSE_CONFIG["catalog_sort_key"]


class DynamoDBWarehouse(WarehouseRepository[T]):
    """
    DynamoDB implementation of the WarehouseRepository.

    A database is a catalog table using the pk/sk single-table layout:
    one metadata item for the database and one item per collection.
    Each collection is its own table named ``<database>.<collection>``,
    keyed by ``id`` or, when partitioned, by the partition attribute
    with ``id`` as range key.

    Every call is a round trip to DynamoDB; nothing is cached and
    nothing is retried beyond what botocore does on its own.
    """

    def __init__(self, document_type: Type[T], settings: Optional[WarehouseSettings] = None,
                 dynamodb: Any = None):
        self.document_type = document_type
        self.settings = settings or get_settings()
        self.dynamodb = dynamodb or boto3.resource(
            'dynamodb',
            region_name=self.settings.region_name,
            endpoint_url=self.settings.endpoint_url,
            aws_access_key_id=self.settings.aws_access_key_id,
            aws_secret_access_key=self.settings.aws_secret_access_key
        )
        self.client = self.dynamodb.meta.client
        self._collection: Optional[CollectionInfo] = None

    @classmethod
    def from_connection(cls, document_type: Type[T], endpoint_url: str,
                        aws_access_key_id: str, aws_secret_access_key: str,
                        region_name: str = WAREHOUSE_CONFIG["region_name"]) -> 'DynamoDBWarehouse[T]':
        """Create a warehouse for an endpoint URL and credential pair."""
        settings = WarehouseSettings(
            region_name=region_name,
            endpoint_url=endpoint_url,
            aws_access_key_id=aws_access_key_id,
            aws_secret_access_key=aws_secret_access_key
        )
        return cls(document_type, settings=settings)

    @property
    def collection(self) -> Optional[CollectionInfo]:
        """The bound collection, None before initialize()."""
        return self._collection

    async def initialize(self, database_name: str, collection_name: str,
                         partition_key_path: Optional[str] = None) -> CollectionInfo:
        """Create database and collection if they don't exist and bind to them."""
        if not database_name or not collection_name:
            raise ValueError("Database and collection names are required")

        partition_key = parse_partition_key_path(partition_key_path)
        if partition_key == ID_ATTRIBUTE:
            # Partitioning on the identifier is the plain id-keyed layout
            partition_key = None

        collection = CollectionInfo(
            database=database_name,
            name=collection_name,
            table_name=self.settings.table_name(database_name, collection_name),
            partition_key=partition_key
        )

        await asyncio.to_thread(self._create_database_if_not_exists, database_name)
        collection = await asyncio.to_thread(self._create_collection_if_not_exists, collection)

        self._collection = collection
        logger.info(f"📋 Warehouse bound to {collection.table_name}"
                    + (f" (partitioned by {collection.partition_key_path})" if collection.is_partitioned else ""))
        return collection

    async def get(self, document_id: str, partition_key: Optional[str] = None) -> Optional[T]:
        """Retrieve one document, None when it does not exist."""
        collection = self._require_collection()
        key = self._document_key(collection, document_id, partition_key)

        response = await self._call(collection, self._table(collection).get_item, Key=key)

        item = response.get('Item')
        if item is None:
            return None
        return self._item_to_document(item)

    async def get_all(self, predicate: Optional[ConditionBase] = None) -> List[T]:
        """Scan the collection, draining every page."""
        collection = self._require_collection()
        if predicate is not None and not isinstance(predicate, ConditionBase):
            raise TypeError(
                f"Predicate must be a boto3.dynamodb.conditions condition, got {type(predicate).__name__}"
            )

        table = self._table(collection)
        scan_kwargs: Dict[str, Any] = {}
        if predicate is not None:
            scan_kwargs['FilterExpression'] = predicate
        if self.settings.page_size:
            scan_kwargs['Limit'] = self.settings.page_size

        documents = []
        pages = 0
        while True:
            response = await self._call(collection, table.scan, **scan_kwargs)
            pages += 1
            documents.extend(self._item_to_document(item) for item in response.get('Items', []))

            last_evaluated_key = response.get('LastEvaluatedKey')
            if not last_evaluated_key:
                break
            scan_kwargs['ExclusiveStartKey'] = last_evaluated_key

        logger.debug(f"Scanned {collection.table_name}: {len(documents)} documents in {pages} pages")
        return documents

    async def store(self, obj: T, document_id: str, partition_key: Optional[str] = None) -> str:
        """Create the document unless it already exists."""
        collection = self._require_collection()
        item = self._document_to_item(collection, obj, document_id, partition_key)

        try:
            await self._call(
                collection,
                self._table(collection).put_item,
                Item=item,
                ConditionExpression=Attr(ID_ATTRIBUTE).not_exists()
            )
        except ClientError as e:
            if _error_code(e) != 'ConditionalCheckFailedException':
                raise
            logger.debug(f"Document {document_id} already exists in {collection.name}, left unchanged")

        return document_id

    async def update(self, obj: T, document_id: str, partition_key: Optional[str] = None) -> None:
        """Replace an existing document."""
        collection = self._require_collection()
        item = self._document_to_item(collection, obj, document_id, partition_key)

        try:
            await self._call(
                collection,
                self._table(collection).put_item,
                Item=item,
                ConditionExpression=Attr(ID_ATTRIBUTE).exists()
            )
        except ClientError as e:
            if _error_code(e) != 'ConditionalCheckFailedException':
                raise
            logger.warning(f"Cannot update missing document {document_id} in {collection.name}")
            raise DocumentNotFoundError(document_id, collection.name) from e

    async def delete(self, document_id: str, partition_key: Optional[str] = None) -> None:
        """Delete an existing document."""
        collection = self._require_collection()
        key = self._document_key(collection, document_id, partition_key)

        try:
            await self._call(
                collection,
                self._table(collection).delete_item,
                Key=key,
                ConditionExpression=Attr(ID_ATTRIBUTE).exists()
            )
        except ClientError as e:
            if _error_code(e) != 'ConditionalCheckFailedException':
                raise
            logger.warning(f"Cannot delete missing document {document_id} in {collection.name}")
            raise DocumentNotFoundError(document_id, collection.name) from e

    async def clean_collection(self) -> None:
        """Drop the collection table and its catalog entry."""
        collection = self._require_collection()

        await self._call(collection, self._delete_collection, collection)

        self._collection = None
        logger.info(f"🗑️ Deleted collection {collection.table_name}")

    async def list_collections(self) -> List[str]:
        """List collections recorded in the bound database."""
        collection = self._require_collection()
        catalog = self.dynamodb.Table(collection.database)

        query_kwargs: Dict[str, Any] = {
            'KeyConditionExpression': (
                Key(CATALOG_PK).eq(_database_pk(collection.database))
                & Key(CATALOG_SK).begins_with(WAREHOUSE_CONFIG["catalog_collection_prefix"])
            )
        }

        names = []
        while True:
            response = await asyncio.to_thread(catalog.query, **query_kwargs)
            names.extend(item['name'] for item in response.get('Items', []))

            last_evaluated_key = response.get('LastEvaluatedKey')
            if not last_evaluated_key:
                break
            query_kwargs['ExclusiveStartKey'] = last_evaluated_key

        return names

    # Provisioning

    def _create_database_if_not_exists(self, database_name: str) -> None:
        """Create the catalog table and its database metadata item."""
        self._create_table_if_not_exists(
            database_name,
            [
                {'AttributeName': CATALOG_PK, 'KeyType': 'HASH'},
                {'AttributeName': CATALOG_SK, 'KeyType': 'RANGE'}
            ]
        )

        catalog = self.dynamodb.Table(database_name)
        try:
            catalog.put_item(
                Item={
                    CATALOG_PK: _database_pk(database_name),
                    CATALOG_SK: WAREHOUSE_CONFIG["catalog_metadata_sk"],
                    'database': database_name,
                    'created_at': datetime.now(timezone.utc).isoformat()
                },
                ConditionExpression=Attr(CATALOG_PK).not_exists()
            )
        except ClientError as e:
            if _error_code(e) != 'ConditionalCheckFailedException':
                raise

    def _create_collection_if_not_exists(self, collection: CollectionInfo) -> CollectionInfo:
        """Create the collection table and record it in the catalog."""
        key_schema = self._key_schema(collection.partition_key)
        self._create_table_if_not_exists(collection.table_name, key_schema)
        self._check_key_schema(collection, key_schema)

        catalog = self.dynamodb.Table(collection.database)
        record = collection.with_created_at()
        catalog_key = {
            CATALOG_PK: _database_pk(collection.database),
            CATALOG_SK: f"{WAREHOUSE_CONFIG['catalog_collection_prefix']}{collection.name}"
        }

        try:
            catalog.put_item(
                Item={**catalog_key, **record.to_dict()},
                ConditionExpression=Attr(CATALOG_PK).not_exists()
            )
            return record
        except ClientError as e:
            if _error_code(e) != 'ConditionalCheckFailedException':
                raise

        existing = catalog.get_item(Key=catalog_key).get('Item')
        if existing is not None and existing.get('partition_key_path') == record.partition_key_path:
            return CollectionInfo.from_dict(existing)

        # Stale entry from a table dropped outside the warehouse; the table wins
        logger.info(f"Replacing catalog entry for {collection.table_name} with its current layout")
        catalog.put_item(Item={**catalog_key, **record.to_dict()})
        return record

    def _create_table_if_not_exists(self, table_name: str, key_schema: List[Dict[str, str]]) -> bool:
        """
        Create a table, treating "already exists" as success.

        Returns:
            True if this call created the table
        """
        params: Dict[str, Any] = {
            'TableName': table_name,
            'KeySchema': key_schema,
            'AttributeDefinitions': [
                {'AttributeName': key['AttributeName'], 'AttributeType': 'S'}
                for key in key_schema
            ]
        }
        params.update(self._billing_params())

        try:
            self.client.create_table(**params)
            created = True
            logger.info(f"✅ Created table {table_name}")
        except ClientError as e:
            if _error_code(e) != 'ResourceInUseException':
                raise
            created = False
            logger.info(f"Table {table_name} already exists")

        waiter = self.client.get_waiter('table_exists')
        waiter.wait(TableName=table_name, WaiterConfig=_waiter_config())
        return created

    def _check_key_schema(self, collection: CollectionInfo, key_schema: List[Dict[str, str]]) -> None:
        """Make sure an existing table is keyed the way the collection expects."""
        description = self.client.describe_table(TableName=collection.table_name)['Table']
        actual = {key['KeyType']: key['AttributeName'] for key in description['KeySchema']}
        expected = {key['KeyType']: key['AttributeName'] for key in key_schema}

        if actual != expected:
            raise CollectionConfigurationError(
                f"Collection '{collection.name}' exists with key schema {actual}, "
                f"requested {expected}"
            )

    def _delete_collection(self, collection: CollectionInfo) -> None:
        """Delete the collection table and drop it from the catalog."""
        try:
            self.client.delete_table(TableName=collection.table_name)
            waiter = self.client.get_waiter('table_not_exists')
            waiter.wait(TableName=collection.table_name, WaiterConfig=_waiter_config())
        except ClientError as e:
            if _error_code(e) != 'ResourceNotFoundException':
                raise
            logger.info(f"Table {collection.table_name} was already deleted")

        self.dynamodb.Table(collection.database).delete_item(
            Key={
                CATALOG_PK: _database_pk(collection.database),
                CATALOG_SK: f"{WAREHOUSE_CONFIG['catalog_collection_prefix']}{collection.name}"
            }
        )

    def _key_schema(self, partition_key: Optional[str]) -> List[Dict[str, str]]:
        if partition_key is None:
            return [{'AttributeName': ID_ATTRIBUTE, 'KeyType': 'HASH'}]
        return [
            {'AttributeName': partition_key, 'KeyType': 'HASH'},
            {'AttributeName': ID_ATTRIBUTE, 'KeyType': 'RANGE'}
        ]

    def _billing_params(self) -> Dict[str, Any]:
        if self.settings.throughput:
            return {
                'BillingMode': WAREHOUSE_CONFIG["provisioned_billing_mode"],
                'ProvisionedThroughput': {
                    'ReadCapacityUnits': self.settings.throughput,
                    'WriteCapacityUnits': self.settings.throughput
                }
            }
        return {'BillingMode': WAREHOUSE_CONFIG["billing_mode"]}

    # Documents

    def _require_collection(self) -> CollectionInfo:
        if self._collection is None:
            raise WarehouseNotInitializedError(
                "Warehouse is not bound to a collection; call initialize() first"
            )
        return self._collection

    def _table(self, collection: CollectionInfo):
        return self.dynamodb.Table(collection.table_name)

    async def _call(self, collection: CollectionInfo, operation: Callable[..., Any], *args: Any,
                    **kwargs: Any) -> Any:
        """Run a blocking DynamoDB call off the event loop."""
        try:
            return await asyncio.to_thread(operation, *args, **kwargs)
        except ClientError as e:
            if _error_code(e) != 'ResourceNotFoundException':
                raise
            logger.warning(f"Collection table {collection.table_name} does not exist")
            raise CollectionNotFoundError(collection.name) from e

    def _document_key(self, collection: CollectionInfo, document_id: str,
                      partition_key: Optional[str]) -> Dict[str, str]:
        _check_partition_argument(collection, partition_key)
        key = {ID_ATTRIBUTE: document_id}
        if collection.is_partitioned:
            if partition_key is None:
                raise ValueError(
                    f"Collection '{collection.name}' is partitioned by "
                    f"'{collection.partition_key_path}'; a partition key value is required"
                )
            key[collection.partition_key] = partition_key
        return key

    def _document_to_item(self, collection: CollectionInfo, obj: T, document_id: str,
                          partition_key: Optional[str]) -> Dict[str, Any]:
        """Convert a document to a DynamoDB item keyed for the collection."""
        _check_partition_argument(collection, partition_key)
        data = obj.to_dict()
        if not isinstance(data, dict):
            raise TypeError(f"{type(obj).__name__}.to_dict() must return a dict")
        data = dict(data)

        own_id = data.get(ID_ATTRIBUTE)
        if own_id is not None and own_id != document_id:
            raise ValueError(f"Document carries id '{own_id}' but was addressed as '{document_id}'")
        data[ID_ATTRIBUTE] = document_id

        if collection.is_partitioned:
            attribute = collection.partition_key
            own_value = data.get(attribute)
            if partition_key is not None:
                if own_value is not None and own_value != partition_key:
                    raise ValueError(
                        f"Document carries {attribute}='{own_value}' but partition key '{partition_key}' was given"
                    )
                data[attribute] = partition_key
            elif own_value is None:
                raise ValueError(
                    f"Document {document_id} has no value for partition key '{collection.partition_key_path}'"
                )

        return self._convert_to_dynamo_format(data)

    def _item_to_document(self, item: Dict[str, Any]) -> T:
        return self.document_type.from_dict(self._convert_from_dynamo_format(item))

    def _convert_to_dynamo_format(self, data: Any) -> Any:
        """Convert data to DynamoDB-compatible format."""
        if isinstance(data, dict):
            return {k: self._convert_to_dynamo_format(v) for k, v in data.items()}
        elif isinstance(data, (list, tuple)):
            return [self._convert_to_dynamo_format(item) for item in data]
        elif isinstance(data, float):
            return Decimal(str(data))
        elif isinstance(data, datetime):
            return data.isoformat()
        else:
            return data

    def _convert_from_dynamo_format(self, data: Any) -> Any:
        """Convert data from DynamoDB format."""
        if isinstance(data, dict):
            return {k: self._convert_from_dynamo_format(v) for k, v in data.items()}
        elif isinstance(data, list):
            return [self._convert_from_dynamo_format(item) for item in data]
        elif isinstance(data, Decimal):
            return int(data) if data == data.to_integral_value() else float(data)
        else:
            return data


def _error_code(error: ClientError) -> str:
    return error.response.get('Error', {}).get('Code', '')


def _check_partition_argument(collection: CollectionInfo, partition_key: Optional[str]) -> None:
    if partition_key is not None and not collection.is_partitioned:
        raise ValueError(
            f"Collection '{collection.name}' is not partitioned; "
            f"partition key '{partition_key}' cannot be used"
        )


def _database_pk(database_name: str) -> str:
    return f"{WAREHOUSE_CONFIG['catalog_database_prefix']}{database_name}"


def _waiter_config() -> Dict[str, int]:
    return {
        'Delay': WAREHOUSE_CONFIG["waiter_delay_seconds"],
        'MaxAttempts': WAREHOUSE_CONFIG["waiter_max_attempts"]
    }
