#!/usr/bin/env python3
"""
Print the documents of a warehouse collection in readable form.
"""
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))
from warehouse import DynamoDBWarehouse, JsonDocument, get_settings


async def query_collection(database: str, collection: str, partition_key_path: str = None,
                           field: str = None, value: str = None) -> int:
    settings = get_settings()
    warehouse = DynamoDBWarehouse(JsonDocument, settings=settings)

    # initialize() provisions missing tables; a dump must not create any
    for table_name in (database, settings.table_name(database, collection)):
        try:
            warehouse.client.describe_table(TableName=table_name)
        except ClientError as e:
            if e.response['Error']['Code'] != 'ResourceNotFoundException':
                raise
            print(f"❌ Table {table_name} does not exist")
            return 0

    info = await warehouse.initialize(database, collection, partition_key_path)

    predicate = Attr(field).eq(value) if field else None
    documents = await warehouse.get_all(predicate)

    print(f"🗄️ Collection {info.name} (table {info.table_name})")
    print("=" * 50)
    for document in documents:
        print(f"\n📄 {document.id}")
        print(json.dumps(document.body, indent=2, ensure_ascii=False, default=str))

    print(f"\n📊 Total documents: {len(documents)}")
    print(f"📚 Collections in {database}: {', '.join(await warehouse.list_collections())}")
    return len(documents)


def main():
    parser = argparse.ArgumentParser(description="Dump a warehouse collection")
    parser.add_argument("database", help="Database name")
    parser.add_argument("collection", help="Collection name")
    parser.add_argument("--partition-key", help="Partition key path, e.g. /tenant")
    parser.add_argument("--where", nargs=2, metavar=("FIELD", "VALUE"),
                        help="Only documents whose FIELD equals VALUE")
    parser.add_argument("--verbose", action="store_true", help="Log DynamoDB calls")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    field, value = args.where if args.where else (None, None)
    try:
        asyncio.run(query_collection(args.database, args.collection, args.partition_key, field, value))
    except Exception as e:
        print(f"❌ Error querying collection: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
