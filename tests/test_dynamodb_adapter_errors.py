"""Error mapping and pagination tests with stubbed DynamoDB responses.

Tests verify that:
1. Every scan page is drained in order
2. Only not-found outcomes are translated
3. Any other client error reaches the caller untouched
"""

from __future__ import annotations

import asyncio

import boto3
import pytest
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError
from botocore.stub import Stubber

from warehouse import (
    CollectionInfo,
    CollectionNotFoundError,
    DocumentNotFoundError,
    DynamoDBWarehouse,
    JsonDocument,
    RepositoryError,
    WarehouseSettings,
)


@pytest.fixture
def stubbed(aws_credentials):
    dynamodb = boto3.resource("dynamodb", region_name="us-east-1")
    warehouse = DynamoDBWarehouse(
        JsonDocument, settings=WarehouseSettings(region_name="us-east-1"), dynamodb=dynamodb
    )
    # Bind directly; provisioning is covered by the emulated tests.
    warehouse._collection = CollectionInfo(database="shop", name="items", table_name="shop.items")

    stubber = Stubber(dynamodb.meta.client)
    with stubber:
        yield warehouse, stubber
    stubber.assert_no_pending_responses()


def _page(ids, last_key=None):
    page = {
        "Items": [{"id": {"S": i}, "qty": {"N": "1"}} for i in ids],
        "Count": len(ids),
        "ScannedCount": len(ids),
    }
    if last_key is not None:
        page["LastEvaluatedKey"] = {"id": {"S": last_key}}
    return page


class TestPagination:
    """get_all must return the union of all pages, in page order."""

    def test_drains_every_page(self, stubbed):
        warehouse, stubber = stubbed
        stubber.add_response("scan", _page(["a", "b"], last_key="b"))
        stubber.add_response("scan", _page(["c"], last_key="c"))
        stubber.add_response("scan", _page(["d", "e"]))

        documents = asyncio.run(warehouse.get_all(Attr("qty").eq(1)))

        assert [d.id for d in documents] == ["a", "b", "c", "d", "e"]
        assert all(d.get("qty") == 1 for d in documents)

    def test_empty_pages_are_followed(self, stubbed):
        warehouse, stubber = stubbed
        stubber.add_response("scan", _page([], last_key="a"))
        stubber.add_response("scan", _page(["b"]))

        documents = asyncio.run(warehouse.get_all())

        assert [d.id for d in documents] == ["b"]


class TestErrorPropagation:
    """Only not-found outcomes are translated."""

    def test_access_denied_on_get_propagates_unchanged(self, stubbed):
        warehouse, stubber = stubbed
        stubber.add_client_error("get_item", service_error_code="AccessDeniedException",
                                 http_status_code=400)

        with pytest.raises(ClientError) as excinfo:
            asyncio.run(warehouse.get("a1"))

        assert excinfo.value.response["Error"]["Code"] == "AccessDeniedException"
        assert not isinstance(excinfo.value, RepositoryError)

    def test_throttling_on_store_propagates_unchanged(self, stubbed):
        warehouse, stubber = stubbed
        stubber.add_client_error("put_item",
                                 service_error_code="ProvisionedThroughputExceededException",
                                 http_status_code=400)

        with pytest.raises(ClientError) as excinfo:
            asyncio.run(warehouse.store(JsonDocument(id="a1"), "a1"))

        assert excinfo.value.response["Error"]["Code"] == "ProvisionedThroughputExceededException"

    def test_existing_document_on_store_is_not_an_error(self, stubbed):
        warehouse, stubber = stubbed
        stubber.add_client_error("put_item", service_error_code="ConditionalCheckFailedException",
                                 http_status_code=400)

        assert asyncio.run(warehouse.store(JsonDocument(id="a1"), "a1")) == "a1"

    def test_failed_condition_on_delete_is_not_found(self, stubbed):
        warehouse, stubber = stubbed
        stubber.add_client_error("delete_item", service_error_code="ConditionalCheckFailedException",
                                 http_status_code=400)

        with pytest.raises(DocumentNotFoundError) as excinfo:
            asyncio.run(warehouse.delete("a1"))

        assert excinfo.value.collection == "items"
        assert isinstance(excinfo.value.__cause__, ClientError)

    def test_missing_table_on_scan_is_collection_not_found(self, stubbed):
        warehouse, stubber = stubbed
        stubber.add_client_error("scan", service_error_code="ResourceNotFoundException",
                                 http_status_code=400)

        with pytest.raises(CollectionNotFoundError):
            asyncio.run(warehouse.get_all())

    def test_validation_error_on_update_propagates_unchanged(self, stubbed):
        warehouse, stubber = stubbed
        stubber.add_client_error("put_item", service_error_code="ValidationException",
                                 http_status_code=400)

        with pytest.raises(ClientError) as excinfo:
            asyncio.run(warehouse.update(JsonDocument(id="a1"), "a1"))

        assert excinfo.value.response["Error"]["Code"] == "ValidationException"
