"""Unit tests for domain entities."""

from datetime import datetime, timezone

import pytest

from warehouse import CollectionInfo, JsonDocument, SerializableDocument
from warehouse.domain.entities import parse_partition_key_path


class TestJsonDocument:
    """Tests for the schemaless document type."""

    def test_to_dict_puts_id_with_body(self):
        doc = JsonDocument(id="a1", body={"qty": 3})
        assert doc.to_dict() == {"id": "a1", "qty": 3}

    def test_from_dict_splits_id_from_body(self):
        doc = JsonDocument.from_dict({"id": "a1", "qty": 3, "tags": ["x"]})
        assert doc.id == "a1"
        assert doc.body == {"qty": 3, "tags": ["x"]}
        assert doc.get("missing", "default") == "default"

    def test_satisfies_serializable_protocol(self):
        assert isinstance(JsonDocument(id="a1"), SerializableDocument)


class TestPartitionKeyPath:
    """Tests for partition key path parsing."""

    @pytest.mark.parametrize("path, expected", [
        (None, None),
        ("/tenant", "tenant"),
        ("tenant", "tenant"),
        (" /tenant ", "tenant"),
    ])
    def test_valid_paths(self, path, expected):
        assert parse_partition_key_path(path) == expected

    @pytest.mark.parametrize("path", ["", "/", "/address/city"])
    def test_invalid_paths(self, path):
        with pytest.raises(ValueError):
            parse_partition_key_path(path)


class TestCollectionInfo:
    """Tests for collection coordinates."""

    def test_dict_roundtrip_keeps_partition_key(self):
        info = CollectionInfo(
            database="shop",
            name="orders",
            table_name="shop.orders",
            partition_key="tenant",
            created_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
        )

        data = info.to_dict()
        assert data["partition_key_path"] == "/tenant"
        assert CollectionInfo.from_dict(data) == info

    def test_unpartitioned(self):
        info = CollectionInfo(database="shop", name="items", table_name="shop.items")
        assert info.is_partitioned is False
        assert info.partition_key_path is None
        assert info.to_dict()["created_at"] is None

    def test_with_created_at_stamps_now(self):
        info = CollectionInfo(database="shop", name="items", table_name="shop.items")
        stamped = info.with_created_at()
        assert stamped.created_at is not None
        assert stamped.name == info.name
