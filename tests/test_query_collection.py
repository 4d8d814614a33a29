"""Tests for the collection dump script."""

from __future__ import annotations

import asyncio
import importlib.util
from pathlib import Path

import pytest

from warehouse import JsonDocument


SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "query_collection.py"


@pytest.fixture
def script():
    spec = importlib.util.spec_from_file_location("query_collection", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_missing_collection_is_not_created(script, dynamodb):
    count = asyncio.run(script.query_collection("shop", "itmes"))

    assert count == 0
    assert dynamodb.meta.client.list_tables()["TableNames"] == []


def test_dumps_existing_collection(script, warehouse, capsys):
    async def _run():
        await warehouse.initialize("shop", "items")
        await warehouse.store(JsonDocument(id="a1", body={"qty": 3}), "a1")
        await warehouse.store(JsonDocument(id="b2", body={"qty": 5}), "b2")
        return await script.query_collection("shop", "items", field="qty", value=3)

    assert asyncio.run(_run()) == 1
    assert "a1" in capsys.readouterr().out
