from __future__ import annotations

from pathlib import Path
import sys

import boto3
import pytest
from moto import mock_aws


# Ensure the repository root (parent of ./tests) is importable during pytest collection.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from warehouse import DynamoDBWarehouse, JsonDocument, WarehouseSettings  # noqa: E402


REGION = "us-east-1"


@pytest.fixture
def aws_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Fake credentials so nothing can ever reach a real AWS account.
    """
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", REGION)
    for name in ("WAREHOUSE_ENDPOINT_URL", "WAREHOUSE_THROUGHPUT", "WAREHOUSE_PAGE_SIZE",
                 "WAREHOUSE_TABLE_SEPARATOR"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def dynamodb(aws_credentials):
    with mock_aws():
        yield boto3.resource("dynamodb", region_name=REGION)


@pytest.fixture
def settings() -> WarehouseSettings:
    return WarehouseSettings(region_name=REGION)


@pytest.fixture
def warehouse(dynamodb, settings) -> DynamoDBWarehouse:
    return DynamoDBWarehouse(JsonDocument, settings=settings, dynamodb=dynamodb)
