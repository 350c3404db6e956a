"""Integration test fixtures — a live Elasticsearch node.

Expects a node to be reachable at ``INDEXABLE_TEST_ES_URL`` (default
``http://localhost:9200``), e.g.:

    docker run -p 9200:9200 -e discovery.type=single-node \
        -e xpack.security.enabled=false elasticsearch:8.15.0

Tests are skipped when no node answers.
"""

from __future__ import annotations

import os
import time
import uuid
from collections.abc import AsyncIterator

import httpx
import pytest

from indexable.config.settings import ClientSettings
from indexable.engine.elasticsearch.gateway import ElasticsearchGateway


def _wait_for_service(url: str, timeout: float = 30.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        try:
            r = httpx.get(url, timeout=5)
            if r.status_code == 200:
                return True
        except httpx.HTTPError:
            pass
        time.sleep(1)
    return False


@pytest.fixture(scope="session")
def elasticsearch_url() -> str:
    url = os.environ.get("INDEXABLE_TEST_ES_URL", "http://localhost:9200")
    if not _wait_for_service(url):
        pytest.skip(f"Elasticsearch not available at {url}")
    return url


@pytest.fixture
def index_name() -> str:
    return f"indexable-test-{uuid.uuid4().hex[:8]}"


@pytest.fixture
async def gateway(elasticsearch_url: str, index_name: str) -> AsyncIterator[ElasticsearchGateway]:
    async with ElasticsearchGateway.from_settings(ClientSettings(hosts=[elasticsearch_url])) as engine:
        yield engine
        async with httpx.AsyncClient(base_url=elasticsearch_url, timeout=30) as client:
            await client.delete(f"/{index_name}", params={"ignore_unavailable": "true"})


@pytest.fixture
def refresh(elasticsearch_url: str, index_name: str):
    """Make indexed documents searchable."""

    async def _refresh() -> None:
        async with httpx.AsyncClient(base_url=elasticsearch_url, timeout=30) as client:
            resp = await client.post(f"/{index_name}/_refresh")
            resp.raise_for_status()

    return _refresh
