"""Pytest configuration and shared fixtures"""
import json
import os
import sys
from unittest.mock import MagicMock, Mock

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from opmon.config import DatasourceConfig
from opmon.datasource import OpmonDataSource
from opmon.http_client import OpmonHttpClient
from opmon.schemas import AdhocFilter, Query, Scope, Variable


@pytest.fixture
def scope():
    """Variable snapshot with one variable of every relevant kind"""
    return Scope(
        variables=[
            Variable(id="host", type="custom", current="web01", text="web01"),
            Variable(id="services", type="query", current=["http", "ssh"], text=["http", "ssh"], multi=True),
            Variable(id="env", type="constant", current="prod"),
            Variable(id="filters", type="adhoc"),
            Variable(id="__user", type="system", current="admin"),
        ],
        adhoc_filters=[AdhocFilter(key="site", operator="=", value="dc1")],
    )


@pytest.fixture
def availability_query():
    """Fully populated availability query for a single host/service"""
    return Query(
        refId="A",
        mode=0,
        objecttype="Service",
        host="web01",
        service="http",
        hostgroup="- select hostgroup -",
        servicegroup="- select servicegroup -",
        serviceCatalog="- select service catalog -",
        metric="- all -",
    )


@pytest.fixture
def http_client():
    """Mocked transport collaborator"""
    client = Mock(spec=OpmonHttpClient)
    client.post_json.return_value = []
    client.get_status.return_value = (200, "OK")
    return client


@pytest.fixture
def datasource(http_client):
    return OpmonDataSource(DatasourceConfig(url="https://opmon.test"), http_client=http_client)


@pytest.fixture
def make_response():
    """Factory for urlopen() context managers returning a JSON body"""
    def _make(payload):
        response = MagicMock()
        response.read.return_value = json.dumps(payload).encode() if payload is not None else b""
        response.status = 200
        response.reason = "OK"
        response.__enter__.return_value = response
        return response
    return _make
