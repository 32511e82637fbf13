"""
Global pytest fixtures for Crawl Console tests.

``FakeTransport`` records every request and answers from a table keyed by
``(method, path)``. A response may be a ``ResponseEnvelope``, an exception
instance (raised), or an async callable receiving the request kwargs.
"""

import inspect

import pytest

from crawlconsole.models import ResponseEnvelope
from crawlconsole.store import RootStore
from crawlconsole.store.plugin import create_plugin_module
from crawlconsole.store.spider import create_spider_module
from crawlconsole.store.task import create_task_module
from crawlconsole.transport import BaseTransport


class FakeTransport(BaseTransport):
    def __init__(self):
        self.calls = []
        self.responses = {}

    def respond(self, method, path, response=None, **envelope):
        self.responses[(method, path)] = (
            response if response is not None else ResponseEnvelope(**envelope)
        )

    async def _handle(self, method, path, **kwargs):
        self.calls.append((method, path, kwargs))
        res = self.responses.get((method, path), ResponseEnvelope())
        if isinstance(res, Exception):
            raise res
        if inspect.iscoroutinefunction(res):
            return await res(**kwargs)
        return res

    async def get(self, path, params=None):
        return await self._handle("GET", path, params=params)

    async def post(self, path, data=None, params=None, options=None):
        return await self._handle(
            "POST", path, data=data, params=params, options=options
        )

    async def delete(self, path, params=None):
        return await self._handle("DELETE", path, params=params)

    async def get_list(self, path, params=None):
        return await self._handle("GET_LIST", path, params=params)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def spider_module(transport):
    return create_spider_module(transport)


@pytest.fixture
def task_module(transport):
    return create_task_module(transport)


@pytest.fixture
def plugin_module(transport):
    return create_plugin_module(transport)


@pytest.fixture
def store(spider_module, task_module, plugin_module):
    root = RootStore()
    for module in (spider_module, task_module, plugin_module):
        root.register(module)
    return root
