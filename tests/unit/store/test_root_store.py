import asyncio

import pytest

from crawlconsole.exceptions import UnknownModuleError
from crawlconsole.models import GitData, GitLog


def test_namespaced_calls_are_routed_to_the_module(store, transport):
    transport.respond("GET_LIST", "/tasks", data=[{"_id": "t1"}], total=1)

    asyncio.run(store.dispatch("task/get_list"))
    store.commit("spider/set_git_data", GitData(logs=[GitLog(hash="h")]))

    assert store.state("task").table_total == 1
    assert list(store.get("spider/git_logs_map")) == ["h"]
    # Modules do not share state
    assert store.state("spider").table_total == 0


def test_unknown_module_or_malformed_path(store):
    with pytest.raises(UnknownModuleError):
        store.commit("node/reset_form")
    with pytest.raises(UnknownModuleError):
        store.get("spider")
    with pytest.raises(UnknownModuleError):
        store.module("schedule")
