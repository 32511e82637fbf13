import asyncio

from crawlconsole.models import ResponseEnvelope, TablePagination, Task, TaskMode


def test_new_task_form_defaults(task_module):
    form = task_module.state.form
    assert form.mode == TaskMode.RANDOM
    assert form.priority == 5

    task_module.commit("set_form", Task(priority=1))
    task_module.commit("reset_form")
    assert task_module.state.form == Task(mode="random", priority=5)


def test_get_logs_joins_lines(task_module, transport):
    transport.respond("GET_LIST", "/tasks/t1/logs", data=["line1", "line2"], total=2)

    asyncio.run(task_module.dispatch("get_logs", "t1"))

    assert transport.calls[0][2]["params"] == {"page": 1, "size": 1000}
    assert task_module.state.log_content == "line1\nline2"
    assert task_module.state.log_total == 2


def test_get_logs_replaces_previous_page(task_module, transport):
    task_module.commit("set_log_content", "old line")
    task_module.commit("set_log_pagination", TablePagination(page=2, size=1000))
    transport.respond("GET_LIST", "/tasks/t1/logs", data=["line1001"], total=1001)

    asyncio.run(task_module.dispatch("get_logs", "t1"))

    assert transport.calls[0][2]["params"] == {"page": 2, "size": 1000}
    assert task_module.state.log_content == "line1001"
    assert task_module.state.log_total == 1001


def test_log_auto_update_is_only_a_flag(task_module, transport):
    task_module.commit("enable_log_auto_update")
    assert task_module.state.log_auto_update is True
    task_module.commit("disable_log_auto_update")
    assert task_module.state.log_auto_update is False
    assert transport.calls == []


def test_result_fields_in_order_of_first_appearance(task_module):
    task_module.commit("set_result_table_data", [{"x": 1, "y": 2}, {"x": 3, "z": 4}])
    assert task_module.get("result_fields") == ["x", "y", "z"]


def test_result_fields_only_see_loaded_page(task_module, transport):
    transport.respond("GET_LIST", "/tasks/t1/data", data=[{"url": "a"}], total=40)

    asyncio.run(task_module.dispatch("get_result_data", "t1"))

    assert transport.calls[0][2]["params"] == {"page": 1, "size": 10}
    assert task_module.state.result_table_total == 40
    assert task_module.get("result_fields") == ["url"]


def test_result_fields_empty_without_rows(task_module):
    assert task_module.get("result_fields") == []


def test_get_by_id_requests_stats(task_module, transport):
    transport.respond("GET", "/tasks/t1", data={"_id": "t1", "status": "running"})

    asyncio.run(task_module.dispatch("get_by_id", "t1"))

    assert transport.calls[0][2]["params"] == {"stats": True}
    assert task_module.state.form.status == "running"


def test_get_list_requests_stats(task_module, transport):
    transport.respond("GET_LIST", "/tasks", data=[{"_id": "t1"}], total=1)

    asyncio.run(task_module.dispatch("get_list"))

    assert transport.calls[0][2]["params"]["stats"] is True
    assert task_module.state.table_data[0].id == "t1"


def test_create_runs_task(task_module, transport):
    form = task_module.state.form

    asyncio.run(task_module.dispatch("create", form))

    method, path, kwargs = transport.calls[0]
    assert (method, path) == ("POST", "/tasks/run")
    assert kwargs["data"] is form


def test_cancel_and_restart(task_module, transport):
    async def scenario():
        await task_module.dispatch("cancel_by_id", "t1")
        await task_module.dispatch("restart_by_id", "t1")

    asyncio.run(scenario())

    assert [(m, p) for m, p, _ in transport.calls] == [
        ("POST", "/tasks/t1/cancel"),
        ("POST", "/tasks/t1/restart"),
    ]


def test_reset_defaults(task_module):
    task_module.commit("set_log_pagination", TablePagination(page=4, size=5))
    task_module.commit("set_result_table_pagination", TablePagination(page=2, size=50))
    task_module.commit("set_log_total", 9)

    task_module.commit("reset_log_pagination")
    task_module.commit("reset_result_table_pagination")
    task_module.commit("reset_log_total")

    assert task_module.state.log_pagination == TablePagination(page=1, size=1000)
    assert task_module.state.result_table_pagination == TablePagination(page=1, size=10)
    assert task_module.state.log_total == 0


def test_fenced_logs_ignore_superseded_page(transport):
    from crawlconsole.store.task import create_task_module

    module = create_task_module(transport, fence_requests=True)

    async def scenario():
        release = asyncio.Event()
        seen = []

        async def respond(params):
            seen.append(params)
            if len(seen) == 1:
                await release.wait()
                return ResponseEnvelope(data=["stale"], total=1)
            return ResponseEnvelope(data=["fresh"], total=1)

        transport.respond("GET_LIST", "/tasks/t1/logs", respond)
        slow = asyncio.create_task(module.dispatch("get_logs", "t1"))
        await asyncio.sleep(0)
        await module.dispatch("get_logs", "t1")
        release.set()
        await slow

    asyncio.run(scenario())

    assert module.state.log_content == "fresh"
