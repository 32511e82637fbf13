"""
Task Store Module

Extends the generic resource store with the task log window and the crawl
result table. Both paginate independently of the main task table.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from crawlconsole.constants import (
    LOG_PAGE_SIZE,
    TAB_NAME_DATA,
    TAB_NAME_LOGS,
    TAB_NAME_OVERVIEW,
)
from crawlconsole.models import ResponseEnvelope, TablePagination, Task, TaskMode
from crawlconsole.store.base import (
    ActionContext,
    ResourceStoreState,
    StoreModule,
    create_store_module,
    get_default_store_state,
    parse_entity,
)
from crawlconsole.transport import BaseTransport
from crawlconsole.utils import get_default_pagination, get_fields_from_data

logger = logging.getLogger("crawlconsole.store.task")

ENDPOINT = "/tasks"


def get_default_log_pagination() -> TablePagination:
    return TablePagination(page=1, size=LOG_PAGE_SIZE)


def new_task_form() -> Task:
    return Task(mode=TaskMode.RANDOM.value, priority=5)


@dataclass
class TaskStoreState(ResourceStoreState[Task]):
    # Log window
    log_content: str = ""
    log_pagination: TablePagination = field(default_factory=get_default_log_pagination)
    log_total: int = 0
    # Polling is driven by the view; this is only the switch
    log_auto_update: bool = False

    # Crawl results (schema-less rows)
    result_table_data: List[Dict[str, Any]] = field(default_factory=list)
    result_table_pagination: TablePagination = field(
        default_factory=get_default_pagination
    )
    result_table_total: int = 0


def _default_tabs() -> List[Dict[str, str]]:
    return [
        {"id": TAB_NAME_OVERVIEW, "title": "Overview"},
        {"id": TAB_NAME_LOGS, "title": "Logs"},
        {"id": TAB_NAME_DATA, "title": "Data"},
    ]


def result_fields(state: TaskStoreState) -> List[str]:
    """
    Column names observed across the loaded result rows.

    Inferred from the current page only: fields that appear solely on pages
    not yet fetched are not listed.
    """
    return get_fields_from_data(state.result_table_data)


getters = {
    "result_fields": result_fields,
}


def _set_log_content(state: TaskStoreState, content: str):
    state.log_content = content


def _reset_log_content(state: TaskStoreState):
    state.log_content = ""


def _set_log_pagination(state: TaskStoreState, pagination: TablePagination):
    state.log_pagination = pagination


def _reset_log_pagination(state: TaskStoreState):
    state.log_pagination = get_default_log_pagination()


def _set_log_total(state: TaskStoreState, total: int):
    state.log_total = total


def _reset_log_total(state: TaskStoreState):
    state.log_total = 0


def _enable_log_auto_update(state: TaskStoreState):
    state.log_auto_update = True


def _disable_log_auto_update(state: TaskStoreState):
    state.log_auto_update = False


def _set_result_table_data(state: TaskStoreState, data: List[Dict[str, Any]]):
    state.result_table_data = data


def _reset_result_table_data(state: TaskStoreState):
    state.result_table_data = []


def _set_result_table_pagination(state: TaskStoreState, pagination: TablePagination):
    state.result_table_pagination = pagination


def _reset_result_table_pagination(state: TaskStoreState):
    state.result_table_pagination = get_default_pagination()


def _set_result_table_total(state: TaskStoreState, total: int):
    state.result_table_total = total


def _reset_result_table_total(state: TaskStoreState):
    state.result_table_total = 0


mutations = {
    "set_log_content": _set_log_content,
    "reset_log_content": _reset_log_content,
    "set_log_pagination": _set_log_pagination,
    "reset_log_pagination": _reset_log_pagination,
    "set_log_total": _set_log_total,
    "reset_log_total": _reset_log_total,
    "enable_log_auto_update": _enable_log_auto_update,
    "disable_log_auto_update": _disable_log_auto_update,
    "set_result_table_data": _set_result_table_data,
    "reset_result_table_data": _reset_result_table_data,
    "set_result_table_pagination": _set_result_table_pagination,
    "reset_result_table_pagination": _reset_result_table_pagination,
    "set_result_table_total": _set_result_table_total,
    "reset_result_table_total": _reset_result_table_total,
}


async def get_by_id(ctx: ActionContext, id: str) -> ResponseEnvelope:
    res = await ctx.transport.get(f"{ENDPOINT}/{id}", {"stats": True})
    ctx.commit("set_form", parse_entity(Task, res.data))
    return res


async def create(ctx: ActionContext, form: Task) -> ResponseEnvelope:
    # Creating a task runs it
    return await ctx.transport.post(f"{ENDPOINT}/run", form)


async def cancel_by_id(ctx: ActionContext, id: str) -> ResponseEnvelope:
    return await ctx.transport.post(f"{ENDPOINT}/{id}/cancel")


async def restart_by_id(ctx: ActionContext, id: str) -> ResponseEnvelope:
    return await ctx.transport.post(f"{ENDPOINT}/{id}/restart")


async def get_logs(ctx: ActionContext, id: str) -> ResponseEnvelope:
    pagination = ctx.state.log_pagination
    generation = ctx.begin_request("get_logs")
    res = await ctx.transport.get_list(
        f"{ENDPOINT}/{id}/logs", {"page": pagination.page, "size": pagination.size}
    )
    if not ctx.is_current("get_logs", generation):
        return res
    ctx.commit("set_log_content", "\n".join(res.data or []))
    ctx.commit("set_log_total", res.total or 0)
    return res


async def get_result_data(ctx: ActionContext, id: str) -> ResponseEnvelope:
    pagination = ctx.state.result_table_pagination
    generation = ctx.begin_request("get_result_data")
    res = await ctx.transport.get_list(
        f"{ENDPOINT}/{id}/data", {"page": pagination.page, "size": pagination.size}
    )
    if not ctx.is_current("get_result_data", generation):
        return res
    ctx.commit("set_result_table_data", res.data or [])
    ctx.commit("set_result_table_total", res.total or 0)
    return res


actions = {
    "get_by_id": get_by_id,
    "create": create,
    "cancel_by_id": cancel_by_id,
    "restart_by_id": restart_by_id,
    "get_logs": get_logs,
    "get_result_data": get_result_data,
}


def create_task_module(
    transport: BaseTransport, fence_requests: bool = False
) -> StoreModule[TaskStoreState]:
    state = get_default_store_state(
        TaskStoreState, "task", new_form_fn=new_task_form, tabs=_default_tabs()
    )
    return create_store_module(
        "task",
        ENDPOINT,
        transport,
        entity_cls=Task,
        state=state,
        getters=getters,
        mutations=mutations,
        actions=actions,
        fence_requests=fence_requests,
    )
