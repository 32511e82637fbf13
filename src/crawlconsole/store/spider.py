"""
Spider Store Module

Extends the generic resource store with the spider file tree and the git
working copy. File operations other than ``list_dir`` and ``get_file`` do not
touch state; callers re-list the directory to observe them.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from crawlconsole.constants import (
    TAB_NAME_DATA,
    TAB_NAME_FILES,
    TAB_NAME_GIT,
    TAB_NAME_OVERVIEW,
    TAB_NAME_SCHEDULES,
    TAB_NAME_SETTINGS,
    TAB_NAME_TASKS,
)
from crawlconsole.models import (
    FileNavItem,
    GitChange,
    GitData,
    GitLog,
    ResponseEnvelope,
    Spider,
    SpiderRunOptions,
)
from crawlconsole.store.base import (
    ActionContext,
    ResourceStoreState,
    StoreModule,
    create_store_module,
    get_default_store_state,
)
from crawlconsole.transport import BaseTransport

logger = logging.getLogger("crawlconsole.store.spider")

ENDPOINT = "/spiders"


@dataclass
class SpiderStoreState(ResourceStoreState[Spider]):
    # File navigation
    file_nav_items: List[FileNavItem] = field(default_factory=list)
    active_nav_item: Optional[FileNavItem] = None
    file_content: str = ""
    default_file_paths: List[str] = field(default_factory=list)

    # Git working copy
    current_git_branch: str = ""
    git_data: GitData = field(default_factory=GitData)
    git_change_selection: List[GitChange] = field(default_factory=list)


def _default_tabs() -> List[Dict[str, str]]:
    return [
        {"id": TAB_NAME_OVERVIEW, "title": "Overview"},
        {"id": TAB_NAME_FILES, "title": "Files"},
        {"id": TAB_NAME_GIT, "title": "Git"},
        {"id": TAB_NAME_TASKS, "title": "Tasks"},
        {"id": TAB_NAME_SCHEDULES, "title": "Schedules"},
        {"id": TAB_NAME_DATA, "title": "Data"},
        {"id": TAB_NAME_SETTINGS, "title": "Settings"},
    ]


def git_logs_map(state: SpiderStoreState) -> Dict[str, GitLog]:
    """Lookup of git logs by hash. Logs without a hash are skipped; later duplicates win."""
    m: Dict[str, GitLog] = {}
    for log in state.git_data.logs or []:
        if log.hash:
            m[log.hash] = log
    return m


getters = {
    "git_logs_map": git_logs_map,
}


def _set_file_nav_items(state: SpiderStoreState, nav_items: List[FileNavItem]):
    state.file_nav_items = nav_items


def _set_active_file_nav_item(state: SpiderStoreState, nav_item: FileNavItem):
    state.active_nav_item = nav_item


def _reset_active_file_nav_item(state: SpiderStoreState):
    state.active_nav_item = None


def _set_file_content(state: SpiderStoreState, content: str):
    state.file_content = content


def _reset_file_content(state: SpiderStoreState):
    state.file_content = ""


def _set_default_file_paths(state: SpiderStoreState, paths: List[str]):
    state.default_file_paths = paths


def _reset_default_file_paths(state: SpiderStoreState):
    state.default_file_paths = []


def _set_current_git_branch(state: SpiderStoreState, branch: str):
    state.current_git_branch = branch


def _reset_current_git_branch(state: SpiderStoreState):
    state.current_git_branch = ""


def _set_git_data(state: SpiderStoreState, data: GitData):
    state.git_data = data


def _reset_git_data(state: SpiderStoreState):
    state.git_data = GitData()


def _set_git_change_selection(state: SpiderStoreState, selection: List[GitChange]):
    state.git_change_selection = selection


def _reset_git_change_selection(state: SpiderStoreState):
    state.git_change_selection = []


mutations = {
    "set_file_nav_items": _set_file_nav_items,
    "set_active_file_nav_item": _set_active_file_nav_item,
    "reset_active_file_nav_item": _reset_active_file_nav_item,
    "set_file_content": _set_file_content,
    "reset_file_content": _reset_file_content,
    "set_default_file_paths": _set_default_file_paths,
    "reset_default_file_paths": _reset_default_file_paths,
    "set_current_git_branch": _set_current_git_branch,
    "reset_current_git_branch": _reset_current_git_branch,
    "set_git_data": _set_git_data,
    "reset_git_data": _reset_git_data,
    "set_git_change_selection": _set_git_change_selection,
    "reset_git_change_selection": _reset_git_change_selection,
}


async def run_by_id(
    ctx: ActionContext, id: str, options: Optional[SpiderRunOptions] = None
) -> ResponseEnvelope:
    return await ctx.transport.post(
        f"{ENDPOINT}/{id}/run", options or SpiderRunOptions()
    )


async def list_dir(ctx: ActionContext, id: str, path: str) -> ResponseEnvelope:
    res = await ctx.transport.get(f"{ENDPOINT}/{id}/files/list", {"path": path})
    nav_items = [FileNavItem.model_validate(d) for d in (res.data or [])]
    ctx.commit("set_file_nav_items", nav_items)
    return res


async def get_file(ctx: ActionContext, id: str, path: str) -> ResponseEnvelope:
    res = await ctx.transport.get(f"{ENDPOINT}/{id}/files/get", {"path": path})
    ctx.commit("set_file_content", res.data if res.data is not None else "")
    return res


async def get_file_info(ctx: ActionContext, id: str, path: str) -> ResponseEnvelope:
    return await ctx.transport.get(f"{ENDPOINT}/{id}/files/info", {"path": path})


async def save_file(ctx: ActionContext, id: str, path: str, data: str) -> ResponseEnvelope:
    return await ctx.transport.post(
        f"{ENDPOINT}/{id}/files/save", {"path": path, "data": data}
    )


async def save_file_binary(ctx: ActionContext, id: str, path: str, file: Any) -> ResponseEnvelope:
    # Shares the endpoint with save_file; the body is multipart instead of JSON
    return await ctx.transport.post(
        f"{ENDPOINT}/{id}/files/save",
        {"path": path, "file": file},
        None,
        {"multipart": True},
    )


async def save_dir(ctx: ActionContext, id: str, path: str) -> ResponseEnvelope:
    return await ctx.transport.post(f"{ENDPOINT}/{id}/files/save/dir", {"path": path})


async def rename_file(ctx: ActionContext, id: str, path: str, new_path: str) -> ResponseEnvelope:
    return await ctx.transport.post(
        f"{ENDPOINT}/{id}/files/rename", {"path": path, "new_path": new_path}
    )


async def delete_file(ctx: ActionContext, id: str, path: str) -> ResponseEnvelope:
    return await ctx.transport.delete(f"{ENDPOINT}/{id}/files/delete", {"path": path})


async def copy_file(ctx: ActionContext, id: str, path: str, new_path: str) -> ResponseEnvelope:
    return await ctx.transport.post(
        f"{ENDPOINT}/{id}/files/copy", {"path": path, "new_path": new_path}
    )


async def get_git(ctx: ActionContext, id: str) -> ResponseEnvelope:
    res = await ctx.transport.get(f"{ENDPOINT}/{id}/git")
    git_data = GitData.model_validate(res.data or {})
    ctx.commit("set_current_git_branch", git_data.current_branch or "")
    ctx.commit("set_git_data", git_data)
    return res


async def git_pull(ctx: ActionContext, id: str) -> ResponseEnvelope:
    return await ctx.transport.post(f"{ENDPOINT}/{id}/git/pull")


async def git_commit(ctx: ActionContext, id: str) -> ResponseEnvelope:
    """Commits the paths currently in ``git_change_selection``. The selection is kept."""
    paths = [c.path for c in ctx.state.git_change_selection]
    return await ctx.transport.post(f"{ENDPOINT}/{id}/git/commit", {"paths": paths})


actions = {
    "run_by_id": run_by_id,
    "list_dir": list_dir,
    "get_file": get_file,
    "get_file_info": get_file_info,
    "save_file": save_file,
    "save_file_binary": save_file_binary,
    "save_dir": save_dir,
    "rename_file": rename_file,
    "delete_file": delete_file,
    "copy_file": copy_file,
    "get_git": get_git,
    "git_pull": git_pull,
    "git_commit": git_commit,
}


def create_spider_module(
    transport: BaseTransport, fence_requests: bool = False
) -> StoreModule[SpiderStoreState]:
    state = get_default_store_state(
        SpiderStoreState, "spider", new_form_fn=Spider, tabs=_default_tabs()
    )
    return create_store_module(
        "spider",
        ENDPOINT,
        transport,
        entity_cls=Spider,
        state=state,
        getters=getters,
        mutations=mutations,
        actions=actions,
        fence_requests=fence_requests,
    )
