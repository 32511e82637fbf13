"""
List-view controllers.

A controller binds a store module to a tabular view: columns, row actions
and selection. It holds no domain state of its own; every change goes
through the module's mutations, and every row action is followed by a
re-fetch so the table reflects what the server confirmed.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional

from crawlconsole.constants import (
    DIALOG_INSTALL,
    DIALOG_SETTINGS,
    TABLE_COLUMN_NAME_ACTIONS,
)
from crawlconsole.models import (
    FilterCondition,
    Plugin,
    PluginDeployMode,
    PluginStatusValue,
    SortKey,
    TablePagination,
)
from crawlconsole.store import RootStore

logger = logging.getLogger("crawlconsole.views.list")


@dataclass
class TableColumnButton:
    name: str
    tooltip: str
    on_click: Callable[[Any], Awaitable[Any]]
    disabled: Callable[[Any], bool] = lambda row: False


@dataclass
class TableColumn:
    key: str
    label: str
    width: str = "auto"
    fixed: Optional[str] = None
    has_sort: bool = False
    has_filter: bool = False
    allow_filter_search: bool = False
    value: Optional[Callable[[Any], Any]] = None
    buttons: Optional[Callable[[Any], List[TableColumnButton]]] = None


class ListController:
    """Generic list view over the module registered as ``ns``."""

    def __init__(self, store: RootStore, ns: str, columns: Optional[List[TableColumn]] = None):
        self.store = store
        self.ns = ns
        self.columns = columns if columns is not None else []
        self.selection: List[Any] = []

    @property
    def state(self):
        return self.store.state(self.ns)

    @property
    def table_data(self) -> List[Any]:
        return self.state.table_data

    @property
    def table_total(self) -> int:
        return self.state.table_total

    async def on_mount(self):
        await self.refresh()

    async def refresh(self):
        self.store.commit(f"{self.ns}/set_table_loading", True)
        try:
            await self.store.dispatch(f"{self.ns}/get_list")
        finally:
            self.store.commit(f"{self.ns}/set_table_loading", False)

    async def refresh_all(self):
        """Re-fetches the current page and the unpaginated snapshot."""
        await asyncio.gather(
            self.refresh(),
            self.store.dispatch(f"{self.ns}/get_all_list"),
        )

    async def set_filter_by_key(self, key: str, conditions: List[FilterCondition]):
        self.store.commit(
            f"{self.ns}/set_table_list_filter_by_key",
            {"key": key, "conditions": conditions},
        )
        await self.refresh()

    async def clear_filter_by_key(self, key: str):
        self.store.commit(f"{self.ns}/reset_table_list_filter_by_key", key)
        await self.refresh()

    async def set_sort_by_key(self, key: str, sort: Optional[SortKey]):
        self.store.commit(
            f"{self.ns}/set_table_list_sort_by_key", {"key": key, "sort": sort}
        )
        await self.refresh()

    async def set_page(self, page: int, size: Optional[int] = None):
        size = size or self.state.table_pagination.size
        self.store.commit(
            f"{self.ns}/set_table_pagination", TablePagination(page=page, size=size)
        )
        await self.refresh()

    def on_selection_change(self, rows: List[Any]):
        self.selection = list(rows)

    async def delete_row(self, row: Any):
        await self.store.dispatch(f"{self.ns}/delete_by_id", row.id)
        logger.info(f"Deleted {self.ns} {row.id}")
        await self.refresh_all()

    async def delete_selected(self):
        ids = [row.id for row in self.selection]
        if not ids:
            return
        await self.store.dispatch(f"{self.ns}/delete_list", ids)
        self.selection = []
        await self.refresh_all()


def can_start_plugin(row: Plugin) -> bool:
    """Start is enabled unless every node is already installing or running."""
    statuses = row.status
    if not statuses:
        return False
    if len(statuses) == 1:
        return statuses[0].status not in (
            PluginStatusValue.INSTALLING,
            PluginStatusValue.RUNNING,
        )
    return any(
        s.status
        in (
            PluginStatusValue.INSTALL_ERROR,
            PluginStatusValue.STOPPED,
            PluginStatusValue.ERROR,
        )
        for s in statuses
    )


def can_stop_plugin(row: Plugin) -> bool:
    """Stop is enabled while at least one node is installing or running."""
    statuses = row.status
    if not statuses:
        return False
    if len(statuses) == 1:
        return statuses[0].status not in (
            PluginStatusValue.INSTALL_ERROR,
            PluginStatusValue.STOPPED,
            PluginStatusValue.ERROR,
        )
    return any(
        s.status in (PluginStatusValue.INSTALLING, PluginStatusValue.RUNNING)
        for s in statuses
    )


def plugin_status_summary(row: Plugin) -> Any:
    """Single status for master-only or single-node plugins, the full list otherwise."""
    if row.deploy_mode == PluginDeployMode.MASTER or len(row.status or []) == 1:
        return row.status[0] if row.status else None
    return row.status or []


def plugin_pids(row: Plugin) -> List[int]:
    return [s.pid for s in (row.status or []) if s.pid]


class PluginListController(ListController):
    """Plugin list: process start/stop per row and marketplace settings."""

    def __init__(self, store: RootStore):
        super().__init__(store, "plugin")
        self.columns = self._build_columns()

    def _build_columns(self) -> List[TableColumn]:
        return [
            TableColumn(
                key="name",
                label="Name",
                width="250",
                value=lambda row: row.name or row.full_name or row.id,
                has_sort=True,
                has_filter=True,
                allow_filter_search=True,
            ),
            TableColumn(key="status", label="Status", width="120", value=plugin_status_summary),
            TableColumn(key="pid", label="Process ID", width="120", value=plugin_pids),
            TableColumn(
                key="description",
                label="Description",
                has_filter=True,
                allow_filter_search=True,
            ),
            TableColumn(
                key=TABLE_COLUMN_NAME_ACTIONS,
                label="Actions",
                width="200",
                fixed="right",
                buttons=self._row_buttons,
            ),
        ]

    def _row_buttons(self, row: Plugin) -> List[TableColumnButton]:
        return [
            TableColumnButton(
                name="start",
                tooltip="Start",
                on_click=self.start_row,
                disabled=lambda r: not can_start_plugin(r),
            ),
            TableColumnButton(
                name="stop",
                tooltip="Stop",
                on_click=self.stop_row,
                disabled=lambda r: not can_stop_plugin(r),
            ),
            TableColumnButton(
                name="delete",
                tooltip="Delete",
                on_click=self.delete_row,
                disabled=lambda r: bool(r.active),
            ),
        ]

    async def on_mount(self):
        await self.store.dispatch("plugin/get_settings")
        await super().on_mount()

    def show_install_dialog(self):
        self.store.commit("plugin/show_dialog", DIALOG_INSTALL)

    def show_settings_dialog(self):
        self.store.commit("plugin/show_dialog", DIALOG_SETTINGS)

    async def start_row(self, row: Plugin):
        await self.store.dispatch("plugin/start_by_id", row.id)
        await self.refresh()

    async def stop_row(self, row: Plugin):
        await self.store.dispatch("plugin/stop_by_id", row.id)
        await self.refresh()

    async def on_base_url_change(self, value: str):
        await self.store.dispatch("plugin/save_base_url", value)
