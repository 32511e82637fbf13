from .list import ListController, PluginListController, TableColumn, TableColumnButton

__all__ = ["ListController", "PluginListController", "TableColumn", "TableColumnButton"]
