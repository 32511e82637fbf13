"""
Crawl Console resource store.

Modules are registered under their namespace; commits, dispatches and getter
reads are addressed as ``"<ns>/<name>"``.
"""

import logging
from typing import Any, Dict, Tuple

from crawlconsole.exceptions import UnknownModuleError
from crawlconsole.store.base import StoreModule

logger = logging.getLogger("crawlconsole.store")


class RootStore:
    """Registry of resource modules. Each module's state is owned by that module only."""

    def __init__(self):
        self.modules: Dict[str, StoreModule] = {}

    def register(self, module: StoreModule) -> StoreModule:
        self.modules[module.ns] = module
        logger.debug(f"Registered store module '{module.ns}'")
        return module

    def module(self, ns: str) -> StoreModule:
        if ns not in self.modules:
            raise UnknownModuleError(f"No store module registered as '{ns}'")
        return self.modules[ns]

    def state(self, ns: str) -> Any:
        return self.module(ns).state

    def _resolve(self, path: str) -> Tuple[StoreModule, str]:
        ns, sep, name = path.partition("/")
        if not sep or not name:
            raise UnknownModuleError(f"Expected '<ns>/<name>', got '{path}'")
        return self.module(ns), name

    def commit(self, path: str, *args: Any):
        module, name = self._resolve(path)
        module.commit(name, *args)

    async def dispatch(self, path: str, *args: Any, **kwargs: Any) -> Any:
        module, name = self._resolve(path)
        return await module.dispatch(name, *args, **kwargs)

    def get(self, path: str) -> Any:
        module, name = self._resolve(path)
        return module.get(name)


__all__ = ["RootStore", "StoreModule"]
