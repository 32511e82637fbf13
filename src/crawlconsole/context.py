import logging
from dataclasses import dataclass, field
from typing import Optional

from crawlconsole.models import ConsoleSettings
from crawlconsole.store import RootStore
from crawlconsole.store.plugin import create_plugin_module
from crawlconsole.store.spider import create_spider_module
from crawlconsole.store.task import create_task_module
from crawlconsole.transport import BaseTransport, RequestsTransport
from crawlconsole.utils import setup_logging

logger = logging.getLogger("crawlconsole.context")


@dataclass
class ConsoleContext:
    settings: ConsoleSettings
    transport: BaseTransport
    store: RootStore = field(default_factory=RootStore)

    def __post_init__(self):
        fence = self.settings.fence_requests
        for create in (create_spider_module, create_task_module, create_plugin_module):
            self.store.register(create(self.transport, fence_requests=fence))

    @classmethod
    def from_settings(
        cls,
        settings: ConsoleSettings,
        transport: Optional[BaseTransport] = None,
        configure_logging: bool = False,
    ) -> "ConsoleContext":
        """Builds the transport and the store with every resource module registered."""
        if configure_logging:
            setup_logging(level=logging.getLevelName(settings.log_level))
        if transport is None:
            transport = RequestsTransport(
                settings.base_url, token=settings.token, timeout=settings.timeout
            )
        logger.info(f"Console store ready against {settings.base_url}")
        return cls(settings=settings, transport=transport)
