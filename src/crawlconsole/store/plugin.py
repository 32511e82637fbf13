"""
Plugin Store Module

Extends the generic resource store with plugin process control and the
plugin marketplace settings.
"""

import logging
from dataclasses import dataclass, field

from crawlconsole.models import Plugin, PluginSettings, ResponseEnvelope
from crawlconsole.store.base import (
    ActionContext,
    ResourceStoreState,
    StoreModule,
    create_store_module,
    get_default_store_state,
)
from crawlconsole.transport import BaseTransport

logger = logging.getLogger("crawlconsole.store.plugin")

ENDPOINT = "/plugins"


@dataclass
class PluginStoreState(ResourceStoreState[Plugin]):
    settings: PluginSettings = field(default_factory=PluginSettings)


def _set_settings(state: PluginStoreState, settings: PluginSettings):
    state.settings = settings


def _reset_settings(state: PluginStoreState):
    state.settings = PluginSettings()


mutations = {
    "set_settings": _set_settings,
    "reset_settings": _reset_settings,
}


async def start_by_id(ctx: ActionContext, id: str) -> ResponseEnvelope:
    return await ctx.transport.post(f"{ENDPOINT}/{id}/start")


async def stop_by_id(ctx: ActionContext, id: str) -> ResponseEnvelope:
    return await ctx.transport.post(f"{ENDPOINT}/{id}/stop")


async def get_settings(ctx: ActionContext) -> ResponseEnvelope:
    res = await ctx.transport.get(f"{ENDPOINT}/settings")
    ctx.commit("set_settings", PluginSettings.model_validate(res.data or {}))
    return res


async def save_base_url(ctx: ActionContext, base_url: str) -> ResponseEnvelope:
    res = await ctx.transport.post(f"{ENDPOINT}/settings", {"base_url": base_url})
    # Committed only once the server accepted it
    settings = ctx.state.settings.model_copy(update={"base_url": base_url})
    ctx.commit("set_settings", settings)
    logger.info(f"Plugin base URL set to {base_url}")
    return res


actions = {
    "start_by_id": start_by_id,
    "stop_by_id": stop_by_id,
    "get_settings": get_settings,
    "save_base_url": save_base_url,
}


def create_plugin_module(
    transport: BaseTransport, fence_requests: bool = False
) -> StoreModule[PluginStoreState]:
    state = get_default_store_state(PluginStoreState, "plugin", new_form_fn=Plugin)
    return create_store_module(
        "plugin",
        ENDPOINT,
        transport,
        entity_cls=Plugin,
        state=state,
        mutations=mutations,
        actions=actions,
        fence_requests=fence_requests,
    )
