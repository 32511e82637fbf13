"""
Resource Store Factory

Builds the default state, getters, mutations and actions shared by every
paginated, filterable, sortable resource collection, and the ``StoreModule``
container that owns one resource's state.

State only changes through named mutations committed via
``StoreModule.commit``. Actions are coroutines that call the transport and
commit on success; transport errors propagate to the caller unchanged.
"""

import logging
from dataclasses import dataclass, field
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Generic,
    List,
    Optional,
    Type,
    TypeVar,
)

from crawlconsole.constants import DIALOG_CREATE_EDIT
from crawlconsole.exceptions import (
    UnknownActionError,
    UnknownGetterError,
    UnknownMutationError,
)
from crawlconsole.models import (
    BaseEntity,
    FilterCondition,
    ResponseEnvelope,
    SortKey,
    TablePagination,
)
from crawlconsole.transport import BaseTransport
from crawlconsole.utils import get_default_pagination, serialize_list_param

logger = logging.getLogger("crawlconsole.store.base")

T = TypeVar("T", bound=BaseEntity)
S = TypeVar("S", bound="ResourceStoreState")

Getter = Callable[[Any], Any]
Mutation = Callable[..., None]
Action = Callable[..., Awaitable[Any]]


@dataclass
class ResourceStoreState(Generic[T]):
    """State shared by every resource collection."""

    ns: str = ""
    new_form_fn: Callable[[], Any] = dict
    form: Any = None
    form_list: List[Any] = field(default_factory=list)

    # Current page of the list view
    table_data: List[T] = field(default_factory=list)
    table_total: int = 0
    table_pagination: TablePagination = field(default_factory=get_default_pagination)
    table_list_filter: List[FilterCondition] = field(default_factory=list)
    table_list_sort: List[SortKey] = field(default_factory=list)
    table_loading: bool = False

    # Unpaginated snapshot for lookups and select widgets
    all_list: List[T] = field(default_factory=list)

    dialog_visible: Dict[str, bool] = field(
        default_factory=lambda: {DIALOG_CREATE_EDIT: False}
    )
    active_dialog_key: Optional[str] = None
    tabs: List[Dict[str, str]] = field(default_factory=list)


def get_default_store_state(
    state_cls: Type[S],
    ns: str,
    new_form_fn: Optional[Callable[[], Any]] = None,
    **extra: Any,
) -> S:
    """Creates a state container with the form initialised from ``new_form_fn``."""
    new_form_fn = new_form_fn or dict
    return state_cls(ns=ns, new_form_fn=new_form_fn, form=new_form_fn(), **extra)


def parse_entity(entity_cls: Type[T], data: Any) -> Any:
    if isinstance(data, dict):
        return entity_cls.model_validate(data)
    return data


def parse_entities(entity_cls: Type[T], data: Any) -> List[Any]:
    return [parse_entity(entity_cls, d) for d in (data or [])]


# --- Getters ---


def _all_dict(state: ResourceStoreState) -> Dict[str, Any]:
    return {d.id: d for d in state.all_list if getattr(d, "id", None)}


def _all_list_select_options(state: ResourceStoreState) -> List[Dict[str, Any]]:
    options = []
    for d in state.all_list:
        label = getattr(d, "name", None) or d.id
        options.append({"label": label, "value": d.id})
    return options


def _form_list_ids(state: ResourceStoreState) -> List[str]:
    return [d.id for d in state.form_list if getattr(d, "id", None)]


def get_default_store_getters() -> Dict[str, Getter]:
    return {
        "all_dict": _all_dict,
        "all_list_select_options": _all_list_select_options,
        "form_list_ids": _form_list_ids,
    }


# --- Mutations ---


def _set_form(state: ResourceStoreState, form: Any):
    state.form = form


def _reset_form(state: ResourceStoreState):
    state.form = state.new_form_fn()


def _set_form_list(state: ResourceStoreState, form_list: List[Any]):
    state.form_list = form_list


def _reset_form_list(state: ResourceStoreState):
    state.form_list = []


def _set_table_data(state: ResourceStoreState, payload: Dict[str, Any]):
    # Whole-page replace; never merged with the previous page
    state.table_data = payload["data"]
    total = payload.get("total")
    state.table_total = total if total is not None else 0


def _reset_table_data(state: ResourceStoreState):
    state.table_data = []
    state.table_total = 0


def _set_table_pagination(state: ResourceStoreState, pagination: TablePagination):
    state.table_pagination = pagination


def _reset_table_pagination(state: ResourceStoreState):
    state.table_pagination = get_default_pagination()


def _set_table_list_filter(state: ResourceStoreState, conditions: List[FilterCondition]):
    state.table_list_filter = conditions


def _reset_table_list_filter(state: ResourceStoreState):
    state.table_list_filter = []


def _set_table_list_filter_by_key(state: ResourceStoreState, payload: Dict[str, Any]):
    key = payload["key"]
    conditions = [c for c in state.table_list_filter if c.key != key]
    conditions.extend(payload.get("conditions") or [])
    state.table_list_filter = conditions


def _reset_table_list_filter_by_key(state: ResourceStoreState, key: str):
    state.table_list_filter = [c for c in state.table_list_filter if c.key != key]


def _set_table_list_sort(state: ResourceStoreState, sort: List[SortKey]):
    state.table_list_sort = sort


def _reset_table_list_sort(state: ResourceStoreState):
    state.table_list_sort = []


def _set_table_list_sort_by_key(state: ResourceStoreState, payload: Dict[str, Any]):
    key = payload["key"]
    sort = [s for s in state.table_list_sort if s.key != key]
    if payload.get("sort") is not None:
        sort.append(payload["sort"])
    state.table_list_sort = sort


def _reset_table_list_sort_by_key(state: ResourceStoreState, key: str):
    state.table_list_sort = [s for s in state.table_list_sort if s.key != key]


def _set_table_loading(state: ResourceStoreState, loading: bool):
    state.table_loading = loading


def _set_all_list(state: ResourceStoreState, all_list: List[Any]):
    state.all_list = all_list


def _reset_all_list(state: ResourceStoreState):
    state.all_list = []


def _show_dialog(state: ResourceStoreState, key: str = DIALOG_CREATE_EDIT):
    state.dialog_visible[key] = True
    state.active_dialog_key = key


def _hide_dialog(state: ResourceStoreState):
    state.dialog_visible = {k: False for k in state.dialog_visible}
    state.active_dialog_key = None


def get_default_store_mutations() -> Dict[str, Mutation]:
    return {
        "set_form": _set_form,
        "reset_form": _reset_form,
        "set_form_list": _set_form_list,
        "reset_form_list": _reset_form_list,
        "set_table_data": _set_table_data,
        "reset_table_data": _reset_table_data,
        "set_table_pagination": _set_table_pagination,
        "reset_table_pagination": _reset_table_pagination,
        "set_table_list_filter": _set_table_list_filter,
        "reset_table_list_filter": _reset_table_list_filter,
        "set_table_list_filter_by_key": _set_table_list_filter_by_key,
        "reset_table_list_filter_by_key": _reset_table_list_filter_by_key,
        "set_table_list_sort": _set_table_list_sort,
        "reset_table_list_sort": _reset_table_list_sort,
        "set_table_list_sort_by_key": _set_table_list_sort_by_key,
        "reset_table_list_sort_by_key": _reset_table_list_sort_by_key,
        "set_table_loading": _set_table_loading,
        "set_all_list": _set_all_list,
        "reset_all_list": _reset_all_list,
        "show_dialog": _show_dialog,
        "hide_dialog": _hide_dialog,
    }


# --- Actions ---


def build_list_payload(state: ResourceStoreState) -> Dict[str, Any]:
    """Pagination spread at top level plus serialised filter, sort and stats flag."""
    return {
        **state.table_pagination.model_dump(),
        "conditions": serialize_list_param(state.table_list_filter),
        "sort": serialize_list_param(state.table_list_sort),
        "stats": True,
    }


def get_default_store_actions(
    endpoint: str, entity_cls: Type[T] = BaseEntity
) -> Dict[str, Action]:
    """Generic CRUD actions against ``endpoint``."""

    async def get_list(ctx: "ActionContext") -> ResponseEnvelope:
        generation = ctx.begin_request("get_list")
        res = await ctx.transport.get_list(endpoint, build_list_payload(ctx.state))
        if not ctx.is_current("get_list", generation):
            return res
        ctx.commit(
            "set_table_data",
            {"data": parse_entities(entity_cls, res.data), "total": res.total},
        )
        return res

    async def get_all_list(ctx: "ActionContext") -> ResponseEnvelope:
        res = await ctx.transport.get_list(endpoint, {"all": True})
        ctx.commit("set_all_list", parse_entities(entity_cls, res.data))
        return res

    async def get_by_id(ctx: "ActionContext", id: str) -> ResponseEnvelope:
        res = await ctx.transport.get(f"{endpoint}/{id}")
        ctx.commit("set_form", parse_entity(entity_cls, res.data))
        return res

    async def create(ctx: "ActionContext", form: Any) -> ResponseEnvelope:
        return await ctx.transport.post(endpoint, form)

    async def update_by_id(ctx: "ActionContext", id: str, form: Any) -> ResponseEnvelope:
        return await ctx.transport.post(f"{endpoint}/{id}", form)

    async def delete_by_id(ctx: "ActionContext", id: str) -> ResponseEnvelope:
        return await ctx.transport.delete(f"{endpoint}/{id}")

    async def create_list(ctx: "ActionContext", forms: List[Any]) -> ResponseEnvelope:
        return await ctx.transport.post(f"{endpoint}/batch", forms)

    async def delete_list(ctx: "ActionContext", ids: List[str]) -> ResponseEnvelope:
        return await ctx.transport.delete(endpoint, {"ids": ids})

    return {
        "get_list": get_list,
        "get_all_list": get_all_list,
        "get_by_id": get_by_id,
        "create": create,
        "update_by_id": update_by_id,
        "delete_by_id": delete_by_id,
        "create_list": create_list,
        "delete_list": delete_list,
    }


class ActionContext:
    """What an action sees of its module: state, transport, commit and dispatch."""

    def __init__(self, module: "StoreModule"):
        self._module = module

    @property
    def state(self):
        return self._module.state

    @property
    def transport(self) -> BaseTransport:
        return self._module.transport

    def commit(self, name: str, *args: Any):
        self._module.commit(name, *args)

    async def dispatch(self, name: str, *args: Any, **kwargs: Any) -> Any:
        return await self._module.dispatch(name, *args, **kwargs)

    def get(self, name: str) -> Any:
        return self._module.get(name)

    def begin_request(self, key: str) -> int:
        return self._module.begin_request(key)

    def is_current(self, key: str, generation: int) -> bool:
        return self._module.is_current(key, generation)


class StoreModule(Generic[S]):
    """
    One resource's state plus its named getters, mutations and actions.

    ``commit`` is the only entry point that changes state. When
    ``fence_requests`` is enabled, responses of a fenced action that was
    re-issued before they arrived are returned to the caller but not committed.
    """

    def __init__(
        self,
        state: S,
        getters: Dict[str, Getter],
        mutations: Dict[str, Mutation],
        actions: Dict[str, Action],
        transport: BaseTransport,
        fence_requests: bool = False,
    ):
        self.state = state
        self.getters = getters
        self.mutations = mutations
        self.actions = actions
        self.transport = transport
        self.fence_requests = fence_requests
        self._generations: Dict[str, int] = {}

    @property
    def ns(self) -> str:
        return self.state.ns

    def commit(self, name: str, *args: Any):
        mutation = self.mutations.get(name)
        if mutation is None:
            raise UnknownMutationError(f"Unknown mutation: {self.ns}/{name}")
        logger.debug(f"commit {self.ns}/{name}")
        mutation(self.state, *args)

    async def dispatch(self, name: str, *args: Any, **kwargs: Any) -> Any:
        action = self.actions.get(name)
        if action is None:
            raise UnknownActionError(f"Unknown action: {self.ns}/{name}")
        logger.debug(f"dispatch {self.ns}/{name}")
        return await action(ActionContext(self), *args, **kwargs)

    def get(self, name: str) -> Any:
        getter = self.getters.get(name)
        if getter is None:
            raise UnknownGetterError(f"Unknown getter: {self.ns}/{name}")
        return getter(self.state)

    def begin_request(self, key: str) -> int:
        generation = self._generations.get(key, 0) + 1
        self._generations[key] = generation
        return generation

    def is_current(self, key: str, generation: int) -> bool:
        if not self.fence_requests:
            return True
        if self._generations.get(key) != generation:
            logger.debug(f"discarding stale response of {self.ns}/{key}")
            return False
        return True


def create_store_module(
    ns: str,
    endpoint: str,
    transport: BaseTransport,
    entity_cls: Type[T] = BaseEntity,
    state: Optional[ResourceStoreState] = None,
    getters: Optional[Dict[str, Getter]] = None,
    mutations: Optional[Dict[str, Mutation]] = None,
    actions: Optional[Dict[str, Action]] = None,
    fence_requests: bool = False,
) -> StoreModule:
    """
    Composes the default maps with a resource's own deltas.

    Resource entries override defaults of the same name.
    """
    if state is None:
        state = get_default_store_state(ResourceStoreState, ns, new_form_fn=entity_cls)
    return StoreModule(
        state=state,
        getters={**get_default_store_getters(), **(getters or {})},
        mutations={**get_default_store_mutations(), **(mutations or {})},
        actions={
            **get_default_store_actions(endpoint, entity_cls),
            **(actions or {}),
        },
        transport=transport,
        fence_requests=fence_requests,
    )
