from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional, Literal, Any
from enum import Enum


class TaskMode(str, Enum):
    RANDOM = "random"
    ALL_NODES = "all-nodes"
    SELECTED_NODES = "selected-nodes"


class PluginDeployMode(str, Enum):
    MASTER = "master"
    ALL = "all"


class PluginStatusValue(str, Enum):
    INSTALLING = "installing"
    INSTALL_ERROR = "install_error"
    RUNNING = "running"
    STOPPED = "stopped"
    ERROR = "error"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class BaseEntity(BaseModel):
    """Server-managed record. Only the identifier is interpreted by the store."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Optional[str] = Field(None, alias="_id")


class Spider(BaseEntity):
    name: Optional[str] = None
    col_name: Optional[str] = Field(None, description="Result collection name")
    description: Optional[str] = None
    project_id: Optional[str] = None
    mode: Optional[str] = None
    cmd: Optional[str] = None
    param: Optional[str] = None
    priority: Optional[int] = None


class Task(BaseEntity):
    spider_id: Optional[str] = None
    status: Optional[str] = None
    node_id: Optional[str] = None
    cmd: Optional[str] = None
    param: Optional[str] = None
    mode: Optional[str] = None
    priority: Optional[int] = None


class PluginStatus(BaseModel):
    model_config = ConfigDict(extra="allow")

    node_id: Optional[str] = None
    status: Optional[str] = None
    pid: Optional[int] = None
    error: Optional[str] = None


class Plugin(BaseEntity):
    name: Optional[str] = None
    full_name: Optional[str] = None
    description: Optional[str] = None
    deploy_mode: Optional[str] = None
    status: Optional[List[PluginStatus]] = None
    active: bool = False


class PluginSettings(BaseModel):
    model_config = ConfigDict(extra="allow")

    base_url: Optional[str] = None


class FileNavItem(BaseModel):
    """One node of a spider's file tree."""

    model_config = ConfigDict(extra="allow")

    path: Optional[str] = None
    name: Optional[str] = None
    is_dir: bool = False
    extension: Optional[str] = None
    size: Optional[int] = None
    children: List["FileNavItem"] = Field(default_factory=list)

    @field_validator("children", mode="before")
    @classmethod
    def null_children(cls, v: Any) -> Any:
        return [] if v is None else v


class GitLog(BaseModel):
    model_config = ConfigDict(extra="allow")

    hash: Optional[str] = None
    msg: Optional[str] = None
    author_name: Optional[str] = None
    author_email: Optional[str] = None
    timestamp: Optional[str] = None
    refs: List[Any] = Field(default_factory=list)

    @field_validator("refs", mode="before")
    @classmethod
    def null_refs(cls, v: Any) -> Any:
        return [] if v is None else v


class GitChange(BaseModel):
    model_config = ConfigDict(extra="allow")

    path: str
    name: Optional[str] = None
    is_dir: bool = False
    staged: bool = False
    status: Optional[str] = None


class GitData(BaseModel):
    model_config = ConfigDict(extra="allow")

    current_branch: Optional[str] = None
    branches: List[Any] = Field(default_factory=list)
    logs: List[GitLog] = Field(default_factory=list)
    changes: List[GitChange] = Field(default_factory=list)

    @field_validator("branches", "logs", "changes", mode="before")
    @classmethod
    def null_lists(cls, v: Any) -> Any:
        # Empty slices arrive as null
        return [] if v is None else v


class SpiderRunOptions(BaseModel):
    mode: TaskMode = TaskMode.RANDOM
    node_ids: List[str] = Field(default_factory=list)
    cmd: Optional[str] = None
    param: Optional[str] = None
    priority: int = 5


class TablePagination(BaseModel):
    page: int = Field(1, ge=1)
    size: int = Field(10, gt=0)


class FilterCondition(BaseModel):
    key: str
    op: str = "eq"
    value: Any = None


class SortKey(BaseModel):
    key: str
    direction: SortDirection = SortDirection.ASC


class ResponseEnvelope(BaseModel):
    """JSON envelope returned by every REST endpoint."""

    model_config = ConfigDict(extra="allow")

    data: Any = None
    total: Optional[int] = None
    message: Optional[str] = None
    error: Optional[str] = None


class ConsoleSettings(BaseModel):
    base_url: str = "http://localhost:8080/api"
    token: Optional[str] = None
    timeout: float = Field(30.0, gt=0, description="Request timeout in seconds")

    # Discard list responses that were superseded by a newer request
    fence_requests: bool = False

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
