import json
import logging
from typing import Any, Dict, Iterable, List

from pydantic import BaseModel

from crawlconsole.models import TablePagination

logger = logging.getLogger("crawlconsole.utils")


def get_default_pagination() -> TablePagination:
    """Default page window of a paginated table."""
    return TablePagination(page=1, size=10)


def to_jsonable(value: Any) -> Any:
    """Converts pydantic models (possibly nested in lists/dicts) to plain JSON data."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def serialize_list_param(items: Iterable[Any]) -> str:
    """
    JSON-encodes a filter or sort sequence for the list query string.

    Items are serialised as they are; malformed entries are left for the
    server to reject.
    """
    return json.dumps(to_jsonable(list(items)))


def get_fields_from_data(rows: Iterable[Any]) -> List[str]:
    """Returns the union of keys across rows, in order of first appearance."""
    fields: Dict[str, None] = {}
    for row in rows:
        if isinstance(row, BaseModel):
            row = row.model_dump()
        if not isinstance(row, dict):
            continue
        for key in row:
            fields.setdefault(key, None)
    return list(fields)


def setup_logging(level: int = logging.INFO):
    """Configures the global logging for the application."""
    import sys

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # Suppress noisy debug logs from the HTTP stack
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)
