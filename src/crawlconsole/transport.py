import asyncio
import json
import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

import requests
from pydantic import BaseModel

from crawlconsole.exceptions import TransportError
from crawlconsole.models import ResponseEnvelope
from crawlconsole.utils import to_jsonable

logger = logging.getLogger("crawlconsole.transport")


class BaseTransport(ABC):
    """Abstract request contract consumed by the store actions.

    Every method is asynchronous, returns a ``ResponseEnvelope`` and raises
    ``TransportError`` on any non-success outcome. No retries are made.
    """

    @abstractmethod
    async def get(
        self, path: str, params: Optional[Dict[str, Any]] = None
    ) -> ResponseEnvelope:
        """Fetches a single resource or sub-resource."""
        pass

    @abstractmethod
    async def post(
        self,
        path: str,
        data: Any = None,
        params: Optional[Dict[str, Any]] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> ResponseEnvelope:
        """
        Sends a body to the server.

        Args:
            path: Endpoint path relative to the API base URL.
            data: JSON-serialisable body, or multipart fields when
                ``options["multipart"]`` is set.
            params: Optional query string parameters.
            options: Request options. ``multipart=True`` switches the body
                encoding from JSON to a multi-part form.
        """
        pass

    @abstractmethod
    async def delete(
        self, path: str, params: Optional[Dict[str, Any]] = None
    ) -> ResponseEnvelope:
        """Deletes a resource."""
        pass

    @abstractmethod
    async def get_list(
        self, path: str, params: Optional[Dict[str, Any]] = None
    ) -> ResponseEnvelope:
        """Fetches a page of a collection. The envelope carries ``total``."""
        pass


def encode_params(params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Encodes query parameters the way the REST API expects them."""
    encoded: Dict[str, Any] = {}
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            encoded[key] = "true" if value else "false"
        elif isinstance(value, (list, dict, BaseModel)):
            encoded[key] = json.dumps(to_jsonable(value))
        else:
            encoded[key] = value
    return encoded


def split_multipart(data: Dict[str, Any]) -> Tuple[Dict[str, str], Dict[str, Any]]:
    """
    Splits a multipart body into plain form fields and file parts.

    The ``file`` key is always sent as a file part named after the basename
    of ``path``, whatever its value type. Every other key is a form field.
    """
    fields: Dict[str, str] = {}
    files: Dict[str, Any] = {}
    for key, value in (data or {}).items():
        if key == "file":
            if isinstance(value, tuple):
                files[key] = value
            else:
                filename = os.path.basename(data.get("path") or "") or "file"
                files[key] = (filename, value)
        elif value is not None:
            fields[key] = value if isinstance(value, str) else str(value)
    return fields, files


class RequestsTransport(BaseTransport):
    """
    Transport backed by a ``requests.Session``.

    Blocking calls run in a worker thread via ``asyncio.to_thread`` so the
    event loop driving the store is never blocked.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        if token:
            self.session.headers["Authorization"] = token

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _request(self, method: str, path: str, **kwargs) -> ResponseEnvelope:
        url = self._url(path)
        try:
            response = self.session.request(
                method, url, timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise TransportError(str(e), path=path) from e

        if not response.ok:
            logger.warning(f"{method} {path} returned HTTP {response.status_code}")
            raise TransportError(
                f"{method} {path} returned HTTP {response.status_code}: {response.text}",
                status_code=response.status_code,
                path=path,
            )

        if not response.content:
            return ResponseEnvelope()

        try:
            payload = response.json()
        except ValueError as e:
            raise TransportError(
                f"{method} {path} returned invalid JSON",
                status_code=response.status_code,
                path=path,
            ) from e

        if not isinstance(payload, dict):
            return ResponseEnvelope(data=payload)
        return ResponseEnvelope.model_validate(payload)

    async def get(self, path, params=None):
        return await asyncio.to_thread(
            self._request, "GET", path, params=encode_params(params)
        )

    async def post(self, path, data=None, params=None, options=None):
        options = options or {}
        if options.get("multipart"):
            fields, files = split_multipart(data)
            return await asyncio.to_thread(
                self._request,
                "POST",
                path,
                params=encode_params(params),
                data=fields,
                files=files,
            )
        return await asyncio.to_thread(
            self._request,
            "POST",
            path,
            params=encode_params(params),
            json=to_jsonable(data),
        )

    async def delete(self, path, params=None):
        return await asyncio.to_thread(
            self._request, "DELETE", path, params=encode_params(params)
        )

    async def get_list(self, path, params=None):
        return await asyncio.to_thread(
            self._request, "GET", path, params=encode_params(params)
        )
