import asyncio
import json
from unittest.mock import MagicMock

import pytest
import requests

from crawlconsole.exceptions import TransportError
from crawlconsole.models import ResponseEnvelope, Spider
from crawlconsole.transport import RequestsTransport, encode_params, split_multipart


def _response(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.content = b"" if payload is None else json.dumps(payload).encode()
    response.json.return_value = payload
    response.text = "" if payload is None else json.dumps(payload)
    return response


@pytest.fixture
def session():
    session = MagicMock()
    session.headers = {}
    return session


def test_get_list_returns_envelope(session):
    session.request.return_value = _response(payload={"data": [{"_id": "1"}], "total": 12})
    transport = RequestsTransport("http://crawlab:8080/api/", session=session)

    res = asyncio.run(transport.get_list("/spiders", {"page": 1, "size": 10, "stats": True}))

    assert isinstance(res, ResponseEnvelope)
    assert res.total == 12
    args, kwargs = session.request.call_args
    assert args == ("GET", "http://crawlab:8080/api/spiders")
    assert kwargs["params"] == {"page": 1, "size": 10, "stats": "true"}
    assert kwargs["timeout"] == 30.0


def test_token_sets_authorization_header(session):
    RequestsTransport("http://crawlab/api", token="secret", session=session)
    assert session.headers["Authorization"] == "secret"


def test_post_serializes_models_by_alias(session):
    session.request.return_value = _response(payload={"data": None})
    transport = RequestsTransport("http://crawlab/api", session=session)

    asyncio.run(transport.post("/spiders", Spider(_id="s1", name="news")))

    assert session.request.call_args.kwargs["json"] == {"_id": "s1", "name": "news"}


def test_multipart_post_splits_fields_and_files(session):
    session.request.return_value = _response(payload={})
    transport = RequestsTransport("http://crawlab/api", session=session)
    blob = b"\x89PNG"

    asyncio.run(
        transport.post(
            "/spiders/s1/files/save",
            {"path": "/a.png", "file": blob},
            None,
            {"multipart": True},
        )
    )

    kwargs = session.request.call_args.kwargs
    assert kwargs["data"] == {"path": "/a.png"}
    assert kwargs["files"] == {"file": ("a.png", blob)}
    assert "json" not in kwargs


def test_http_error_raises_transport_error(session):
    session.request.return_value = _response(status_code=404, payload={"error": "not found"})
    transport = RequestsTransport("http://crawlab/api", session=session)

    with pytest.raises(TransportError) as exc_info:
        asyncio.run(transport.get("/spiders/missing"))

    assert exc_info.value.status_code == 404
    assert exc_info.value.path == "/spiders/missing"
    assert session.request.call_count == 1


def test_network_error_raises_transport_error(session):
    session.request.side_effect = requests.ConnectionError("refused")
    transport = RequestsTransport("http://crawlab/api", session=session)

    with pytest.raises(TransportError) as exc_info:
        asyncio.run(transport.delete("/spiders/s1"))

    assert exc_info.value.status_code is None
    assert isinstance(exc_info.value.__cause__, requests.ConnectionError)


def test_invalid_json_raises_transport_error(session):
    response = _response(payload={})
    response.content = b"<html>"
    response.json.side_effect = ValueError("not json")
    session.request.return_value = response
    transport = RequestsTransport("http://crawlab/api", session=session)

    with pytest.raises(TransportError):
        asyncio.run(transport.get("/spiders"))


def test_empty_body_returns_empty_envelope(session):
    session.request.return_value = _response(payload=None)
    transport = RequestsTransport("http://crawlab/api", session=session)

    res = asyncio.run(transport.post("/spiders/s1/git/pull"))

    assert res == ResponseEnvelope()


def test_encode_params():
    assert encode_params({"all": True, "skip": None, "ids": ["a", "b"], "page": 2}) == {
        "all": "true",
        "ids": '["a", "b"]',
        "page": 2,
    }
    assert encode_params(None) == {}


def test_split_multipart():
    fields, files = split_multipart({"path": "/x", "file": b"data"})
    assert fields == {"path": "/x"}
    assert files == {"file": ("x", b"data")}


def test_split_multipart_sends_text_file_content_as_file_part():
    fields, files = split_multipart(
        {"path": "/spiders/main.py", "file": "print('hi')\n"}
    )
    assert fields == {"path": "/spiders/main.py"}
    assert files == {"file": ("main.py", "print('hi')\n")}


def test_split_multipart_keeps_explicit_file_tuple():
    part = ("logo.png", b"\x89PNG", "image/png")
    fields, files = split_multipart({"path": "/a.png", "file": part})
    assert files == {"file": part}
