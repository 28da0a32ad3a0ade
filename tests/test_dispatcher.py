"""Tests for notification dispatchers."""

import asyncio
import json

import httpx
import pytest
from structlog.testing import capture_logs

from jobguard.config import Settings
from jobguard.errors import DispatchError
from jobguard.notifications.dispatcher import HttpDispatcher, LogDispatcher, build_dispatcher


def _dispatcher(handler, **kwargs) -> HttpDispatcher:
    return HttpDispatcher(
        email_url="https://mail.example/send",
        sms_url="https://sms.example/send",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def test_email_payload_and_token():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(202)

    asyncio.run(_dispatcher(handler, token="s3cret").send("email", "a@b.test", "code 123456"))

    request = seen[0]
    assert request.url == "https://mail.example/send"
    assert request.headers["Authorization"] == "Bearer s3cret"
    body = json.loads(request.content)
    assert body["to"] == "a@b.test"
    assert body["body"] == "code 123456"
    assert "subject" in body


def test_sms_goes_to_sms_gateway():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200)

    asyncio.run(_dispatcher(handler).send("phone", "+15550001111", "hi"))
    assert seen[0].url.host == "sms.example"
    assert "subject" not in json.loads(seen[0].content)
    assert "Authorization" not in seen[0].headers


def test_gateway_error_status_raises():
    dispatcher = _dispatcher(lambda request: httpx.Response(503))
    with pytest.raises(DispatchError):
        asyncio.run(dispatcher.send("email", "a@b.test", "x"))


def test_transport_error_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(DispatchError):
        asyncio.run(_dispatcher(handler).send("email", "a@b.test", "x"))


def test_missing_channel_url_raises():
    dispatcher = HttpDispatcher(email_url="https://mail.example/send")
    with pytest.raises(DispatchError):
        asyncio.run(dispatcher.send("phone", "+15550001111", "x"))


def test_build_dispatcher_demo_mode():
    assert isinstance(build_dispatcher(Settings()), LogDispatcher)
    assert isinstance(build_dispatcher(Settings(email_gateway_url="https://mail.example")), HttpDispatcher)


def test_log_dispatcher_only_logs():
    dispatcher = LogDispatcher()
    with capture_logs() as logs:
        asyncio.run(dispatcher.send("email", "a@b.test", "Your code is: 123456"))
        asyncio.run(dispatcher.send("phone", "+15550001111", "Your code is: 654321"))

    assert [(e["event"], e["destination"]) for e in logs] == [
        ("notification.logged", "a@b.test"),
        ("notification.logged", "+15550001111"),
    ]
    assert vars(dispatcher) == {}
