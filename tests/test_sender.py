from __future__ import annotations

import asyncio
from pathlib import Path
import logging
import sys
import threading

import httpx
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from discordhooks.errors import DeliveryFailure, ImagesRequireUrl, WebhookError
from discordhooks.models import Embed, EmbedImage, WebhookMessage
from discordhooks.sender import DeliveryResult, WebhookSender

WEBHOOK = "https://discord.test/api/webhooks/1/token"


def test_send_posts_webhook_payload() -> None:
    observed: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        observed["method"] = request.method
        observed["url"] = str(request.url)
        observed["content_type"] = request.headers["content-type"]
        observed["body"] = request.content.decode("utf-8")
        return httpx.Response(204)

    with WebhookSender(transport=httpx.MockTransport(handler)) as sender:
        result = sender.send(WEBHOOK, WebhookMessage(content="Hello"))

    assert result == DeliveryResult(status_code=204)
    assert observed["method"] == "POST"
    assert observed["url"] == WEBHOOK
    assert observed["content_type"] == "application/json"
    assert observed["body"] == '{"content":"Hello"}'


def test_send_raises_delivery_failure_with_status() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"message": "Unknown Webhook"})

    with WebhookSender(transport=httpx.MockTransport(handler)) as sender:
        with pytest.raises(DeliveryFailure) as exc_info:
            sender.send(WEBHOOK, WebhookMessage(content="Hello"))

    assert exc_info.value.status_code == 404


def test_send_wraps_transport_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with WebhookSender(transport=httpx.MockTransport(handler)) as sender:
        with pytest.raises(DeliveryFailure) as exc_info:
            sender.send(WEBHOOK, WebhookMessage(content="Hello"))

    assert exc_info.value.status_code is None
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


def test_send_does_not_post_when_payload_is_invalid() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(204)

    message = WebhookMessage(
        embeds=[Embed(images=[EmbedImage(url="https://img.test/a"), EmbedImage(url="https://img.test/b")])]
    )
    with WebhookSender(transport=httpx.MockTransport(handler)) as sender:
        with pytest.raises(ImagesRequireUrl):
            sender.send(WEBHOOK, message)

    assert calls == []


def test_send_rejects_empty_webhook_url() -> None:
    with WebhookSender() as sender:
        with pytest.raises(ValueError, match="must not be empty"):
            sender.send("", WebhookMessage(content="Hello"))


def test_dispatch_runs_off_the_calling_thread() -> None:
    observed: dict[str, object] = {}

    def handler(_: httpx.Request) -> httpx.Response:
        observed["thread"] = threading.current_thread().name
        return httpx.Response(200)

    with WebhookSender(transport=httpx.MockTransport(handler)) as sender:
        future = sender.dispatch(WEBHOOK, WebhookMessage(content="Hello"))
        result = future.result(timeout=5)

    assert result.status_code == 200
    assert observed["thread"] != threading.current_thread().name


def test_dispatch_failure_is_carried_by_future_and_logged(caplog: pytest.LogCaptureFixture) -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    caplog.set_level(logging.ERROR, logger="discordhooks.sender")
    with WebhookSender(transport=httpx.MockTransport(handler)) as sender:
        future = sender.dispatch(WEBHOOK, WebhookMessage(content="Hello"))
        exc = future.exception(timeout=5)

    assert isinstance(exc, DeliveryFailure)
    assert exc.status_code == 500
    assert "Webhook dispatch failed" in caplog.text


def test_dispatch_raises_build_errors_immediately() -> None:
    message = WebhookMessage(embeds=[Embed(timestamp="not-a-time")])

    with WebhookSender() as sender:
        with pytest.raises(ValueError):
            sender.dispatch(WEBHOOK, message)


def test_concurrent_dispatches_are_independent() -> None:
    bodies: list[str] = []
    lock = threading.Lock()

    def handler(request: httpx.Request) -> httpx.Response:
        with lock:
            bodies.append(request.content.decode("utf-8"))
        return httpx.Response(204)

    with WebhookSender(transport=httpx.MockTransport(handler)) as sender:
        futures = [
            sender.dispatch(WEBHOOK, WebhookMessage(content=f"message {index}"))
            for index in range(5)
        ]
        results = [future.result(timeout=5) for future in futures]

    assert all(result.status_code == 204 for result in results)
    assert sorted(bodies) == sorted(f'{{"content":"message {index}"}}' for index in range(5))


def test_send_async_posts_payload() -> None:
    observed: dict[str, str] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        observed["body"] = request.content.decode("utf-8")
        return httpx.Response(204)

    with WebhookSender(async_transport=httpx.MockTransport(handler)) as sender:
        result = asyncio.run(sender.send_async(WEBHOOK, WebhookMessage(content="Hello", notify=False)))

    assert result.status_code == 204
    assert observed["body"] == '{"content":"Hello","flags":4096}'


def test_send_async_raises_on_http_error() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(429)

    with WebhookSender(async_transport=httpx.MockTransport(handler)) as sender:
        with pytest.raises(DeliveryFailure) as exc_info:
            asyncio.run(sender.send_async(WEBHOOK, WebhookMessage(content="Hello")))

    assert exc_info.value.status_code == 429


def test_successful_send_logs_host_without_token(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="discordhooks.sender")

    with WebhookSender(transport=httpx.MockTransport(lambda _: httpx.Response(204))) as sender:
        sender.send(WEBHOOK, WebhookMessage(content="Hello"))

    messages = [
        record.getMessage() for record in caplog.records if record.name == "discordhooks.sender"
    ]
    assert messages == ["Webhook delivered host=discord.test status=204"]


def test_dispatch_after_close_raises_webhook_error() -> None:
    sender = WebhookSender(transport=httpx.MockTransport(lambda _: httpx.Response(204)))
    sender.close()

    with pytest.raises(WebhookError, match="closed"):
        sender.dispatch(WEBHOOK, WebhookMessage(content="Hello"))
