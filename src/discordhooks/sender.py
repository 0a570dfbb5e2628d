from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
import logging
from urllib.parse import urlsplit

import httpx

from discordhooks.errors import DeliveryFailure, WebhookError
from discordhooks.models import WebhookMessage
from discordhooks.payload import Clock, build_payload, serialize_payload

_HEADERS = {"Content-Type": "application/json"}


@dataclass(frozen=True)
class DeliveryResult:
    status_code: int


def _webhook_host(webhook_url: str) -> str:
    # The path carries the webhook token, so only the host is ever logged.
    return urlsplit(webhook_url).netloc or "<invalid url>"


def _check_response(response: httpx.Response) -> DeliveryResult:
    if not response.is_success:
        raise DeliveryFailure(
            f"Unexpected HTTP response: {response.status_code}",
            status_code=response.status_code,
        )
    return DeliveryResult(status_code=response.status_code)


class WebhookSender:
    """Delivers webhook messages with a single POST per message.

    ``send`` blocks, ``dispatch`` runs the POST on a worker thread and
    ``send_async`` awaits it on the running event loop. Payload errors are
    always raised to the caller before any request is made.
    """

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
        async_transport: httpx.AsyncBaseTransport | None = None,
        clock: Clock | None = None,
        max_workers: int = 4,
        logger: logging.Logger | None = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport
        self._async_transport = async_transport
        self._clock = clock
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="discordhooks",
        )
        self._closed = False
        self.logger = logger or logging.getLogger(__name__)

    def __enter__(self) -> WebhookSender:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._closed = True
        self._executor.shutdown(wait=True)

    def _prepare(self, webhook_url: str, message: WebhookMessage) -> bytes:
        if not webhook_url:
            raise ValueError("Webhook URL must not be empty")
        payload = build_payload(message, clock=self._clock)
        return serialize_payload(payload).encode("utf-8")

    def send(self, webhook_url: str, message: WebhookMessage) -> DeliveryResult:
        body = self._prepare(webhook_url, message)
        return self._post(webhook_url, body)

    def dispatch(self, webhook_url: str, message: WebhookMessage) -> Future[DeliveryResult]:
        if self._closed:
            raise WebhookError("Cannot dispatch on a closed WebhookSender")
        body = self._prepare(webhook_url, message)
        future = self._executor.submit(self._post, webhook_url, body)
        future.add_done_callback(self._log_dispatch_outcome)
        return future

    async def send_async(self, webhook_url: str, message: WebhookMessage) -> DeliveryResult:
        body = self._prepare(webhook_url, message)
        host = _webhook_host(webhook_url)
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._async_transport,
            ) as client:
                response = await client.post(webhook_url, content=body, headers=_HEADERS)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise DeliveryFailure(f"Webhook request to {host} failed: {exc}") from exc

        result = _check_response(response)
        self.logger.info("Webhook delivered host=%s status=%s", host, result.status_code)
        return result

    def _post(self, webhook_url: str, body: bytes) -> DeliveryResult:
        host = _webhook_host(webhook_url)
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(webhook_url, content=body, headers=_HEADERS)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise DeliveryFailure(f"Webhook request to {host} failed: {exc}") from exc

        result = _check_response(response)
        self.logger.info("Webhook delivered host=%s status=%s", host, result.status_code)
        return result

    def _log_dispatch_outcome(self, future: Future[DeliveryResult]) -> None:
        if future.cancelled():
            self.logger.warning("Webhook dispatch was cancelled")
            return
        exc = future.exception()
        if exc is not None:
            self.logger.error("Webhook dispatch failed: %s", exc)
