from __future__ import annotations


class WebhookError(Exception):
    """Base class for every error raised by discordhooks."""


class InvalidTimestamp(WebhookError, ValueError):
    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Invalid embed timestamp: {value!r}")


class TooManyImages(WebhookError, ValueError):
    def __init__(self, count: int, limit: int) -> None:
        self.count = count
        self.limit = limit
        super().__init__(f"An embed can have at most {limit} images, got {count}")


class ImagesRequireUrl(WebhookError, ValueError):
    def __init__(self, count: int) -> None:
        self.count = count
        super().__init__(f"Cannot add {count} images to an embed without a url")


class DeliveryFailure(WebhookError):
    """The webhook POST failed.

    ``status_code`` is the HTTP status when a response was received, or
    ``None`` for transport errors (DNS, connect, timeout).
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
