"""discordhooks package."""

from discordhooks.config import Settings, load_settings
from discordhooks.errors import (
    DeliveryFailure,
    ImagesRequireUrl,
    InvalidTimestamp,
    TooManyImages,
    WebhookError,
)
from discordhooks.models import (
    DEFAULT_EMBED_COLOR,
    NOW,
    Embed,
    EmbedAuthor,
    EmbedField,
    EmbedFooter,
    EmbedImage,
    EmbedThumbnail,
    WebhookMessage,
)
from discordhooks.payload import (
    build_embed,
    build_payload,
    format_timestamp,
    resolve_timestamp,
    serialize_payload,
)
from discordhooks.sender import DeliveryResult, WebhookSender

__all__ = [
    "DEFAULT_EMBED_COLOR",
    "DeliveryFailure",
    "DeliveryResult",
    "Embed",
    "EmbedAuthor",
    "EmbedField",
    "EmbedFooter",
    "EmbedImage",
    "EmbedThumbnail",
    "ImagesRequireUrl",
    "InvalidTimestamp",
    "NOW",
    "Settings",
    "TooManyImages",
    "WebhookError",
    "WebhookMessage",
    "WebhookSender",
    "build_embed",
    "build_payload",
    "format_timestamp",
    "load_settings",
    "resolve_timestamp",
    "serialize_payload",
]
__version__ = "0.1.0"
