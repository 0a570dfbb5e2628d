from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

DEFAULT_EMBED_COLOR = 16711680
NOW = "now"

Timestamp = str | datetime


def _freeze(values: Sequence[object] | None) -> tuple[object, ...] | None:
    if values is None:
        return None
    return tuple(values)


@dataclass(frozen=True)
class EmbedAuthor:
    name: str
    url: str | None = None
    icon_url: str | None = None


@dataclass(frozen=True)
class EmbedField:
    name: str
    value: str
    inline: bool = False


@dataclass(frozen=True)
class EmbedThumbnail:
    url: str


@dataclass(frozen=True)
class EmbedImage:
    url: str


@dataclass(frozen=True)
class EmbedFooter:
    """Footer text is rendered as plain text; markdown is not supported."""

    text: str
    icon_url: str | None = None


@dataclass(frozen=True)
class Embed:
    """A rich content card.

    ``fields=None`` means the embed has no field list at all, while an empty
    sequence is sent as an empty list. ``timestamp`` accepts ``"now"`` in any
    case, a ``datetime`` or an ISO-8601 string.
    """

    author: EmbedAuthor | None = None
    title: str | None = None
    url: str | None = None
    description: str | None = None
    color: int | None = DEFAULT_EMBED_COLOR
    fields: Sequence[EmbedField] | None = None
    thumbnail: EmbedThumbnail | None = None
    images: Sequence[EmbedImage] | None = None
    footer: EmbedFooter | None = None
    timestamp: Timestamp | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", _freeze(self.fields))
        object.__setattr__(self, "images", _freeze(self.images))


@dataclass(frozen=True)
class WebhookMessage:
    username: str | None = None
    avatar_url: str | None = None
    content: str | None = None
    thread_name: str | None = None
    notify: bool | None = True
    embeds: Sequence[Embed] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "embeds", _freeze(self.embeds))
