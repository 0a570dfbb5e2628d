from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime, timezone
import json

from discordhooks.errors import ImagesRequireUrl, InvalidTimestamp, TooManyImages
from discordhooks.models import NOW, Embed, WebhookMessage

SUPPRESS_NOTIFICATIONS = 4096
MAX_EMBED_IMAGES = 4

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _normalize_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_timestamp(instant: datetime) -> str:
    """Format ``instant`` as ``yyyy-MM-ddTHH:mm:ss.sssZ`` in UTC."""
    utc = _normalize_utc(instant)
    return (
        f"{utc.year:04d}-{utc.month:02d}-{utc.day:02d}"
        f"T{utc.hour:02d}:{utc.minute:02d}:{utc.second:02d}.{utc.microsecond // 1000:03d}Z"
    )


def _parse_iso_timestamp(raw: str) -> datetime:
    text = raw.strip()
    if text.endswith(("Z", "z")):
        text = f"{text[:-1]}+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise InvalidTimestamp(raw) from exc


def _format_instant(instant: datetime, value: object) -> str:
    try:
        return format_timestamp(instant)
    except OverflowError as exc:
        # Offsets near datetime.min/max leave the representable range in UTC.
        raise InvalidTimestamp(value) from exc


def resolve_timestamp(value: object, *, clock: Clock | None = None) -> str | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return _format_instant(value, value)
    if isinstance(value, str):
        if value.strip().lower() == NOW:
            return format_timestamp((clock or _utc_now)())
        if not value.strip():
            raise InvalidTimestamp(value)
        return _format_instant(_parse_iso_timestamp(value), value)
    raise InvalidTimestamp(value)


def build_embed(embed: Embed, *, clock: Clock | None = None) -> list[dict[str, object]]:
    """Map one embed to the JSON objects Discord expects.

    Discord shows a single image per embed object, so an embed with several
    images becomes several objects sharing the same ``url``. Consecutive
    embeds with an identical ``url`` are rendered as one gallery card.
    """
    images = embed.images or ()
    if len(images) > MAX_EMBED_IMAGES:
        raise TooManyImages(len(images), MAX_EMBED_IMAGES)
    if len(images) > 1 and not embed.url:
        raise ImagesRequireUrl(len(images))

    payload: dict[str, object] = {}
    if embed.author is not None:
        author: dict[str, object] = {"name": embed.author.name}
        if embed.author.url is not None:
            author["url"] = embed.author.url
        if embed.author.icon_url is not None:
            author["icon_url"] = embed.author.icon_url
        payload["author"] = author
    if embed.title is not None:
        payload["title"] = embed.title
    if embed.description is not None:
        payload["description"] = embed.description
    # An empty url is treated as missing, matching the image rules above.
    if embed.url:
        payload["url"] = embed.url
    if embed.color is not None:
        payload["color"] = embed.color
    if embed.fields is not None:
        payload["fields"] = [
            {"name": field.name, "value": field.value, "inline": bool(field.inline)}
            for field in embed.fields
        ]
    if embed.thumbnail is not None:
        payload["thumbnail"] = {"url": embed.thumbnail.url}
    if embed.footer is not None:
        footer: dict[str, object] = {"text": embed.footer.text}
        if embed.footer.icon_url is not None:
            footer["icon_url"] = embed.footer.icon_url
        payload["footer"] = footer

    timestamp = resolve_timestamp(embed.timestamp, clock=clock)
    if timestamp is not None:
        payload["timestamp"] = timestamp

    if not images:
        return [payload]

    payload["image"] = {"url": images[0].url}
    objects = [payload]
    for image in images[1:]:
        objects.append({"url": embed.url, "image": {"url": image.url}})
    return objects


def build_payload(message: WebhookMessage, *, clock: Clock | None = None) -> dict[str, object]:
    payload: dict[str, object] = {}
    if message.username is not None:
        payload["username"] = message.username
    if message.avatar_url is not None:
        payload["avatar_url"] = message.avatar_url
    if message.content is not None:
        payload["content"] = message.content
    if message.thread_name is not None:
        payload["thread_name"] = message.thread_name
    if message.notify is False:
        payload["flags"] = SUPPRESS_NOTIFICATIONS
    if message.embeds is not None:
        embeds: list[dict[str, object]] = []
        for embed in message.embeds:
            embeds.extend(build_embed(embed, clock=clock))
        payload["embeds"] = embeds
    return payload


def serialize_payload(payload: Mapping[str, object]) -> str:
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
