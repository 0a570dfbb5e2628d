from __future__ import annotations

import argparse
from collections.abc import Sequence
from dataclasses import replace
import logging
import os

from discordhooks.config import Settings, load_settings
from discordhooks.errors import WebhookError
from discordhooks.models import (
    Embed,
    EmbedField,
    EmbedFooter,
    EmbedImage,
    EmbedThumbnail,
    WebhookMessage,
)
from discordhooks.payload import build_payload, serialize_payload
from discordhooks.sender import WebhookSender
from dotenv import load_dotenv


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="discordhooks",
        description="Send a message to a Discord webhook.",
    )
    parser.add_argument("--webhook-url", help="Webhook URL (defaults to DISCORD_WEBHOOK_URL).")
    parser.add_argument("--content", help="Plain text message content.")
    parser.add_argument("--username", help="Override the webhook username.")
    parser.add_argument("--avatar-url", help="Override the webhook avatar.")
    parser.add_argument("--thread-name", help="Create a forum thread with this name.")
    parser.add_argument(
        "--silent",
        action="store_true",
        help="Suppress push and desktop notifications.",
    )

    embed_group = parser.add_argument_group("embed")
    embed_group.add_argument("--title", help="Embed title.")
    embed_group.add_argument("--description", help="Embed description.")
    embed_group.add_argument("--url", help="Embed url; required for more than one image.")
    embed_group.add_argument("--color", type=int, help="Embed color as a decimal RGB integer.")
    embed_group.add_argument(
        "--field",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Add an embed field (repeatable).",
    )
    embed_group.add_argument(
        "--inline-field",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Add an inline embed field (repeatable).",
    )
    embed_group.add_argument(
        "--image",
        action="append",
        default=[],
        metavar="URL",
        help="Add an embed image (repeatable, up to 4).",
    )
    embed_group.add_argument("--thumbnail", metavar="URL", help="Embed thumbnail url.")
    embed_group.add_argument("--footer", help="Embed footer text.")
    embed_group.add_argument("--timestamp", help='Embed timestamp: "now" or an ISO-8601 instant.')

    dry_run_group = parser.add_mutually_exclusive_group()
    dry_run_group.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the payload without sending it.",
    )
    dry_run_group.add_argument(
        "--no-dry-run",
        action="store_true",
        help="Disable dry-run mode.",
    )
    return parser


def _apply_cli_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    if args.webhook_url:
        settings = replace(settings, webhook_url=args.webhook_url)
    if args.dry_run:
        return replace(settings, dry_run=True)
    if args.no_dry_run:
        return replace(settings, dry_run=False)
    return settings


def _load_settings_with_cli_dry_run(args: argparse.Namespace) -> Settings:
    if args.dry_run or args.no_dry_run:
        load_dotenv()
        env = dict(os.environ)
        env["DISCORDHOOKS_DRY_RUN"] = "true" if args.dry_run else "false"
        return load_settings(env=env)
    return load_settings()


def _configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )


def _parse_field(raw: str, *, inline: bool, parser: argparse.ArgumentParser) -> EmbedField:
    name, separator, value = raw.partition("=")
    if not separator or not name.strip():
        parser.error(f"Invalid field {raw!r}; expected NAME=VALUE")
    return EmbedField(name=name.strip(), value=value, inline=inline)


def _build_embed(args: argparse.Namespace, parser: argparse.ArgumentParser) -> Embed | None:
    fields = [_parse_field(raw, inline=False, parser=parser) for raw in args.field]
    fields.extend(_parse_field(raw, inline=True, parser=parser) for raw in args.inline_field)

    has_embed = any(
        (
            args.title,
            args.description,
            args.url,
            args.color is not None,
            fields,
            args.image,
            args.thumbnail,
            args.footer,
            args.timestamp,
        )
    )
    if not has_embed:
        return None

    embed = Embed(
        title=args.title,
        description=args.description,
        url=args.url,
        fields=fields or None,
        thumbnail=EmbedThumbnail(url=args.thumbnail) if args.thumbnail else None,
        images=[EmbedImage(url=url) for url in args.image] or None,
        footer=EmbedFooter(text=args.footer) if args.footer else None,
        timestamp=args.timestamp,
    )
    if args.color is not None:
        embed = replace(embed, color=args.color)
    return embed


def build_message(
    args: argparse.Namespace,
    settings: Settings,
    parser: argparse.ArgumentParser,
) -> WebhookMessage:
    embed = _build_embed(args, parser)
    if args.content is None and embed is None:
        parser.error("Nothing to send; pass --content or at least one embed option")

    return WebhookMessage(
        username=args.username or settings.username,
        avatar_url=args.avatar_url or settings.avatar_url,
        content=args.content,
        thread_name=args.thread_name,
        notify=not args.silent,
        embeds=[embed] if embed is not None else None,
    )


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging()
    logger = logging.getLogger("discordhooks.main")
    try:
        settings = _apply_cli_overrides(_load_settings_with_cli_dry_run(args), args)
    except ValueError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1

    message = build_message(args, settings, parser)

    if settings.dry_run:
        try:
            print(serialize_payload(build_payload(message)))
        except WebhookError as exc:
            logger.error("Invalid message: %s", exc)
            return 1
        logger.info("Dry-run enabled; skipping webhook send")
        return 0

    if not settings.webhook_url:
        logger.error("DISCORD_WEBHOOK_URL or --webhook-url is required")
        return 1

    with WebhookSender(timeout=settings.timeout_seconds) as sender:
        try:
            result = sender.send(settings.webhook_url, message)
        except WebhookError as exc:
            logger.error("Webhook send failed: %s", exc)
            return 1

    logger.info("Webhook send completed status=%s", result.status_code)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
