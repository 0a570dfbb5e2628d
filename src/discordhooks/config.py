from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import os

from dotenv import load_dotenv

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    webhook_url: str | None = None
    username: str | None = None
    avatar_url: str | None = None
    timeout_seconds: float = 10.0
    dry_run: bool = False


def _read_bool(name: str, raw: str | None, *, default: bool) -> bool:
    if raw is None:
        return default

    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean value for {name}: {raw!r}")


def _read_positive_float(name: str, raw: str | None, *, default: float) -> float:
    if raw is None:
        return default

    try:
        parsed = float(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid number value for {name}: {raw!r}") from exc

    if parsed <= 0:
        raise ValueError(f"{name} must be greater than 0: {raw!r}")
    return parsed


def _read_optional_text(raw: str | None) -> str | None:
    if raw is None:
        return None
    stripped = raw.strip()
    return stripped or None


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    source: Mapping[str, str]
    if env is None:
        load_dotenv()
        source = os.environ
    else:
        source = env

    return Settings(
        webhook_url=_read_optional_text(source.get("DISCORD_WEBHOOK_URL")),
        username=_read_optional_text(source.get("DISCORDHOOKS_USERNAME")),
        avatar_url=_read_optional_text(source.get("DISCORDHOOKS_AVATAR_URL")),
        timeout_seconds=_read_positive_float(
            "DISCORDHOOKS_TIMEOUT_SECONDS",
            source.get("DISCORDHOOKS_TIMEOUT_SECONDS"),
            default=10.0,
        ),
        dry_run=_read_bool(
            "DISCORDHOOKS_DRY_RUN",
            source.get("DISCORDHOOKS_DRY_RUN"),
            default=False,
        ),
    )
