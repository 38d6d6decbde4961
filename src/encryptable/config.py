import logging
import os

_TRUTHY = {"1", "true", "yes", "on"}


def strict_by_default() -> bool:
    return os.getenv("ENCRYPTABLE_STRICT", "").strip().lower() in _TRUTHY


def resolve_strict(strict: bool | None) -> bool:
    return strict_by_default() if strict is None else strict


def log_level() -> int:
    name = os.getenv("ENCRYPTABLE_LOG_LEVEL", "WARNING").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING
