import os
import logging
from pathlib import Path
from typing import Optional

try:
    from dotenv import load_dotenv
except ImportError:
    logging.warning("python-dotenv not available; using environment variables only")
else:
    loaded = load_dotenv()
    if not loaded and Path(".env").exists():
        raise RuntimeError(".env file present but failed to load")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def get_str_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw


def get_optional_str_env(name: str) -> Optional[str]:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return None
    return raw


def get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except Exception:
        logging.exception("Invalid %s: %r", name, raw)
        return default


def get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    logging.warning("Invalid boolean for %s: %r; using %s", name, raw, default)
    return default
