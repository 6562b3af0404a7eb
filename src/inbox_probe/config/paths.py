import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env once, globally
load_dotenv()

DEFAULT_WAIT_TIME_SEC = 30
DEFAULT_MAX_WAIT_TIME_SEC = 60


def resolve_path(env_key: str, default: str) -> Path:
    """
    Resolve a path from ENV.
    Relative paths are resolved against the current working directory,
    which is where test suites usually keep their secrets.
    """
    value = os.getenv(env_key) or default
    path = Path(value).expanduser()

    if not path.is_absolute():
        path = Path.cwd() / path

    return path


def env_int(env_key: str, default: int) -> int:
    value = os.getenv(env_key)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"{env_key} must be an integer, got {value!r}") from exc


def secrets_dir() -> Path:
    return resolve_path("INBOX_PROBE_SECRETS_DIR", "secrets")


def credentials_path(override: Optional[Path] = None) -> Path:
    if override is not None:
        return Path(override)
    explicit = os.getenv("INBOX_PROBE_CREDENTIALS_PATH")
    if explicit:
        return resolve_path("INBOX_PROBE_CREDENTIALS_PATH", explicit)
    return secrets_dir() / "credentials.json"


def token_path(override: Optional[Path] = None) -> Path:
    if override is not None:
        return Path(override)
    explicit = os.getenv("INBOX_PROBE_TOKEN_PATH")
    if explicit:
        return resolve_path("INBOX_PROBE_TOKEN_PATH", explicit)
    return secrets_dir() / "gmail_token.json"


def default_wait_time_sec() -> int:
    return env_int("INBOX_PROBE_WAIT_TIME_SEC", DEFAULT_WAIT_TIME_SEC)


def default_max_wait_time_sec() -> int:
    return env_int("INBOX_PROBE_MAX_WAIT_TIME_SEC", DEFAULT_MAX_WAIT_TIME_SEC)
