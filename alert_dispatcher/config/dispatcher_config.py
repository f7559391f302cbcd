from __future__ import annotations

import math
from dataclasses import dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlparse

import yaml
from dotenv import load_dotenv

from alert_dispatcher.domain.errors import ConfigurationError

DEFAULT_BACKEND_URL = "http://localhost:9090"
DEFAULT_LOG_FILE = "alerts.log"
DEFAULT_INTERVAL_S = 30.0
DEFAULT_MAX_LOG_BYTES = 10 * 1024 * 1024

CONFIG_PATH_ENV = "ALERT_DISPATCHER_CONFIG"

# setting name -> environment variable
ENV_VARS = {
    "backend_url": "PROMETHEUS_URL",
    "log_file": "LOG_FILE",
    "interval_s": "CHECK_INTERVAL",
    "max_log_bytes": "MAX_LOG_SIZE",
    "webhook_url": "WEBHOOK_URL",
    "webhook_auth_header": "WEBHOOK_AUTH_HEADER",
    "verbose": "VERBOSE",
    "run_once": "RUN_ONCE",
    "test_only": "TEST_MODE",
}

_TRUE = {"1", "true", "yes", "y", "on"}
_FALSE = {"0", "false", "no", "n", "off", ""}


class RunMode(str, Enum):
    """
    Dispatcher run mode.

    Members
    -------
    LOOP : str
        Poll forever, sleeping between cycles.
    ONCE : str
        Run a single cycle and exit.
    TEST : str
        Check backend connectivity and exit.
    """

    LOOP = "loop"
    ONCE = "once"
    TEST = "test"


@dataclass(frozen=True)
class DispatcherConfig:
    """
    Root dispatcher configuration.

    Built once at startup and passed explicitly to every collaborator; it is
    never mutated afterwards.
    """

    backend_url: str = DEFAULT_BACKEND_URL
    log_file: Path = Path(DEFAULT_LOG_FILE)
    interval_s: float = DEFAULT_INTERVAL_S
    max_log_bytes: int = DEFAULT_MAX_LOG_BYTES
    webhook_url: Optional[str] = None
    webhook_auth_header: Optional[str] = None
    webhook_verify_tls: bool = True
    verbose: bool = False
    mode: RunMode = RunMode.LOOP
    connect_timeout_s: float = 5.0
    fetch_timeout_s: float = 10.0
    webhook_timeout_s: float = 10.0
    wait_unit_s: float = 1.0


_FILE_KEYS = frozenset(f.name for f in fields(DispatcherConfig))


def _parse_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {value!r}")


def _parse_positive_float(name: str, value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from e
    if not math.isfinite(number) or number <= 0:
        raise ConfigurationError(f"{name} must be a finite number greater than 0, got {value!r}")
    return number


def _parse_positive_int(name: str, value: Any) -> int:
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from e
    if number <= 0:
        raise ConfigurationError(f"{name} must be greater than 0, got {value!r}")
    return number


def _parse_url(name: str, value: Any) -> str:
    url = str(value).strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigurationError(f"{name} must be an http(s) URL, got {value!r}")
    return url


def read_config_file(path: str | Path) -> Dict[str, Any]:
    """
    Read an optional YAML settings file.

    Raises
    ------
    ConfigurationError
        If the file is missing or unreadable, is not valid YAML, is not a
        mapping at the root, or names a setting that does not exist.
    """
    cfg_path = Path(path).expanduser()
    if not cfg_path.exists():
        raise ConfigurationError(f"Config not found: {cfg_path}")
    try:
        with cfg_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {cfg_path}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Cannot read config {cfg_path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"{cfg_path} must contain a YAML mapping at the root")

    unknown = sorted(str(k) for k in data if k not in _FILE_KEYS)
    if unknown:
        raise ConfigurationError(f"Unknown setting(s) in {cfg_path}: {', '.join(unknown)}")
    return data


def load_env_file(path: str | Path = ".env") -> None:
    """Load a ``.env`` file if present; real environment variables win."""
    load_dotenv(Path(path), override=False)


def build_config(
    cli: Mapping[str, Any],
    env: Mapping[str, str],
    file_settings: Optional[Mapping[str, Any]] = None,
) -> DispatcherConfig:
    """
    Resolve the dispatcher configuration.

    Precedence per setting: CLI value, then environment variable, then the
    YAML file, then the built-in default. CLI entries set to None count as
    "not given".

    Parameters
    ----------
    cli
        Parsed command-line values keyed by setting name (``run_once`` and
        ``test_only`` select the mode).
    env
        Environment mapping (usually ``os.environ``).
    file_settings
        Contents of the YAML file, if one was given.

    Returns
    -------
    DispatcherConfig
        Validated configuration.

    Raises
    ------
    ConfigurationError
        If any value is invalid.
    """
    file_settings = file_settings or {}
    defaults = DispatcherConfig()

    def pick(key: str, default: Any = None) -> Any:
        value = cli.get(key)
        if value is not None:
            return value
        env_name = ENV_VARS.get(key)
        if env_name and env.get(env_name, "").strip() != "":
            return env[env_name]
        if file_settings.get(key) is not None:
            return file_settings[key]
        return default

    webhook_raw = pick("webhook_url")
    webhook_url = _parse_url("webhook_url", webhook_raw) if webhook_raw else None

    if _parse_bool("test_only", pick("test_only", False)):
        mode = RunMode.TEST
    elif _parse_bool("run_once", pick("run_once", False)):
        mode = RunMode.ONCE
    else:
        try:
            mode = RunMode(str(file_settings.get("mode", RunMode.LOOP.value)))
        except ValueError as e:
            raise ConfigurationError(f"mode must be one of loop/once/test, got {file_settings.get('mode')!r}") from e

    log_file = pick("log_file", DEFAULT_LOG_FILE)
    if not str(log_file).strip():
        raise ConfigurationError("log_file must not be empty")

    return DispatcherConfig(
        backend_url=_parse_url("backend_url", pick("backend_url", DEFAULT_BACKEND_URL)),
        log_file=Path(str(log_file)).expanduser(),
        interval_s=_parse_positive_float("interval_s", pick("interval_s", DEFAULT_INTERVAL_S)),
        max_log_bytes=_parse_positive_int("max_log_bytes", pick("max_log_bytes", DEFAULT_MAX_LOG_BYTES)),
        webhook_url=webhook_url,
        webhook_auth_header=pick("webhook_auth_header") or None,
        webhook_verify_tls=_parse_bool("webhook_verify_tls", file_settings.get("webhook_verify_tls", True)),
        verbose=_parse_bool("verbose", pick("verbose", False)),
        mode=mode,
        connect_timeout_s=_parse_positive_float(
            "connect_timeout_s", file_settings.get("connect_timeout_s", defaults.connect_timeout_s)
        ),
        fetch_timeout_s=_parse_positive_float(
            "fetch_timeout_s", file_settings.get("fetch_timeout_s", defaults.fetch_timeout_s)
        ),
        webhook_timeout_s=_parse_positive_float(
            "webhook_timeout_s", file_settings.get("webhook_timeout_s", defaults.webhook_timeout_s)
        ),
        wait_unit_s=_parse_positive_float("wait_unit_s", file_settings.get("wait_unit_s", defaults.wait_unit_s)),
    )
