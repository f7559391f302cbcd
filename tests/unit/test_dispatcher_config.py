"""
Unit tests for alert_dispatcher.config.dispatcher_config.

These tests validate:
- defaults when nothing is configured
- precedence CLI > environment > YAML file > defaults
- run mode selection (test wins over once)
- validation errors raised as ConfigurationError
- YAML file loading (missing or unreadable file, non-mapping root,
  unknown settings)
"""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest

from alert_dispatcher.config.dispatcher_config import (
    DEFAULT_MAX_LOG_BYTES,
    DispatcherConfig,
    RunMode,
    build_config,
    read_config_file,
)
from alert_dispatcher.domain.errors import ConfigurationError


def test_defaults() -> None:
    cfg = build_config({}, {})

    assert cfg.backend_url == "http://localhost:9090"
    assert cfg.log_file == Path("alerts.log")
    assert cfg.interval_s == 30.0
    assert cfg.max_log_bytes == DEFAULT_MAX_LOG_BYTES == 10485760
    assert cfg.webhook_url is None
    assert cfg.verbose is False
    assert cfg.mode is RunMode.LOOP


def test_config_is_frozen() -> None:
    cfg = build_config({}, {})
    with pytest.raises(FrozenInstanceError):
        cfg.interval_s = 1  # type: ignore[misc]


def test_environment_values_are_used() -> None:
    env = {
        "PROMETHEUS_URL": "http://prom:9090",
        "LOG_FILE": "/tmp/a.log",
        "CHECK_INTERVAL": "15",
        "MAX_LOG_SIZE": "2048",
        "WEBHOOK_URL": "https://hooks.example.com/x",
        "VERBOSE": "true",
        "RUN_ONCE": "yes",
    }
    cfg = build_config({}, env)

    assert cfg.backend_url == "http://prom:9090"
    assert cfg.log_file == Path("/tmp/a.log")
    assert cfg.interval_s == 15.0
    assert cfg.max_log_bytes == 2048
    assert cfg.webhook_url == "https://hooks.example.com/x"
    assert cfg.verbose is True
    assert cfg.mode is RunMode.ONCE


def test_cli_overrides_environment_and_file() -> None:
    env = {"PROMETHEUS_URL": "http://env:9090", "CHECK_INTERVAL": "15"}
    file_settings = {"backend_url": "http://file:9090", "interval_s": 60, "log_file": "file.log"}
    cli = {"backend_url": "http://cli:9090", "interval_s": None}

    cfg = build_config(cli, env, file_settings)

    assert cfg.backend_url == "http://cli:9090"
    assert cfg.interval_s == 15.0
    assert cfg.log_file == Path("file.log")


def test_empty_environment_value_falls_through() -> None:
    cfg = build_config({}, {"WEBHOOK_URL": "  "}, {"webhook_url": "http://file/hook"})
    assert cfg.webhook_url == "http://file/hook"


def test_file_settings_for_timeouts_and_mode() -> None:
    cfg = build_config({}, {}, {"fetch_timeout_s": 3, "wait_unit_s": 0.25, "mode": "once"})
    assert cfg.fetch_timeout_s == 3.0
    assert cfg.wait_unit_s == 0.25
    assert cfg.mode is RunMode.ONCE


def test_test_mode_wins_over_once() -> None:
    cfg = build_config({"run_once": True, "test_only": True}, {})
    assert cfg.mode is RunMode.TEST


@pytest.mark.parametrize(
    "cli, env",
    [
        ({"interval_s": "abc"}, {}),
        ({"interval_s": "0"}, {}),
        ({"interval_s": "-5"}, {}),
        ({"interval_s": "nan"}, {}),
        ({"interval_s": "inf"}, {}),
        ({}, {"CHECK_INTERVAL": "-inf"}),
        ({"max_log_bytes": "1.5"}, {}),
        ({"max_log_bytes": "0"}, {}),
        ({"backend_url": "localhost:9090"}, {}),
        ({"backend_url": "ftp://prom"}, {}),
        ({"webhook_url": "not a url"}, {}),
        ({}, {"VERBOSE": "maybe"}),
    ],
)
def test_invalid_values_raise_configuration_error(cli, env) -> None:
    with pytest.raises(ConfigurationError):
        build_config(cli, env)


def test_invalid_mode_in_file() -> None:
    with pytest.raises(ConfigurationError, match="mode"):
        build_config({}, {}, {"mode": "forever"})


def test_read_config_file(tmp_path: Path) -> None:
    p = tmp_path / "dispatcher.yaml"
    p.write_text("backend_url: http://prom:9090\ninterval_s: 5\n", encoding="utf-8")

    assert read_config_file(p) == {"backend_url": "http://prom:9090", "interval_s": 5}


def test_read_config_file_empty_is_empty_mapping(tmp_path: Path) -> None:
    p = tmp_path / "empty.yaml"
    p.write_text("", encoding="utf-8")
    assert read_config_file(p) == {}


def test_read_config_file_missing(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="Config not found"):
        read_config_file(tmp_path / "nope.yaml")


def test_read_config_file_requires_mapping(tmp_path: Path) -> None:
    p = tmp_path / "list.yaml"
    p.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="mapping"):
        read_config_file(p)


def test_example_config_file_is_valid() -> None:
    example = Path(__file__).resolve().parents[2] / "config.example.yaml"
    cfg = build_config({}, {}, read_config_file(example))
    assert isinstance(cfg, DispatcherConfig)
    assert cfg.mode is RunMode.LOOP


def test_non_finite_timeout_in_file_is_rejected() -> None:
    with pytest.raises(ConfigurationError, match="wait_unit_s"):
        build_config({}, {}, {"wait_unit_s": float("nan")})


def test_read_config_file_rejects_unknown_keys(tmp_path: Path) -> None:
    p = tmp_path / "typo.yaml"
    p.write_text("interval: 5\nbackend_url: http://prom:9090\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="Unknown setting.*interval"):
        read_config_file(p)


def test_read_config_file_directory_is_configuration_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="Cannot read config"):
        read_config_file(tmp_path)


def test_read_config_file_invalid_utf8_is_configuration_error(tmp_path: Path) -> None:
    p = tmp_path / "latin1.yaml"
    p.write_bytes(b"log_file: caf\xe9.log\n")

    with pytest.raises(ConfigurationError):
        read_config_file(p)
