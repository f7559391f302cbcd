"""CLI entry-point for the Alert Dispatcher.

Usage examples
--------------
# Run with default settings (poll http://localhost:9090 every 30s):
alert-dispatcher

# Run once and exit:
alert-dispatcher --once

# Custom backend URL and webhook:
alert-dispatcher -u http://prometheus:9090 -w http://webhook-service/alerts

# Test connectivity and exit:
alert-dispatcher --test
"""

from __future__ import annotations

import argparse
import logging
import os
import signal
import sys
from typing import Any, Dict, List, Mapping, Optional

from alert_dispatcher.bootstrap import build_dispatcher_system
from alert_dispatcher.config.dispatcher_config import (
    CONFIG_PATH_ENV,
    DispatcherConfig,
    build_config,
    load_env_file,
    read_config_file,
)
from alert_dispatcher.domain.errors import ConfigurationError
from alert_dispatcher.logging_config import PACKAGE_LOGGER, setup_logging
from alert_dispatcher.runtime.dispatcher_runtime import EXIT_FAILURE, DispatcherRuntime

logger = logging.getLogger(PACKAGE_LOGGER)

_EPILOG = """\
environment variables:
  PROMETHEUS_URL        Prometheus server URL
  LOG_FILE              Path to log file
  CHECK_INTERVAL        Check interval in seconds
  MAX_LOG_SIZE          Rotate the log file above this many bytes
  WEBHOOK_URL           Webhook URL for notifications
  WEBHOOK_AUTH_HEADER   Authorization header (or bare token) for the webhook
  VERBOSE               Enable verbose logging (true/false)
  RUN_ONCE              Run once and exit (true/false)
  TEST_MODE             Test connectivity and exit (true/false)
  ALERT_DISPATCHER_CONFIG  Optional YAML settings file
"""


class _DispatcherArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise ConfigurationError(message)


def build_parser() -> argparse.ArgumentParser:
    p = _DispatcherArgumentParser(
        prog="alert-dispatcher",
        description="Alert Dispatcher - Prometheus alert monitoring tool",
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("-u", "--url", dest="backend_url", help="Prometheus URL (default: http://localhost:9090)")
    p.add_argument("-l", "--log-file", dest="log_file", help="Log file path (default: alerts.log)")
    p.add_argument("-i", "--interval", dest="interval_s", metavar="SECONDS",
                   help="Check interval in seconds (default: 30)")
    p.add_argument("--max-log-size", dest="max_log_bytes", metavar="BYTES",
                   help="Rotate the log file when it exceeds this size (default: 10485760)")
    p.add_argument("-w", "--webhook", dest="webhook_url", help="Webhook URL for notifications")
    p.add_argument("-v", "--verbose", dest="verbose", action="store_true", default=None,
                   help="Enable verbose logging")
    p.add_argument("--once", dest="run_once", action="store_true", default=None,
                   help="Run once and exit (don't loop)")
    p.add_argument("--test", dest="test_only", action="store_true", default=None,
                   help="Test connectivity and exit")
    p.add_argument("-c", "--config", dest="config_path", help="Optional YAML settings file")
    return p


def load_config(argv: Optional[List[str]], env: Mapping[str, str]) -> DispatcherConfig:
    """
    Parse CLI arguments and resolve the full configuration.

    Raises
    ------
    ConfigurationError
        For unknown options or invalid values.
    """
    args = build_parser().parse_args(argv)
    cli: Dict[str, Any] = vars(args)

    config_path = cli.pop("config_path", None) or env.get(CONFIG_PATH_ENV)
    file_settings = read_config_file(config_path) if config_path else {}
    return build_config(cli, env, file_settings)


def _install_signal_handlers(runtime: DispatcherRuntime) -> None:
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            signal.signal(sig, runtime.handle_signal)
        except ValueError:
            # Not on the main thread; the caller is responsible for stopping.
            logger.debug("signal handler not installed for %s", sig)


def _log_startup(cfg: DispatcherConfig) -> None:
    logger.info("Alert Dispatcher starting...")
    logger.info("Prometheus URL: %s", cfg.backend_url)
    logger.info("Log file: %s", cfg.log_file)
    logger.info("Check interval: %ss", int(cfg.interval_s) if cfg.interval_s.is_integer() else cfg.interval_s)
    if cfg.webhook_url:
        logger.info("Webhook URL: %s", cfg.webhook_url)
    else:
        logger.info("Webhook notifications disabled (no webhook URL configured)")


def main(argv: Optional[List[str]] = None, env: Optional[Mapping[str, str]] = None) -> int:
    if env is None:
        load_env_file()
        env = os.environ

    try:
        cfg = load_config(argv, env)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        build_parser().print_usage(sys.stderr)
        return EXIT_FAILURE

    try:
        file_sink = setup_logging(cfg.log_file, cfg.max_log_bytes, cfg.verbose)
    except OSError as e:
        print(f"Configuration error: cannot open log file {cfg.log_file}: {e}", file=sys.stderr)
        return EXIT_FAILURE

    wiring = build_dispatcher_system(cfg, file_sink=file_sink)
    _log_startup(cfg)
    _install_signal_handlers(wiring.runtime)
    return wiring.runtime.run()


if __name__ == "__main__":
    sys.exit(main())
