"""Configuration module — frozen dataclass built from YAML, env vars and CLI args."""

import argparse
import logging
import os
from dataclasses import dataclass, fields

import yaml

from addevents_sink.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Env var name for each setting
ENV_VARS = {
    "addevents_url": "ADDEVENTS_URL",
    "api_key": "ADDEVENTS_API_KEY",
    "message_field": "MESSAGE_FIELD",
    "server_host_field": "SERVER_HOST_FIELD",
    "logfile_field": "LOGFILE_FIELD",
    "parser_field": "PARSER_FIELD",
    "batch_size": "BATCH_SIZE",
    "request_timeout": "REQUEST_TIMEOUT",
    "input_file": "INPUT_FILE",
}


@dataclass(frozen=True)
class SinkConfig:
    addevents_url: str = "https://app.scalyr.com"
    api_key: str = ""
    message_field: str = "message"
    server_host_field: str = "host.name"
    logfile_field: str = "log.file.path"
    parser_field: str = "parser"
    batch_size: int = 100
    request_timeout: float | None = None
    input_file: str | None = None


def _optional_float(value) -> float | None:
    if value is None or str(value).strip() == "":
        return None
    return float(value)


_CONVERTERS = {
    "batch_size": int,
    "request_timeout": _optional_float,
}

# YAML turns unquoted digits into ints (0123 is octal 83), so these must be quoted
STRING_SETTINGS = frozenset({
    "addevents_url",
    "api_key",
    "message_field",
    "server_host_field",
    "logfile_field",
    "parser_field",
    "input_file",
})


def load_yaml_config(path: str | None) -> dict:
    """Load settings from a YAML file. Returns empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        logger.info("Loaded YAML config from %s", path)
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return data


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Ship JSON-lines records to addEvents")
    parser.add_argument("--config", type=str, default=None, help="YAML config file")
    parser.add_argument("--url", dest="addevents_url", type=str, default=None)
    parser.add_argument("--api-key", type=str, default=None)
    parser.add_argument("--message-field", type=str, default=None)
    parser.add_argument("--server-host-field", type=str, default=None)
    parser.add_argument("--logfile-field", type=str, default=None)
    parser.add_argument("--parser-field", type=str, default=None)
    parser.add_argument("--batch-size", type=int, default=None)
    parser.add_argument("--request-timeout", type=float, default=None)
    parser.add_argument("input_file", nargs="?", default=None)
    return parser


def load_config(argv=None) -> SinkConfig:
    """Build SinkConfig from defaults <- YAML file <- env vars <- CLI args.

    Pass argv for testability; when None, argparse reads sys.argv.

    Raises:
        ConfigurationError: If the api key is missing or a value is invalid.
    """
    args = _build_parser().parse_args(argv)
    names = [f.name for f in fields(SinkConfig)]

    kwargs: dict = {}
    yaml_data = load_yaml_config(args.config)
    for key, value in yaml_data.items():
        if key not in names:
            logger.warning("Ignoring unknown config key %r", key)
            continue
        if key in STRING_SETTINGS and value is not None and not isinstance(value, str):
            raise ConfigurationError(
                f"Config key {key!r} must be a string, got {type(value).__name__} {value!r}; "
                "quote the value in the YAML file"
            )
        kwargs[key] = value

    for name in names:
        env_value = os.environ.get(ENV_VARS[name])
        if env_value is not None:
            kwargs[name] = env_value

    # CLI flags override everything else
    for name in names:
        cli_value = getattr(args, name, None)
        if cli_value is not None:
            kwargs[name] = cli_value

    try:
        for name, convert in _CONVERTERS.items():
            if name in kwargs:
                kwargs[name] = convert(kwargs[name])
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid configuration value: {exc}") from exc

    config = SinkConfig(**kwargs)
    if not config.api_key:
        raise ConfigurationError(
            f"An api key is required (--api-key or {ENV_VARS['api_key']})"
        )
    if config.batch_size <= 0:
        raise ConfigurationError(f"batch_size must be positive, got {config.batch_size}")
    return config
