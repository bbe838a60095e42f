"""Configuration Loader - Imperative Shell.

This module handles loading configuration from YAML files and
environment variables. All I/O is contained here.

Models (Config, LineConfig, StorageConfig, ScheduleConfig) are defined
in orbital/core/config.py.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from orbital.core.config import Config, LineConfig, ScheduleConfig, StorageConfig
from orbital.shell.secret_manager_client import SecretManagerClient, SecretManagerConfig


logger = logging.getLogger(__name__)


def _get_secret_manager_client() -> SecretManagerClient | None:
    """Get a Secret Manager client.

    Returns None if no GCP project is set (e.g., local development).
    """
    project_id = os.environ.get("GCP_PROJECT") or os.environ.get("GOOGLE_CLOUD_PROJECT")
    if project_id:
        return SecretManagerClient(SecretManagerConfig(project_id=project_id))
    return None


def _resolve_value(value: Any, secret_client: SecretManagerClient | None = None) -> Any:
    """Resolve a value that may contain secret or env var placeholders.

    Args:
        value: Value to resolve (may contain ${...} placeholders)
        secret_client: Client for resolving secrets

    Returns:
        Resolved value
    """
    if not isinstance(value, str):
        return value

    if secret_client:
        return secret_client.resolve(value)

    # No secret client - only handle env vars
    if value.startswith("${") and value.endswith("}"):
        var_spec = value[2:-1]
        if not var_spec.startswith("secret:"):
            env_value = os.environ.get(var_spec)
            if env_value:
                return env_value
            logger.warning("Environment variable %s not set", var_spec)

    return value


def _parse_line(data: dict[str, Any], secret_client: SecretManagerClient | None) -> LineConfig:
    return LineConfig(
        channel_access_token=_resolve_value(data.get("channel_access_token"), secret_client),
        channel_secret=_resolve_value(data.get("channel_secret"), secret_client),
    )


def _parse_storage(data: dict[str, Any]) -> StorageConfig:
    defaults = StorageConfig()
    return StorageConfig(
        backend=data.get("backend", defaults.backend),
        project_id=data.get("project_id"),
        database=data.get("database"),
        subscriptions_collection=data.get("subscriptions_collection", defaults.subscriptions_collection),
        deliveries_collection=data.get("deliveries_collection", defaults.deliveries_collection),
        history_prefix=data.get("history_prefix", defaults.history_prefix),
    )


def _parse_schedule(data: dict[str, Any]) -> ScheduleConfig:
    defaults = ScheduleConfig()
    return ScheduleConfig(
        alert_tick_seconds=int(data.get("alert_tick_seconds", defaults.alert_tick_seconds)),
        recording_tick_seconds=int(data.get("recording_tick_seconds", defaults.recording_tick_seconds)),
    )


def load_config_from_dict(data: dict[str, Any]) -> Config:
    """Load configuration from a dictionary.

    This is a pure-ish function (only placeholder expansion has side effects).

    Args:
        data: Configuration dictionary

    Returns:
        Parsed Config object
    """
    secret_client = _get_secret_manager_client()
    defaults = Config()

    return Config(
        timezone=data.get("timezone", defaults.timezone),
        cache_ttl_seconds=int(data.get("cache_ttl_seconds", defaults.cache_ttl_seconds)),
        request_timeout_seconds=int(data.get("request_timeout_seconds", defaults.request_timeout_seconds)),
        pacing_ms=int(data.get("pacing_ms", defaults.pacing_ms)),
        nasa_api_key=_resolve_value(data.get("nasa_api_key", defaults.nasa_api_key), secret_client),
        admin_api_key=_resolve_value(data.get("admin_api_key"), secret_client),
        line=_parse_line(data.get("line") or {}, secret_client),
        storage=_parse_storage(data.get("storage") or {}),
        schedule=_parse_schedule(data.get("schedule") or {}),
    )


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from a YAML file.

    This method performs file I/O.

    Args:
        config_path: Path to YAML config file.
                    If None, uses CONFIG_PATH env var or default.

    Returns:
        Parsed Config object

    Raises:
        yaml.YAMLError: If config file is invalid YAML
    """
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH", "config/config.yaml")

    path = Path(config_path)

    logger.info("Loading configuration from %s", path)

    if not path.exists():
        logger.warning("Config file not found: %s, using environment", path)
        return load_config_from_env()

    with open(path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        logger.warning("Config file is empty, using environment")
        return load_config_from_env()

    config = load_config_from_dict(data)

    logger.info(
        "Loaded config: timezone=%s, storage=%s, push=%s",
        config.timezone,
        config.storage.backend,
        "enabled" if config.line.channel_access_token else "disabled",
    )

    return config


def load_config_from_env() -> Config:
    """Load configuration from environment variables.

    Useful for simple deployments without a YAML file.

    Environment variables:
        LINE_CHANNEL_ACCESS_TOKEN: Channel token (or secret 'line-channel-access-token')
        LINE_CHANNEL_SECRET: Channel secret (or secret 'line-channel-secret')
        NASA_API_KEY: NASA API key (default DEMO_KEY)
        ADMIN_API_KEY: Key for administrative endpoints
        TIMEZONE: Zone for scheduled delivery (default Asia/Taipei)
        STORAGE_BACKEND: firestore, memory or none
        FIRESTORE_DATABASE: Firestore database name

    Returns:
        Config object from environment
    """
    secret_client = _get_secret_manager_client()

    def credential(secret_name: str, env_var: str) -> str | None:
        if secret_client:
            return secret_client.get_secret_or_env(secret_name, env_var)
        return os.environ.get(env_var)

    defaults = Config()

    return Config(
        timezone=os.environ.get("TIMEZONE", defaults.timezone),
        cache_ttl_seconds=int(os.environ.get("CACHE_TTL_SECONDS", defaults.cache_ttl_seconds)),
        pacing_ms=int(os.environ.get("PACING_MS", defaults.pacing_ms)),
        nasa_api_key=os.environ.get("NASA_API_KEY", defaults.nasa_api_key),
        admin_api_key=os.environ.get("ADMIN_API_KEY"),
        line=LineConfig(
            channel_access_token=credential("line-channel-access-token", "LINE_CHANNEL_ACCESS_TOKEN"),
            channel_secret=credential("line-channel-secret", "LINE_CHANNEL_SECRET"),
        ),
        storage=StorageConfig(
            backend=os.environ.get("STORAGE_BACKEND", "firestore"),
            project_id=os.environ.get("GCP_PROJECT"),
            database=os.environ.get("FIRESTORE_DATABASE"),
        ),
    )
