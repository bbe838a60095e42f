"""Configuration models - Pure data structures.

These are domain models for configuration. The actual loading
(I/O) is handled by the shell layer.
"""

from dataclasses import dataclass, field


STORAGE_BACKENDS = ("firestore", "memory", "none")


@dataclass
class LineConfig:
    """LINE Messaging API credentials.

    Attributes:
        channel_access_token: Bearer token for push/reply (None disables push)
        channel_secret: Secret for webhook signature validation
    """
    channel_access_token: str | None = None
    channel_secret: str | None = None


@dataclass
class StorageConfig:
    """Persistence configuration.

    Attributes:
        backend: 'firestore', 'memory' (local development) or 'none'
        project_id: GCP project ID (None for default)
        database: Firestore database name (None for default database)
        subscriptions_collection: Collection holding subscription records
        deliveries_collection: Collection holding delivery records
        history_prefix: Prefix for per-category history collections
    """
    backend: str = "firestore"
    project_id: str | None = None
    database: str | None = None
    subscriptions_collection: str = "subscriptions"
    deliveries_collection: str = "deliveries"
    history_prefix: str = "history_"


@dataclass
class ScheduleConfig:
    """Tick intervals for the periodic jobs, in seconds.

    Scheduled delivery has no interval: it runs on every wall-clock minute.
    """
    alert_tick_seconds: int = 300
    recording_tick_seconds: int = 300


@dataclass
class Config:
    """Application configuration.

    This is a pure data structure - no I/O or side effects.

    Attributes:
        timezone: IANA zone used for scheduled delivery hours
        cache_ttl_seconds: Reading cache time-to-live
        request_timeout_seconds: Timeout applied to every external call
        pacing_ms: Delay between consecutive subscriber pushes
        nasa_api_key: NASA API key for DONKI
        admin_api_key: Key required by administrative HTTP endpoints
        line: LINE credentials
        storage: Persistence settings
        schedule: Tick intervals
    """
    timezone: str = "Asia/Taipei"
    cache_ttl_seconds: int = 60
    request_timeout_seconds: int = 10
    pacing_ms: int = 100
    nasa_api_key: str = "DEMO_KEY"
    admin_api_key: str | None = None
    line: LineConfig = field(default_factory=LineConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)


@dataclass
class ValidationError:
    """A configuration validation error.

    Attributes:
        field: The field that has an error
        message: Human-readable error description
        severity: 'error' or 'warning'
    """
    field: str
    message: str
    severity: str = "error"


@dataclass
class ValidationResult:
    """Result of validating configuration.

    Attributes:
        valid: True if no errors (warnings are OK)
        errors: List of validation errors/warnings
    """
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def warnings(self) -> list[ValidationError]:
        """Get only warnings."""
        return [e for e in self.errors if e.severity == "warning"]

    @property
    def critical_errors(self) -> list[ValidationError]:
        """Get only critical errors."""
        return [e for e in self.errors if e.severity == "error"]


def _is_placeholder(value: str | None) -> bool:
    return bool(value) and value.startswith("${")


def validate_config(config: Config) -> ValidationResult:
    """Validate configuration for errors and warnings.

    Pure function. Missing credentials are warnings, not errors: the
    affected subsystem disables itself and the rest keeps running.

    Args:
        config: Configuration to validate

    Returns:
        ValidationResult with any errors/warnings found
    """
    errors: list[ValidationError] = []

    for name in ("cache_ttl_seconds", "request_timeout_seconds"):
        if getattr(config, name) <= 0:
            errors.append(ValidationError(
                field=name,
                message=f"{name} must be positive, got {getattr(config, name)}",
            ))

    if config.pacing_ms < 0:
        errors.append(ValidationError(
            field="pacing_ms",
            message=f"pacing_ms must not be negative, got {config.pacing_ms}",
        ))

    for name in ("alert_tick_seconds", "recording_tick_seconds"):
        if getattr(config.schedule, name) <= 0:
            errors.append(ValidationError(
                field=f"schedule.{name}",
                message=f"Tick interval must be positive, got {getattr(config.schedule, name)}",
            ))

    if config.storage.backend not in STORAGE_BACKENDS:
        errors.append(ValidationError(
            field="storage.backend",
            message=f"Unknown storage backend '{config.storage.backend}', expected one of {', '.join(STORAGE_BACKENDS)}",
        ))
    elif config.storage.backend != "firestore":
        errors.append(ValidationError(
            field="storage.backend",
            message=f"Storage backend '{config.storage.backend}' does not persist subscriptions",
            severity="warning",
        ))

    token = config.line.channel_access_token
    if not token or _is_placeholder(token):
        errors.append(ValidationError(
            field="line.channel_access_token",
            message="LINE channel access token not set; push and reply are disabled",
            severity="warning",
        ))

    if not config.line.channel_secret or _is_placeholder(config.line.channel_secret):
        errors.append(ValidationError(
            field="line.channel_secret",
            message="LINE channel secret not set; webhook signatures are not verified",
            severity="warning",
        ))

    if config.nasa_api_key == "DEMO_KEY":
        errors.append(ValidationError(
            field="nasa_api_key",
            message="Using NASA DEMO_KEY; DONKI requests are heavily rate limited",
            severity="warning",
        ))

    has_critical = any(e.severity == "error" for e in errors)

    return ValidationResult(
        valid=not has_critical,
        errors=errors,
    )
