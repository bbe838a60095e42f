"""Cloud Function Entry Points.

Thin wrappers that load configuration, build the orchestrator once per
instance and run one tick per invocation. Cloud Scheduler calls the HTTP
functions (or publishes to the Pub/Sub variant) at the tick intervals.

Run this module directly to drive all three ticks from a local
scheduler loop instead.
"""

import logging
import os
from typing import Any

import functions_framework
from flask import Request

from orbital.core.config import Config, validate_config
from orbital.orchestrator import Orchestrator
from orbital.scheduler import PeriodicScheduler
from orbital.shell.config_loader import load_config, load_config_from_env


# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


_orchestrator: Orchestrator | None = None


def _get_config() -> Config:
    """Load configuration from file or environment."""
    config_path = os.environ.get("CONFIG_PATH")

    if config_path:
        config = load_config(config_path)
    elif os.environ.get("LINE_CHANNEL_ACCESS_TOKEN"):
        config = load_config_from_env()
    else:
        config = load_config()

    result = validate_config(config)
    for warning in result.warnings:
        logger.warning("Config %s: %s", warning.field, warning.message)
    if not result.valid:
        messages = "; ".join(f"{e.field}: {e.message}" for e in result.critical_errors)
        raise ValueError(f"Invalid configuration: {messages}")

    return config


def get_orchestrator() -> Orchestrator:
    """Build the orchestrator on first use and reuse it afterwards.

    Cloud Function instances are reused between invocations, so the
    reading cache and the alert cooldown survive across warm calls.
    """
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = Orchestrator.from_config(_get_config())
    return _orchestrator


def _run(name: str, orchestrator: Orchestrator) -> tuple[dict[str, Any], int]:
    if name == "scheduled-delivery":
        result = orchestrator.run_delivery_tick()
        body = {"ran": result.ran, "sent": result.sent, "total": result.total}
    elif name == "alert-check":
        result = orchestrator.run_alert_tick()
        body = {
            "summary": result.summary,
            "fired": [{"topic": f.topic.value, "sent": f.sent, "total": f.total} for f in result.fired],
        }
    elif name == "recording":
        result = orchestrator.run_recording_tick()
        body = {"written": result.written, "skipped": result.skipped, "failed": result.failed}
    else:
        raise ValueError(f"Unknown tick: {name}")

    body["status"] = "success" if result.success else "partial_failure"
    if result.errors:
        body["errors"] = result.errors

    status_code = 200 if result.success else 207  # 207 = Multi-Status
    return body, status_code


def run_tick(name: str, orchestrator: Orchestrator | None = None) -> tuple[dict[str, Any], int]:
    """Run one named tick and build an HTTP response.

    Args:
        name: 'scheduled-delivery', 'alert-check' or 'recording'
        orchestrator: Orchestrator to use (the shared instance if None)

    Returns:
        Tuple of (response dict, HTTP status code)
    """
    logger.info("Starting %s tick", name)

    try:
        return _run(name, orchestrator or get_orchestrator())
    except Exception as e:
        logger.exception("Unexpected error in %s tick", name)
        return {
            "status": "error",
            "message": str(e),
        }, 500


@functions_framework.http
def scheduled_delivery_tick(request: Request) -> tuple[dict[str, Any], int]:
    """HTTP entry point for the once-a-minute daily report tick."""
    return run_tick("scheduled-delivery")


@functions_framework.http
def alert_check_tick(request: Request) -> tuple[dict[str, Any], int]:
    """HTTP entry point for the alert check."""
    return run_tick("alert-check")


@functions_framework.http
def recording_tick(request: Request) -> tuple[dict[str, Any], int]:
    """HTTP entry point for historical recording."""
    return run_tick("recording")


@functions_framework.cloud_event
def tick_pubsub(cloud_event: Any) -> None:
    """Pub/Sub entry point.

    The message attribute 'tick' names the tick to run.

    Args:
        cloud_event: CloudEvent from Pub/Sub
    """
    message = (cloud_event.data or {}).get("message", {})
    name = (message.get("attributes") or {}).get("tick", "alert-check")

    body, status_code = run_tick(name)
    if status_code >= 500:
        raise RuntimeError(body.get("message", "tick failed"))
    logger.info("Completed %s tick: %s", name, body.get("status"))


def run_local() -> None:
    """Drive all ticks from an in-process scheduler until interrupted."""
    orchestrator = get_orchestrator()
    scheduler = orchestrator.schedule_ticks(PeriodicScheduler())

    logger.info("Running %d periodic tasks locally (Ctrl+C to stop)", len(scheduler.tasks))
    try:
        scheduler.run_forever()
    except KeyboardInterrupt:
        logger.info("Stopping")
    finally:
        scheduler.cancel_all()


if __name__ == "__main__":
    run_local()
