"""Runtime settings for the schedule controller."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import StrEnum

from .env import env_float, env_int
from .errors import ConfigurationError

DEFAULT_WORKERS = 2
DEFAULT_RESYNC_SECONDS = 30.0
DEFAULT_POLL_SECONDS = 1.0
DEFAULT_BACKOFF_BASE_SECONDS = 0.005
DEFAULT_BACKOFF_MAX_SECONDS = 1000.0
DEFAULT_QPS = 10.0
DEFAULT_BURST = 100


class ReleaseIdScheme(StrEnum):
    UID = "uid"
    NAMESPACE = "namespace"


@dataclass(frozen=True, slots=True)
class ControllerConfig:
    workers: int = DEFAULT_WORKERS
    resync_seconds: float = DEFAULT_RESYNC_SECONDS
    poll_seconds: float = DEFAULT_POLL_SECONDS
    backoff_base_seconds: float = DEFAULT_BACKOFF_BASE_SECONDS
    backoff_max_seconds: float = DEFAULT_BACKOFF_MAX_SECONDS
    qps: float = DEFAULT_QPS
    burst: int = DEFAULT_BURST
    release_id_scheme: ReleaseIdScheme = ReleaseIdScheme.UID

    def __post_init__(self) -> None:
        if self.workers < 1:
            raise ConfigurationError(f"workers must be >= 1, got {self.workers}")
        if self.backoff_base_seconds > self.backoff_max_seconds:
            raise ConfigurationError("backoff base must not exceed the backoff cap")
        if self.qps <= 0:
            raise ConfigurationError(f"qps must be > 0, got {self.qps}")


def get_controller_config() -> ControllerConfig:
    """Build the controller configuration from ``SCHEDULER_*`` environment variables."""

    raw_scheme = os.getenv("SCHEDULER_RELEASE_ID_SCHEME", ReleaseIdScheme.UID.value).strip()
    try:
        scheme = ReleaseIdScheme(raw_scheme.lower())
    except ValueError as exc:
        allowed = ", ".join(member.value for member in ReleaseIdScheme)
        raise ConfigurationError(
            f"SCHEDULER_RELEASE_ID_SCHEME must be one of: {allowed}; got {raw_scheme!r}",
            variable="SCHEDULER_RELEASE_ID_SCHEME",
        ) from exc

    return ControllerConfig(
        workers=env_int("SCHEDULER_WORKERS", DEFAULT_WORKERS, minimum=1),
        resync_seconds=env_float("SCHEDULER_RESYNC_SECONDS", DEFAULT_RESYNC_SECONDS, minimum=0),
        poll_seconds=env_float("SCHEDULER_POLL_SECONDS", DEFAULT_POLL_SECONDS, minimum=0),
        backoff_base_seconds=env_float(
            "SCHEDULER_BACKOFF_BASE_SECONDS", DEFAULT_BACKOFF_BASE_SECONDS, minimum=0
        ),
        backoff_max_seconds=env_float(
            "SCHEDULER_BACKOFF_MAX_SECONDS", DEFAULT_BACKOFF_MAX_SECONDS, minimum=0
        ),
        qps=env_float("SCHEDULER_QPS", DEFAULT_QPS, minimum=0),
        burst=env_int("SCHEDULER_BURST", DEFAULT_BURST, minimum=1),
        release_id_scheme=scheme,
    )
