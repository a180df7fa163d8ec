from __future__ import annotations

import os

import pytest

from shipper_scheduler.config import (
    ConfigurationError,
    ControllerConfig,
    ReleaseIdScheme,
    env_float,
    env_int,
    get_controller_config,
)

_CONTROLLER_VARS = (
    "SCHEDULER_WORKERS",
    "SCHEDULER_RESYNC_SECONDS",
    "SCHEDULER_POLL_SECONDS",
    "SCHEDULER_BACKOFF_BASE_SECONDS",
    "SCHEDULER_BACKOFF_MAX_SECONDS",
    "SCHEDULER_QPS",
    "SCHEDULER_BURST",
    "SCHEDULER_RELEASE_ID_SCHEME",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in _CONTROLLER_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_env_int_and_float_parse_and_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_INT", " 7 ")
    monkeypatch.setenv("EXAMPLE_FLOAT", "0.25")
    monkeypatch.delenv("EXAMPLE_UNSET", raising=False)

    assert env_int("EXAMPLE_INT", 1) == 7
    assert env_float("EXAMPLE_FLOAT", 1.0) == 0.25
    assert env_int("EXAMPLE_UNSET", 3) == 3
    assert os.getenv("EXAMPLE_UNSET") is None


@pytest.mark.parametrize("raw", ["many", "1.5"])
def test_env_int_rejects_non_integers(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("EXAMPLE_INT", raw)

    with pytest.raises(ConfigurationError, match="EXAMPLE_INT") as exc:
        env_int("EXAMPLE_INT", 1)

    assert exc.value.variable == "EXAMPLE_INT"


def test_env_float_enforces_minimum(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_FLOAT", "-1")

    with pytest.raises(ConfigurationError, match=">= 0"):
        env_float("EXAMPLE_FLOAT", 1.0, minimum=0)


def test_controller_config_defaults(clean_env: pytest.MonkeyPatch) -> None:
    _ = clean_env

    config = get_controller_config()

    assert config == ControllerConfig()
    assert config.workers == 2
    assert config.backoff_base_seconds == 0.005
    assert config.backoff_max_seconds == 1000.0
    assert config.qps == 10.0
    assert config.burst == 100
    assert config.release_id_scheme is ReleaseIdScheme.UID


def test_controller_config_reads_environment(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("SCHEDULER_WORKERS", "4")
    clean_env.setenv("SCHEDULER_RESYNC_SECONDS", "0")
    clean_env.setenv("SCHEDULER_POLL_SECONDS", "0.5")
    clean_env.setenv("SCHEDULER_RELEASE_ID_SCHEME", "Namespace")

    config = get_controller_config()

    assert config.workers == 4
    assert config.resync_seconds == 0
    assert config.poll_seconds == 0.5
    assert config.release_id_scheme is ReleaseIdScheme.NAMESPACE


def test_controller_config_rejects_unknown_scheme(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("SCHEDULER_RELEASE_ID_SCHEME", "random")

    with pytest.raises(ConfigurationError, match="SCHEDULER_RELEASE_ID_SCHEME") as exc:
        get_controller_config()

    assert exc.value.variable == "SCHEDULER_RELEASE_ID_SCHEME"


def test_controller_config_rejects_zero_workers(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("SCHEDULER_WORKERS", "0")

    with pytest.raises(ConfigurationError, match="SCHEDULER_WORKERS"):
        get_controller_config()


def test_controller_config_validates_backoff_bounds() -> None:
    with pytest.raises(ConfigurationError):
        ControllerConfig(backoff_base_seconds=5.0, backoff_max_seconds=1.0)

    with pytest.raises(ConfigurationError):
        ControllerConfig(workers=0)


def test_controller_config_rejects_zero_qps(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("SCHEDULER_QPS", "0")

    with pytest.raises(ConfigurationError, match="qps must be > 0"):
        get_controller_config()
