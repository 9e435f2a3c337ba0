from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from stockroom.config import (
    ConfigurationError,
    DatabaseConfig,
    InvalidConfigurationError,
    MissingConfigurationError,
    ResilienceConfig,
    StoreBackend,
    choice_env_var,
    configure_logging,
    get_database_config,
    get_firestore_config,
    get_store_config,
    log_level_from_env,
    optional_env_var,
    require_env_vars,
)

if TYPE_CHECKING:
    from pathlib import Path


def test_require_env_vars_reports_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STOCKROOM_A", "value")
    monkeypatch.setenv("STOCKROOM_B", "   ")
    monkeypatch.delenv("STOCKROOM_C", raising=False)

    with pytest.raises(MissingConfigurationError, match="STOCKROOM_B, STOCKROOM_C"):
        require_env_vars(["STOCKROOM_A", "STOCKROOM_B", "STOCKROOM_C"])

    assert require_env_vars(["STOCKROOM_A"]) == {"STOCKROOM_A": "value"}


def test_optional_env_var_falls_back_on_blank(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STOCKROOM_OPTIONAL", "  ")
    assert optional_env_var("STOCKROOM_OPTIONAL", "fallback") == "fallback"

    monkeypatch.setenv("STOCKROOM_OPTIONAL", " set ")
    assert optional_env_var("STOCKROOM_OPTIONAL", "fallback") == "set"


def test_choice_env_var_is_case_insensitive(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STOCKROOM_MODE", "FAST")
    assert choice_env_var("STOCKROOM_MODE", ["fast", "slow"], default="slow") == "fast"

    monkeypatch.setenv("STOCKROOM_MODE", "medium")
    with pytest.raises(ConfigurationError, match="STOCKROOM_MODE"):
        choice_env_var("STOCKROOM_MODE", ["fast", "slow"], default="slow")


def test_store_backend_defaults_to_sqlalchemy(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("STOCKROOM_STORE", raising=False)
    assert get_store_config().backend is StoreBackend.SQLALCHEMY

    monkeypatch.setenv("STOCKROOM_STORE", "firestore")
    assert get_store_config().backend is StoreBackend.FIRESTORE


def test_database_uri_defaults_to_data_dir(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("DATABASE_URI", raising=False)
    monkeypatch.setenv("STOCKROOM_DATA_DIR", str(tmp_path / "data"))

    config = get_database_config()

    assert config.uri == f"sqlite+pysqlite:///{(tmp_path / 'data').resolve() / 'stockroom.db'}"
    assert (tmp_path / "data").is_dir()


def test_firestore_config_requires_project(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("FIRESTORE_PROJECT_ID", raising=False)

    with pytest.raises(MissingConfigurationError, match="FIRESTORE_PROJECT_ID"):
        get_firestore_config()


def test_firestore_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FIRESTORE_PROJECT_ID", "inventario")
    monkeypatch.setenv("FIRESTORE_DATABASE", "stock")
    monkeypatch.setenv("FIRESTORE_ACCESS_TOKEN", "secret")
    monkeypatch.delenv("FIRESTORE_EMULATOR_HOST", raising=False)

    config = get_firestore_config(resilience=ResilienceConfig(name="custom"))

    assert config.documents_url == (
        "https://firestore.googleapis.com/v1/projects/inventario/databases/stock/documents"
    )
    assert config.bearer_token == "secret"
    assert config.resilience.name == "custom"


def test_missing_configuration_lists_names(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("STOCKROOM_Y", raising=False)
    monkeypatch.delenv("STOCKROOM_X", raising=False)

    with pytest.raises(MissingConfigurationError) as excinfo:
        require_env_vars(["STOCKROOM_Y", "STOCKROOM_X"])

    assert excinfo.value.names == ("STOCKROOM_X", "STOCKROOM_Y")


def test_invalid_choice_reports_allowed_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STOCKROOM_STORE", "redis")

    with pytest.raises(InvalidConfigurationError, match="expected one of") as excinfo:
        get_store_config()

    assert excinfo.value.name == "STOCKROOM_STORE"
    assert excinfo.value.value == "redis"
    assert "firestore" in excinfo.value.allowed


def test_database_echo_is_read_from_environment(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("DATABASE_URI", f"sqlite+pysqlite:///{tmp_path / 'echo.db'}")
    monkeypatch.delenv("STOCKROOM_DB_ECHO", raising=False)
    assert get_database_config() == DatabaseConfig(uri=f"sqlite+pysqlite:///{tmp_path / 'echo.db'}")

    monkeypatch.setenv("STOCKROOM_DB_ECHO", "TRUE")
    assert get_database_config().echo is True


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(None, logging.INFO), ("warning", logging.WARNING), ("DEBUG", logging.DEBUG)],
)
def test_log_level_from_environment(
    monkeypatch: pytest.MonkeyPatch, raw: str | None, expected: int
) -> None:
    if raw is None:
        monkeypatch.delenv("STOCKROOM_LOG_LEVEL", raising=False)
    else:
        monkeypatch.setenv("STOCKROOM_LOG_LEVEL", raw)

    assert log_level_from_env() == expected


def test_request_logs_are_quiet_unless_debugging(monkeypatch: pytest.MonkeyPatch) -> None:
    httpx_logger = logging.getLogger("httpx")
    monkeypatch.setattr(httpx_logger, "level", httpx_logger.level)

    configure_logging(level=logging.INFO)
    assert httpx_logger.level == logging.WARNING

    configure_logging(level=logging.DEBUG)
    assert httpx_logger.level == logging.DEBUG
