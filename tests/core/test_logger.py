from __future__ import annotations

import logging

import pytest

from sheetflow.core.logger import LOG_LEVEL_ENV, get_logger, resolve_log_level


def test_resolve_log_level_defaults_to_info(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)

    assert resolve_log_level() == logging.INFO


def test_resolve_log_level_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(LOG_LEVEL_ENV, "debug")

    assert resolve_log_level() == logging.DEBUG
    assert resolve_log_level("warning") == logging.WARNING


def test_resolve_log_level_rejects_unknown_name() -> None:
    with pytest.raises(ValueError):
        resolve_log_level("chatty")


def test_get_logger_is_package_scoped() -> None:
    assert get_logger("configuration").name == "sheetflow.configuration"
