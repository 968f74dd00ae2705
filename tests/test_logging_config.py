"""
Unit tests for logging configuration.
"""

import logging

from secretbridge.logging_config import ProbeAccessFilter, get_logging_config


def _record(name, message):
    return logging.LogRecord(name, logging.INFO, __file__, 1, message, None, None)


def test_probe_requests_filtered():
    probe_filter = ProbeAccessFilter()
    assert not probe_filter.filter(_record("uvicorn.access", '10.0.0.1 - "GET /healthz HTTP/1.1" 200'))
    assert not probe_filter.filter(_record("uvicorn.access", '10.0.0.1 - "GET /readyz HTTP/1.1" 503'))


def test_other_requests_kept():
    probe_filter = ProbeAccessFilter()
    assert probe_filter.filter(_record("uvicorn.access", '10.0.0.1 - "GET /docs HTTP/1.1" 200'))
    assert probe_filter.filter(_record("secretbridge.modules.sync.handler", "GET /healthz"))


def test_level_applied():
    config = get_logging_config("debug")
    assert config["loggers"]["secretbridge"]["level"] == "DEBUG"
    assert config["root"]["level"] == "DEBUG"
    assert config["handlers"]["access"]["filters"] == ["probe_filter"]



def test_library_loggers_fixed():
    config = get_logging_config("debug")
    loggers = config["loggers"]
    assert loggers["kubernetes"]["level"] == "WARNING"
    assert loggers["uvicorn.access"]["handlers"] == ["access"]
    assert all(not logger["propagate"] for logger in loggers.values())
    assert config["handlers"]["default"]["stream"] == "ext://sys.stdout"
