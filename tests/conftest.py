"""Pytest configuration and fixtures."""

import logging

import pytest

import dagrad as dg


@pytest.fixture(autouse=True)
def default_config(monkeypatch):
    """Every test starts from the default float64 config."""
    monkeypatch.delenv("DAGRAD_DTYPE", raising=False)
    monkeypatch.delenv("DAGRAD_LOG_LEVEL", raising=False)
    dg.reset_config()
    yield
    monkeypatch.undo()
    dg.reset_config()


@pytest.fixture
def graph():
    """Fresh backward context."""
    return dg.Graph()


@pytest.fixture
def xy():
    """The two operands used by the forward-value tests."""
    return dg.Variable.new([0.0, 1.0]), dg.Variable.new([2.0, 3.0])


@pytest.fixture
def dagrad_logs(caplog):
    """Capture DEBUG records from the dagrad logger."""
    caplog.set_level(logging.DEBUG, logger="dagrad")
    return caplog
