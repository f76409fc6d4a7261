"""Shared fixtures for the symir test-suite."""

import io

import pytest
from hypothesis import HealthCheck, settings

from symir.core.memory import Memory
from symir.core.types import OBJECT
from symir.logging import LogLevel, SymirLogger, set_logger
from symir.session import AnalysisSession
from symir.translation.z3_translator import Z3Translator

settings.register_profile(
    "symir",
    max_examples=50,
    deadline=None,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)
settings.load_profile("symir")


@pytest.fixture(autouse=True)
def quiet_logger():
    """Give every test a fresh, silent global logger."""
    logger = SymirLogger(level=LogLevel.QUIET, color=False, stream=io.StringIO())
    set_logger(logger)
    return logger


@pytest.fixture
def translator():
    return Z3Translator()


@pytest.fixture
def memory():
    return Memory()


@pytest.fixture
def session():
    return AnalysisSession()


@pytest.fixture
def person(memory):
    """A Person object; field 0 is its age."""
    return memory.allocate(OBJECT, tag="Person")
