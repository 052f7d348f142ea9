"""
Shared test fixtures and helpers for the Plinth test suite.
"""

import os

import pytest

from plinth.composer import Composer, reset_composition
from plinth.config import Settings
from plinth.di.core import Container
from plinth.metadata import MetadataRegistry
from plinth.testing import MockApp


@pytest.fixture
def registry():
    """Isolated metadata registry; pass it to decorators via ``registry=``."""
    return MetadataRegistry()


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def composer(settings):
    """Composer over the process-wide registry, recording into MockApp."""
    return Composer(MockApp, settings=settings)


@pytest.fixture
def container(registry):
    return Container(registry=registry, name="root")


@pytest.fixture
def clean_env(monkeypatch):
    """Drop PLINTH_* variables inherited from the outer environment."""
    for key in list(os.environ):
        if key.startswith("PLINTH_"):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.fixture(autouse=True)
def _reset_default_composer():
    yield
    reset_composition()
