"""Shared test fixtures for pokerclient."""

import pytest

from pokerclient.core.reconciler import Reconciler
from pokerclient.core.store import StateStore


@pytest.fixture
def store():
    return StateStore()


@pytest.fixture
def reconciler(store):
    return Reconciler(store)


@pytest.fixture
def name_file(tmp_path):
    """Provide a per-test location for the saved display name."""
    return tmp_path / "config" / "player.json"
