"""Pytest configuration and fixtures."""

import itertools
from collections.abc import Callable

import pytest

from amm_engine.config import EngineConfig
from amm_engine.engine import Deposit, PoolEngine
from tests.helpers.constants import ASSET_X, ASSET_Y


@pytest.fixture
def id_factory() -> Callable[[], str]:
    """Deterministic ids: id-1, id-2, ..."""
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def engine(id_factory: Callable[[], str]) -> PoolEngine:
    """An empty engine with default config and deterministic ids."""
    return PoolEngine(EngineConfig(), id_factory=id_factory)


@pytest.fixture
def seeded(engine: PoolEngine) -> Deposit:
    """A 1000/1000 pool at 3/1000 fee, created by alice."""
    return engine.create_pool(ASSET_X, ASSET_Y, 1000, 1000, "alice", 3, 1000)


@pytest.fixture
def deep_pool(engine: PoolEngine) -> Deposit:
    """A pool deep enough that small trades do not round to zero."""
    return engine.create_pool(ASSET_X, ASSET_Y, 10**12, 4 * 10**12, "alice", 3, 1000)
