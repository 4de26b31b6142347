"""Tests for PoolRegistry."""

import pytest

from amm_engine.errors import DuplicatePool
from amm_engine.pool import Direction, Pool
from amm_engine.registry import PoolRegistry, fee_tier
from tests.helpers import ASSET_X, ASSET_Y, ASSET_Z, make_pool


def pool_for(pool_id: str, asset_a: str, asset_b: str, fee: tuple[int, int] = (3, 1000)) -> Pool:
    return Pool(
        pool_id=pool_id,
        asset_a=asset_a,
        asset_b=asset_b,
        reserve_a=1000,
        reserve_b=1000,
        share_supply=1000,
        fee_numerator=fee[0],
        fee_denominator=fee[1],
    )


@pytest.fixture
def registry() -> PoolRegistry:
    return PoolRegistry([make_pool(pool_id="xy")])


class TestFeeTier:
    def test_reduces_fraction(self):
        assert fee_tier(30, 10_000) == (3, 1000)
        assert fee_tier(3, 1000) == (3, 1000)

    def test_zero_fee(self):
        assert fee_tier(0, 1000) == (0, 1)


class TestPoolRegistryLookup:
    """Tests for pair lookups in both orientations."""

    def test_find_in_pool_order(self, registry):
        match = registry.find(ASSET_X, ASSET_Y)
        assert match is not None
        assert match.pool_id == "xy"
        assert match.direction is Direction.A_TO_B
        assert not match.is_reversed

    def test_find_reversed(self, registry):
        match = registry.find(ASSET_Y, ASSET_X)
        assert match is not None
        assert match.pool_id == "xy"
        assert match.direction is Direction.B_TO_A
        assert match.is_reversed

    def test_unknown_pair(self, registry):
        assert registry.find(ASSET_X, ASSET_Z) is None
        assert registry.find_all(ASSET_X, ASSET_Z) == []

    def test_lookup_normalizes_address_case(self):
        registry = PoolRegistry([pool_for("p", "0xABC::coin::COIN", ASSET_Y)])
        match = registry.find("0xabc::coin::COIN", ASSET_Y)
        assert match is not None
        assert match.direction is Direction.A_TO_B

    def test_cheapest_tier_first(self):
        registry = PoolRegistry(
            [
                pool_for("high", ASSET_X, ASSET_Y, (30, 1000)),
                pool_for("low", ASSET_Y, ASSET_X, (1, 10_000)),
                pool_for("mid", ASSET_X, ASSET_Y, (3, 1000)),
            ]
        )

        matches = registry.find_all(ASSET_X, ASSET_Y)

        assert [m.pool_id for m in matches] == ["low", "mid", "high"]
        assert [m.direction for m in matches] == [
            Direction.B_TO_A,
            Direction.A_TO_B,
            Direction.A_TO_B,
        ]
        assert registry.find(ASSET_X, ASSET_Y).pool_id == "low"

    def test_find_by_fee(self):
        registry = PoolRegistry(
            [
                pool_for("high", ASSET_X, ASSET_Y, (30, 1000)),
                pool_for("mid", ASSET_X, ASSET_Y, (3, 1000)),
            ]
        )
        assert registry.find(ASSET_Y, ASSET_X, 30, 10_000).pool_id == "mid"
        assert registry.find(ASSET_X, ASSET_Y, 1, 10_000) is None


class TestPoolRegistryRegister:
    """Tests for listing pools."""

    def test_same_pool_twice_is_noop(self, registry):
        registry.register(make_pool(pool_id="xy"))
        assert len(registry) == 1

    def test_duplicate_pair_and_tier_rejected(self, registry):
        with pytest.raises(DuplicatePool) as exc_info:
            registry.register(pool_for("yx", ASSET_Y, ASSET_X, (30, 10_000)))
        assert exc_info.value.context["pool_id"] == "xy"
        assert len(registry) == 1

    def test_other_tier_allowed(self, registry):
        registry.register(pool_for("xy-high", ASSET_X, ASSET_Y, (1, 100)))
        assert len(registry) == 2
        assert registry.contains(ASSET_Y, ASSET_X, 1, 100)

    def test_contains(self, registry):
        assert registry.contains(ASSET_Y, ASSET_X, 30, 10_000)
        assert not registry.contains(ASSET_X, ASSET_Y, 1, 100)

    def test_accepts_snapshots(self):
        registry = PoolRegistry()
        registry.register(make_pool(pool_id="snap").snapshot())
        assert registry.find(ASSET_X, ASSET_Y).pool_id == "snap"

    def test_pairs(self, registry):
        registry.register(pool_for("xz", ASSET_X, ASSET_Z))
        registry.register(pool_for("xy-high", ASSET_Y, ASSET_X, (1, 100)))
        assert registry.pairs() == [(ASSET_X, ASSET_Y), (ASSET_X, ASSET_Z)]
