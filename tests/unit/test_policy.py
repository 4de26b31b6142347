"""Tests for the caller-side trade policy."""

import pytest

from amm_engine.config import PolicyConfig
from amm_engine.errors import InputTooLarge, PriceImpactTooHigh
from amm_engine.policy import TradePolicy
from amm_engine.pool import Direction
from amm_engine.quote import quote
from tests.helpers import make_pool


@pytest.fixture
def pool():
    return make_pool(reserve_a=1000, reserve_b=1000).snapshot()


class TestTradePolicy:
    def test_small_trade_allowed(self, pool):
        policy = TradePolicy()
        preview = quote(pool, Direction.A_TO_B, 40)

        policy.check(pool, preview)
        assert policy.allows(pool, preview)

    def test_price_impact_at_threshold_allowed(self, pool):
        assert TradePolicy().allows(pool, quote(pool, Direction.A_TO_B, 50))

    def test_price_impact_above_threshold_rejected(self, pool):
        policy = TradePolicy()
        preview = quote(pool, Direction.A_TO_B, 60)

        with pytest.raises(PriceImpactTooHigh) as exc_info:
            policy.check(pool, preview)

        assert exc_info.value.context["max_price_impact_pct"] == 5
        assert not policy.allows(pool, preview)

    def test_impact_measured_on_input_side(self):
        pool = make_pool(reserve_a=100_000, reserve_b=1000).snapshot()
        policy = TradePolicy()
        # 60 is 0.06% of reserve_a but 6% of reserve_b
        assert policy.allows(pool, quote(pool, Direction.A_TO_B, 60))
        assert not policy.allows(pool, quote(pool, Direction.B_TO_A, 60))

    def test_input_fraction_rejected(self, pool):
        policy = TradePolicy(PolicyConfig(max_price_impact_pct=100, max_input_fraction_bps=1000))
        assert policy.max_input(1000) == 100

        with pytest.raises(InputTooLarge):
            policy.check(pool, quote(pool, Direction.A_TO_B, 101))
        policy.check(pool, quote(pool, Direction.A_TO_B, 100))

    def test_input_fraction_checked_before_impact(self, pool):
        with pytest.raises(InputTooLarge):
            TradePolicy().check(pool, quote(pool, Direction.A_TO_B, 9500))


class TestPolicyConfig:
    def test_defaults(self):
        config = PolicyConfig()
        assert config.max_price_impact_pct == 5
        assert config.max_input_fraction_bps == 9000

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_price_impact_pct": 0},
            {"max_price_impact_pct": 101},
            {"max_input_fraction_bps": 0},
            {"max_input_fraction_bps": 10_001},
        ],
    )
    def test_out_of_range_rejected(self, kwargs):
        with pytest.raises(ValueError):
            PolicyConfig(**kwargs)
