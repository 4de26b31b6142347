"""Tests for share issuance and redemption."""

import pytest

from amm_engine.errors import (
    InsufficientShares,
    InvalidFee,
    InvalidPool,
    ReserveOverflow,
    SlippageExceeded,
    ZeroAmount,
)
from amm_engine.liquidity import (
    add_liquidity,
    amounts_for_redemption,
    create_pool,
    initial_shares,
    optimal_deposit,
    remove_liquidity,
    shares_for_deposit,
)
from amm_engine.safe_int import UINT64_MAX
from tests.helpers import ASSET_X, ASSET_Y, make_pool


class TestInitialShares:
    """Tests for the first-deposit rule."""

    def test_geometric_mean(self):
        assert initial_shares(1000, 1000) == 1000
        assert initial_shares(100, 400) == 200
        # floor(sqrt(2000)) = 44
        assert initial_shares(1000, 2) == 44

    @pytest.mark.parametrize("amounts", [(37, 9001), (1, 10**18), (123456789, 987654321)])
    def test_independent_of_asset_order(self, amounts):
        a, b = amounts
        assert initial_shares(a, b) == initial_shares(b, a)

    @pytest.mark.parametrize("amounts", [(0, 100), (100, 0), (-5, 100)])
    def test_requires_both_assets(self, amounts):
        with pytest.raises(ZeroAmount):
            initial_shares(*amounts)


class TestCreatePool:
    """Tests for pool creation with a seed deposit."""

    def test_balanced_seed(self):
        pool, shares = create_pool("p", ASSET_X, ASSET_Y, 1000, 1000, 3, 1000)

        assert shares == 1000
        assert pool.share_supply == 1000
        assert (pool.reserve_a, pool.reserve_b) == (1000, 1000)
        assert pool.k == 1_000_000

    def test_zero_amount_rejected(self):
        with pytest.raises(ZeroAmount):
            create_pool("p", ASSET_X, ASSET_Y, 0, 100, 3, 1000)

    def test_same_asset_rejected(self):
        with pytest.raises(InvalidPool):
            create_pool("p", ASSET_X, ASSET_X, 100, 100, 3, 1000)

    def test_invalid_fee_rejected(self):
        with pytest.raises(InvalidFee):
            create_pool("p", ASSET_X, ASSET_Y, 100, 100, 5, 5)

    def test_seed_above_uint64_rejected(self):
        with pytest.raises(ReserveOverflow):
            create_pool("p", ASSET_X, ASSET_Y, UINT64_MAX + 1, 1, 3, 1000)


class TestSharesForDeposit:
    """Tests for proportional share minting."""

    def test_imbalanced_deposit_uses_limiting_side(self):
        # min(100 * 1000 // 1000, 50 * 1000 // 1000) = 50
        assert shares_for_deposit(100, 50, 1000, 1000, 1000) == 50

    def test_empty_pool_uses_first_deposit_rule(self):
        assert shares_for_deposit(100, 400, 0, 0, 0) == 200

    def test_negative_amount_rejected(self):
        with pytest.raises(ZeroAmount):
            shares_for_deposit(-1, 50, 1000, 1000, 1000)

    def test_one_sided_deposit_mints_nothing(self):
        assert shares_for_deposit(100, 0, 1000, 1000, 1000) == 0


class TestAddLiquidity:
    """Tests for deposits into a live pool."""

    def test_imbalanced_deposit_keeps_excess_in_pool(self):
        pool = make_pool()

        shares = add_liquidity(pool, 100, 50)

        assert shares == 50
        assert (pool.reserve_a, pool.reserve_b) == (1100, 1050)
        assert pool.share_supply == 1050

    def test_min_shares_out_rejected_leaves_pool_unchanged(self):
        pool = make_pool()
        before = pool.snapshot()

        with pytest.raises(SlippageExceeded):
            add_liquidity(pool, 100, 50, min_shares_out=51)

        assert pool.snapshot() == before

    def test_deposit_minting_zero_shares_rejected(self):
        pool = make_pool()
        with pytest.raises(ZeroAmount):
            add_liquidity(pool, 1, 0)

    def test_overflowing_reserve_rejected_leaves_pool_unchanged(self):
        near_max = UINT64_MAX - 10
        pool = make_pool(reserve_a=near_max, reserve_b=near_max, share_supply=near_max)
        before = pool.snapshot()

        with pytest.raises(ReserveOverflow):
            add_liquidity(pool, 100, 100)

        assert pool.snapshot() == before

    def test_reseeds_emptied_pool(self):
        pool = make_pool(reserve_a=0, reserve_b=0, share_supply=0)

        shares = add_liquidity(pool, 50, 200)

        assert shares == 100
        assert (pool.reserve_a, pool.reserve_b, pool.share_supply) == (50, 200, 100)

    def test_reseed_requires_both_assets(self):
        pool = make_pool(reserve_a=0, reserve_b=0, share_supply=0)
        with pytest.raises(ZeroAmount):
            add_liquidity(pool, 50, 0)


class TestRemoveLiquidity:
    """Tests for proportional redemption."""

    def test_full_withdrawal_returns_all_reserves(self):
        pool = make_pool(reserve_a=1234, reserve_b=5678, share_supply=999)

        redemption = remove_liquidity(pool, 999)

        assert (redemption.amount_a, redemption.amount_b) == (1234, 5678)
        assert (pool.reserve_a, pool.reserve_b, pool.share_supply) == (0, 0, 0)
        assert pool.is_empty

    def test_partial_withdrawal(self):
        pool = make_pool()

        redemption = remove_liquidity(pool, 250)

        assert redemption.shares_burned == 250
        assert (redemption.amount_a, redemption.amount_b) == (250, 250)
        assert (pool.reserve_a, pool.reserve_b, pool.share_supply) == (750, 750, 750)

    def test_rounds_down_per_side(self):
        # 1001 * 333 // 1000 = 333, 999 * 333 // 1000 = 332
        assert amounts_for_redemption(333, 1001, 999, 1000) == (333, 332)

    def test_multiplies_before_dividing(self):
        """At uint64 scale the product is formed exactly before the floor."""
        assert amounts_for_redemption(3, UINT64_MAX, UINT64_MAX, UINT64_MAX) == (3, 3)
        assert amounts_for_redemption(1, UINT64_MAX, 3, UINT64_MAX // 2) == (2, 0)

    def test_partial_withdrawal_keeps_reserves_positive(self):
        pool = make_pool(reserve_a=7, reserve_b=10**9, share_supply=10)

        remove_liquidity(pool, 9)

        assert pool.reserve_a > 0
        assert pool.reserve_b > 0

    def test_more_than_supply_rejected(self):
        pool = make_pool()
        with pytest.raises(InsufficientShares):
            remove_liquidity(pool, 1001)

    @pytest.mark.parametrize("shares_in", [0, -1])
    def test_non_positive_shares_rejected(self, shares_in):
        pool = make_pool()
        with pytest.raises(ZeroAmount):
            remove_liquidity(pool, shares_in)

    def test_min_amounts_rejected_leaves_pool_unchanged(self):
        pool = make_pool()
        before = pool.snapshot()

        with pytest.raises(SlippageExceeded):
            remove_liquidity(pool, 250, min_amount_a=0, min_amount_b=251)

        assert pool.snapshot() == before


class TestOptimalDeposit:
    """Tests for the matching-amount helper."""

    def test_matches_pool_ratio(self):
        assert optimal_deposit(1000, 2000, 10) == 20

    def test_rounds_up(self):
        assert optimal_deposit(3, 10, 1) == 4

    def test_optimal_amount_is_not_limiting(self):
        reserve_a, reserve_b, supply = 3, 10, 5
        amount_b = optimal_deposit(reserve_a, reserve_b, 7)
        from_a = 7 * supply // reserve_a
        assert shares_for_deposit(7, amount_b, reserve_a, reserve_b, supply) == from_a

    def test_zero_rejected(self):
        with pytest.raises(ZeroAmount):
            optimal_deposit(1000, 1000, 0)
        with pytest.raises(ZeroAmount):
            optimal_deposit(0, 1000, 10)
