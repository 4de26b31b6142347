"""Caller-side trade policy.

Checks layered on top of a pure quote before a caller submits the swap.
These are not engine invariants: the engine executes any trade that
passes its own guards, and the policy layer decides which trades to send.
"""

from __future__ import annotations

import structlog

from amm_engine.config import PolicyConfig
from amm_engine.constants import BPS_DENOMINATOR
from amm_engine.errors import InputTooLarge, PriceImpactTooHigh
from amm_engine.pool import PoolSnapshot
from amm_engine.quote import Quote, price_impact
from amm_engine.safe_int import S

logger = structlog.get_logger()


class TradePolicy:
    """Rejects quotes that are too large for the pool they trade against."""

    def __init__(self, config: PolicyConfig | None = None) -> None:
        self.config = config or PolicyConfig()

    def max_input(self, reserve_in: int) -> int:
        """Largest input allowed against reserve_in."""
        return S(reserve_in).mul_div(self.config.max_input_fraction_bps, BPS_DENOMINATOR).value

    def check(self, pool: PoolSnapshot, quote: Quote) -> None:
        """Validate a quote against the policy thresholds.

        Raises:
            InputTooLarge: If the input exceeds the allowed fraction of reserve_in
            PriceImpactTooHigh: If the price impact exceeds the threshold
        """
        reserve_in, _ = pool.get_reserves(quote.direction)

        limit = self.max_input(reserve_in)
        if quote.amount_in > limit:
            logger.warning(
                "policy_input_too_large",
                pool_id=pool.pool_id,
                amount_in=quote.amount_in,
                max_input=limit,
            )
            raise InputTooLarge(
                f"Input {quote.amount_in} exceeds {limit} allowed against reserve {reserve_in}",
                pool_id=pool.pool_id,
                amount_in=quote.amount_in,
                max_input=limit,
            )

        impact = price_impact(reserve_in, quote.amount_in)
        if impact > self.config.max_price_impact_pct:
            logger.warning(
                "policy_price_impact_too_high",
                pool_id=pool.pool_id,
                price_impact_pct=str(impact),
                max_price_impact_pct=self.config.max_price_impact_pct,
            )
            raise PriceImpactTooHigh(
                f"Price impact {impact:.2f}% exceeds {self.config.max_price_impact_pct}%",
                pool_id=pool.pool_id,
                price_impact_pct=str(impact),
                max_price_impact_pct=self.config.max_price_impact_pct,
            )

    def allows(self, pool: PoolSnapshot, quote: Quote) -> bool:
        """Non-raising form of check()."""
        try:
            self.check(pool, quote)
        except (InputTooLarge, PriceImpactTooHigh):
            return False
        return True


__all__ = ["TradePolicy"]
