"""Constant-product AMM pool engine."""

from amm_engine.engine import Deposit, PoolEngine, Withdrawal
from amm_engine.pool import Direction, Pool, PoolSnapshot, SharePosition
from amm_engine.quote import Quote, get_amount_in, price_impact, quote, quote_swap

__version__ = "0.1.0"
__all__ = [
    "PoolEngine",
    "Deposit",
    "Withdrawal",
    "Direction",
    "Pool",
    "PoolSnapshot",
    "SharePosition",
    "Quote",
    "quote",
    "quote_swap",
    "get_amount_in",
    "price_impact",
    "__version__",
]
