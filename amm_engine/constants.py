"""Engine constants.

Centralizes fee defaults and the basis-point scale used across quoting
and policy checks.
"""

# Basis points per whole (100% = 10_000 bps)
BPS_DENOMINATOR = 10_000

# Fee fraction used when a pool is created without an explicit fee.
# Deployments observed 3/1000 (0.3%) and 18/1000 (1.8%).
DEFAULT_FEE_NUMERATOR = 3
DEFAULT_FEE_DENOMINATOR = 1000

# Slippage tolerance applied to quotes when the caller passes none (0.5%)
DEFAULT_SLIPPAGE_BPS = 50

# Caller-side trade policy defaults
DEFAULT_MAX_PRICE_IMPACT_PCT = 5
# Input may not exceed 90% of the input-side reserve
DEFAULT_MAX_INPUT_FRACTION_BPS = 9_000

# Price impact is reported for display and capped at 100%
MAX_PRICE_IMPACT_PCT = 100
