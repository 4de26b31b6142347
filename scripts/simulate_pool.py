#!/usr/bin/env python3
"""Randomized pool simulation.

Drives a PoolEngine through a mix of swaps, deposits, and withdrawals the
way a caller would (registry lookup, quote, policy check, submit with the
quoted minimum) and checks the pool invariants after every step.

Usage:
    python scripts/simulate_pool.py --steps 5000 --seed 7
    python scripts/simulate_pool.py --fee 18/1000 --json
"""

from __future__ import annotations

import argparse
import random
import sys

import structlog

from amm_engine.config import EngineConfig
from amm_engine.engine import PoolEngine
from amm_engine.errors import PolicyViolation, PoolError
from amm_engine.logging_config import configure_logging
from amm_engine.policy import TradePolicy
from amm_engine.registry import PoolRegistry

logger = structlog.get_logger()

ASSET_X = "0x2::iota::IOTA"
ASSET_Y = "0x3::stiota::STIOTA"
HOLDERS = ["alice", "bob", "carol"]


def parse_fee(raw: str) -> tuple[int, int]:
    numerator, _, denominator = raw.partition("/")
    return int(numerator), int(denominator)


def run(steps: int, seed: int, fee: tuple[int, int], config: EngineConfig) -> int:
    """Run the simulation and return the number of invariant failures."""
    rng = random.Random(seed)
    engine = PoolEngine(config)
    registry = PoolRegistry()
    policy = TradePolicy(config.policy)

    deposit = engine.create_pool(ASSET_X, ASSET_Y, 1_000_000_000, 2_500_000_000, "alice", *fee)
    registry.register(engine.get_pool(deposit.pool_id))

    failures = 0
    rejected = 0
    for step in range(steps):
        asset_in, asset_out = (ASSET_X, ASSET_Y) if rng.random() < 0.5 else (ASSET_Y, ASSET_X)
        match = registry.find(asset_in, asset_out)
        if match is None:
            logger.error("pool_missing", asset_in=asset_in, asset_out=asset_out)
            return failures + 1
        before = engine.get_pool(match.pool_id)
        holder = rng.choice(HOLDERS)
        action = rng.random()

        try:
            if action < 0.7:
                reserve_in, _ = before.get_reserves(match.direction)
                amount_in = rng.randint(1, max(1, reserve_in // 10))
                preview = engine.quote(match.pool_id, match.direction, amount_in)
                policy.check(before, preview)
                engine.execute_swap(match.pool_id, match.direction, amount_in, preview.minimum_received)
                after = engine.get_pool(match.pool_id)
                if after.k < before.k:
                    failures += 1
                    logger.error("k_decreased", step=step, k_before=before.k, k_after=after.k)
            elif action < 0.85:
                amount_a = rng.randint(1, max(1, before.reserve_a // 20))
                amount_b = max(1, before.reserve_b * amount_a // max(1, before.reserve_a))
                engine.add_liquidity(match.pool_id, holder, amount_a, amount_b)
            else:
                positions = engine.positions_of(holder, match.pool_id)
                if not positions:
                    continue
                position = rng.choice(positions)
                shares = rng.randint(1, position.share_amount)
                engine.remove_liquidity(match.pool_id, position.position_id, holder, shares)
        except PolicyViolation:
            rejected += 1
        except PoolError as err:
            rejected += 1
            logger.debug("step_rejected", step=step, code=err.code)

        after = engine.get_pool(match.pool_id)
        held = sum(p.share_amount for h in HOLDERS for p in engine.positions_of(h, match.pool_id))
        if held != after.share_supply:
            failures += 1
            logger.error("share_mismatch", step=step, held=held, share_supply=after.share_supply)

    final = engine.get_pool(deposit.pool_id)
    logger.info(
        "simulation_finished",
        steps=steps,
        rejected=rejected,
        failures=failures,
        reserve_a=final.reserve_a,
        reserve_b=final.reserve_b,
        share_supply=final.share_supply,
        cumulative_fee_a=final.cumulative_fee_a,
        cumulative_fee_b=final.cumulative_fee_b,
    )
    return failures


def main() -> None:
    """Entry point for the pool simulation script."""
    parser = argparse.ArgumentParser(description="Randomized constant-product pool simulation")
    parser.add_argument("--steps", type=int, default=1000, help="Number of random actions")
    parser.add_argument("--seed", type=int, default=0, help="Random seed")
    parser.add_argument("--fee", type=parse_fee, default=None, help="Fee as numerator/denominator")
    parser.add_argument("--json", action="store_true", help="Emit JSON log lines")
    args = parser.parse_args()

    config = EngineConfig.from_env()
    configure_logging(config.log_level, json=args.json or config.log_json)
    fee = args.fee or (config.default_fee_numerator, config.default_fee_denominator)

    failures = run(args.steps, args.seed, fee, config)
    sys.exit(1 if failures else 0)


if __name__ == "__main__":
    main()
