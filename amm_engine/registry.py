"""Pool discovery registry.

Maps an unordered asset pair and fee tier to pool ids. The engine itself
keeps no such index and will create parallel pools for the same pair if
asked; callers that want one pool per pair and fee tier list new pools here
and check before creating.
"""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction
from math import gcd

import structlog

from amm_engine.errors import DuplicatePool
from amm_engine.models.types import normalize_asset_id
from amm_engine.pool import Direction, Pool, PoolSnapshot

logger = structlog.get_logger()

FeeTier = tuple[int, int]


def fee_tier(fee_numerator: int, fee_denominator: int) -> FeeTier:
    """Reduce a fee fraction so 3/1000 and 30/10000 are the same tier."""
    divisor = gcd(fee_numerator, fee_denominator) or 1
    return fee_numerator // divisor, fee_denominator // divisor


@dataclass(frozen=True)
class PoolListing:
    """Registry entry for one pool."""

    pool_id: str
    asset_a: str
    asset_b: str
    fee_tier: FeeTier


@dataclass(frozen=True)
class PoolMatch:
    """A pool found for a requested (asset_in, asset_out) orientation.

    Attributes:
        listing: The registry entry
        direction: Swap direction that sells asset_in into the pool
    """

    listing: PoolListing
    direction: Direction

    @property
    def pool_id(self) -> str:
        return self.listing.pool_id

    @property
    def is_reversed(self) -> bool:
        """True when the lookup order was the reverse of the pool's (a, b) order."""
        return self.direction is Direction.B_TO_A


class PoolRegistry:
    """Registry of pools indexed by unordered asset pair and fee tier."""

    def __init__(self, pools: list[Pool | PoolSnapshot] | None = None) -> None:
        """Initialize the registry with optional pools.

        Args:
            pools: Initial pools to list. If None, starts empty.
        """
        self._listings: dict[tuple[frozenset[str], FeeTier], PoolListing] = {}
        # Secondary index: pair -> listings of every fee tier
        self._by_pair: dict[frozenset[str], list[PoolListing]] = {}

        if pools:
            for pool in pools:
                self.register(pool)

    def __len__(self) -> int:
        return len(self._listings)

    def register(self, pool: Pool | PoolSnapshot) -> PoolListing:
        """List a pool under its pair and fee tier.

        Registering the same pool id again is a no-op.

        Raises:
            DuplicatePool: If another pool already holds this pair and fee tier
        """
        asset_a = normalize_asset_id(pool.asset_a)
        asset_b = normalize_asset_id(pool.asset_b)
        pair_key = frozenset([asset_a, asset_b])
        tier = fee_tier(pool.fee_numerator, pool.fee_denominator)

        existing = self._listings.get((pair_key, tier))
        if existing is not None:
            if existing.pool_id == pool.pool_id:
                return existing
            raise DuplicatePool(
                f"Pair {asset_a}/{asset_b} at fee {tier[0]}/{tier[1]} already listed",
                pool_id=existing.pool_id,
                rejected_pool_id=pool.pool_id,
            )

        listing = PoolListing(pool_id=pool.pool_id, asset_a=asset_a, asset_b=asset_b, fee_tier=tier)
        self._listings[(pair_key, tier)] = listing
        self._by_pair.setdefault(pair_key, []).append(listing)
        logger.debug(
            "pool_listed",
            pool_id=pool.pool_id,
            asset_a=asset_a,
            asset_b=asset_b,
            fee_tier=f"{tier[0]}/{tier[1]}",
        )
        return listing

    def contains(self, asset_x: str, asset_y: str, fee_numerator: int, fee_denominator: int) -> bool:
        pair_key = frozenset([normalize_asset_id(asset_x), normalize_asset_id(asset_y)])
        return (pair_key, fee_tier(fee_numerator, fee_denominator)) in self._listings

    def find_all(self, asset_in: str, asset_out: str) -> list[PoolMatch]:
        """All pools for a pair (any orientation), cheapest fee tier first.

        Args:
            asset_in: Asset the caller wants to sell
            asset_out: Asset the caller wants to buy

        Returns:
            Matches carrying the swap direction for this orientation (may be empty)
        """
        asset_in_norm = normalize_asset_id(asset_in)
        asset_out_norm = normalize_asset_id(asset_out)
        listings = self._by_pair.get(frozenset([asset_in_norm, asset_out_norm]), [])

        matches = []
        for listing in sorted(listings, key=lambda entry: Fraction(*entry.fee_tier)):
            if listing.asset_a == asset_in_norm:
                direction = Direction.A_TO_B
            else:
                direction = Direction.B_TO_A
            matches.append(PoolMatch(listing=listing, direction=direction))
        return matches

    def find(
        self,
        asset_in: str,
        asset_out: str,
        fee_numerator: int | None = None,
        fee_denominator: int | None = None,
    ) -> PoolMatch | None:
        """Find one pool for a pair, looking up both orientations.

        Without a fee, the cheapest tier wins.

        Returns:
            PoolMatch if found, None otherwise
        """
        matches = self.find_all(asset_in, asset_out)
        if fee_numerator is None or fee_denominator is None:
            return matches[0] if matches else None

        tier = fee_tier(fee_numerator, fee_denominator)
        for match in matches:
            if match.listing.fee_tier == tier:
                return match
        return None

    def pairs(self) -> list[tuple[str, str]]:
        """Every listed pair, in the (asset_a, asset_b) order of its first listing."""
        return [(listings[0].asset_a, listings[0].asset_b) for listings in self._by_pair.values()]


__all__ = ["FeeTier", "PoolListing", "PoolMatch", "PoolRegistry", "fee_tier"]
