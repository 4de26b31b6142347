"""Single-writer pool engine.

PoolEngine owns every pool it creates and serializes mutations per pool:
each pool has its own lock, and swaps, deposits, and withdrawals against a
pool run entirely while holding it. Mutations on different pools proceed in
parallel. Quotes copy a snapshot under the lock and compute outside it.

The math lives in quote.py, swap.py, and liquidity.py; this module adds
ownership of share positions, id assignment, and structured logging.
"""

from __future__ import annotations

import threading
import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Any

import structlog

from amm_engine import liquidity, swap
from amm_engine.config import EngineConfig
from amm_engine.errors import (
    DuplicateId,
    InsufficientShares,
    PoolError,
    PoolNotFound,
    PositionNotFound,
    PositionOwnershipError,
)
from amm_engine.models.types import normalize_asset_id
from amm_engine.pool import Direction, Pool, PoolSnapshot, SharePosition
from amm_engine.quote import Quote, quote
from amm_engine.swap import SwapReceipt

logger = structlog.get_logger()


@dataclass(frozen=True)
class Deposit:
    """Result of a pool creation or a liquidity deposit."""

    pool_id: str
    shares_minted: int
    position: SharePosition


@dataclass(frozen=True)
class Withdrawal:
    """Result of a liquidity withdrawal.

    Attributes:
        position: What remains of the position, or None if it was burned
    """

    pool_id: str
    shares_burned: int
    amount_a: int
    amount_b: int
    position: SharePosition | None


def _new_id() -> str:
    return uuid.uuid4().hex


class PoolEngine:
    """Creates pools and applies serialized mutations to them."""

    def __init__(
        self,
        config: EngineConfig | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        """Initialize an engine with no pools.

        Args:
            config: Engine defaults. If None, uses EngineConfig().
            id_factory: Source of pool and position ids (uuid4 hex by default)
        """
        self.config = config or EngineConfig()
        self._new_id = id_factory or _new_id
        self._pools: dict[str, Pool] = {}
        self._locks: dict[str, threading.Lock] = {}
        # pool_id -> position_id -> position, guarded by that pool's lock
        self._positions: dict[str, dict[str, SharePosition]] = {}
        self._table_lock = threading.Lock()

    def __len__(self) -> int:
        with self._table_lock:
            return len(self._pools)

    def pool_ids(self) -> list[str]:
        with self._table_lock:
            return list(self._pools)

    @contextmanager
    def _locked(self, pool_id: str) -> Iterator[Pool]:
        """Hold the pool's write lock and yield the live pool."""
        with self._table_lock:
            pool = self._pools.get(pool_id)
            lock = self._locks.get(pool_id)
        if pool is None or lock is None:
            raise PoolNotFound(f"No pool with id {pool_id}", pool_id=pool_id)
        with lock:
            yield pool

    @staticmethod
    def _log_rejection(event: str, pool_id: str | None, err: PoolError, **fields: Any) -> None:
        logger.warning(event, **{**fields, **err.context, "pool_id": pool_id, "code": err.code})

    # --- Mutations ---

    def create_pool(
        self,
        asset_a: str,
        asset_b: str,
        amount_a: int,
        amount_b: int,
        owner: str,
        fee_numerator: int | None = None,
        fee_denominator: int | None = None,
    ) -> Deposit:
        """Create a pool seeded with a first deposit of both assets.

        There is no per-pair deduplication here; see PoolRegistry.

        Args:
            asset_a: First asset id
            asset_b: Second asset id
            amount_a: Initial reserve of asset_a
            amount_b: Initial reserve of asset_b
            owner: Holder of the initial share position
            fee_numerator: Fee numerator (config default if None)
            fee_denominator: Fee denominator (config default if None)

        Returns:
            Deposit with the new pool id and the creator's position

        Raises:
            ZeroAmount: If either amount is not positive
            InvalidFee: If the fee fraction is outside [0, 1)
            InvalidPool: If both assets are the same
            DuplicateId: If the id source repeats an existing pool id
        """
        if fee_numerator is None:
            fee_numerator = self.config.default_fee_numerator
        if fee_denominator is None:
            fee_denominator = self.config.default_fee_denominator

        pool_id = self._new_id()
        try:
            pool, shares = liquidity.create_pool(
                pool_id,
                normalize_asset_id(asset_a),
                normalize_asset_id(asset_b),
                amount_a,
                amount_b,
                fee_numerator,
                fee_denominator,
            )
        except PoolError as err:
            self._log_rejection("create_pool_rejected", None, err, amount_a=amount_a, amount_b=amount_b)
            raise

        position = SharePosition(
            position_id=self._new_id(), pool_id=pool_id, owner=owner, share_amount=shares
        )
        with self._table_lock:
            if pool_id in self._pools:
                err = DuplicateId(f"Pool id {pool_id} is already in use", pool_id=pool_id)
                self._log_rejection(
                    "create_pool_rejected", pool_id, err, amount_a=amount_a, amount_b=amount_b
                )
                raise err
            self._pools[pool_id] = pool
            self._locks[pool_id] = threading.Lock()
            self._positions[pool_id] = {position.position_id: position}

        logger.info(
            "pool_created",
            pool_id=pool_id,
            asset_a=pool.asset_a,
            asset_b=pool.asset_b,
            reserve_a=pool.reserve_a,
            reserve_b=pool.reserve_b,
            shares_minted=shares,
            fee=f"{fee_numerator}/{fee_denominator}",
        )
        return Deposit(pool_id=pool_id, shares_minted=shares, position=position)

    def execute_swap(
        self,
        pool_id: str,
        direction: Direction | str,
        amount_in: int,
        min_amount_out: int = 0,
    ) -> SwapReceipt:
        """Swap an exact input, re-quoting against the pool's current state.

        Raises:
            PoolNotFound: If pool_id is unknown
            ZeroAmount, InsufficientReserves, InsufficientOutputAmount,
            SlippageExceeded: See swap.execute_swap
        """
        direction = Direction(direction)
        with self._locked(pool_id) as pool:
            try:
                receipt = swap.execute_swap(pool, direction, amount_in, min_amount_out)
            except PoolError as err:
                self._log_rejection(
                    "swap_rejected",
                    pool_id,
                    err,
                    direction=direction.value,
                    amount_in=amount_in,
                    min_amount_out=min_amount_out,
                )
                raise
            reserve_a, reserve_b = pool.reserve_a, pool.reserve_b

        logger.info(
            "swap_executed",
            pool_id=pool_id,
            direction=direction.value,
            amount_in=receipt.amount_in,
            amount_out=receipt.amount_out,
            fee_amount=receipt.fee_amount,
            reserve_a=reserve_a,
            reserve_b=reserve_b,
        )
        return receipt

    def add_liquidity(
        self,
        pool_id: str,
        owner: str,
        amount_a_desired: int,
        amount_b_desired: int,
        min_shares_out: int = 0,
    ) -> Deposit:
        """Deposit both assets and mint a new share position for owner.

        On a pool emptied by full withdrawal this re-seeds it under the
        first-deposit rule.

        Raises:
            PoolNotFound: If pool_id is unknown
            ZeroAmount, SlippageExceeded, ReserveOverflow: See liquidity.add_liquidity
            DuplicateId: If the id source repeats a position id in this pool
        """
        with self._locked(pool_id) as pool:
            reseeded = pool.is_empty
            positions = self._positions[pool_id]
            position_id = self._new_id()
            try:
                if position_id in positions:
                    raise DuplicateId(
                        f"Position id {position_id} is already in use",
                        position_id=position_id,
                    )
                shares = liquidity.add_liquidity(pool, amount_a_desired, amount_b_desired, min_shares_out)
            except PoolError as err:
                self._log_rejection(
                    "add_liquidity_rejected",
                    pool_id,
                    err,
                    amount_a=amount_a_desired,
                    amount_b=amount_b_desired,
                    min_shares_out=min_shares_out,
                )
                raise
            position = SharePosition(
                position_id=position_id, pool_id=pool_id, owner=owner, share_amount=shares
            )
            positions[position_id] = position
            share_supply = pool.share_supply

        logger.info(
            "liquidity_added",
            pool_id=pool_id,
            owner=owner,
            amount_a=amount_a_desired,
            amount_b=amount_b_desired,
            shares_minted=shares,
            share_supply=share_supply,
            reseeded=reseeded,
        )
        return Deposit(pool_id=pool_id, shares_minted=shares, position=position)

    def remove_liquidity(
        self,
        pool_id: str,
        position_id: str,
        owner: str,
        shares_in: int,
        min_amount_a: int = 0,
        min_amount_b: int = 0,
    ) -> Withdrawal:
        """Burn shares from a position and pay out both assets.

        Raises:
            PoolNotFound: If pool_id is unknown
            PositionNotFound: If the position is not in this pool
            PositionOwnershipError: If owner does not hold the position
            InsufficientShares: If shares_in exceeds the position
            ZeroAmount, SlippageExceeded: See liquidity.remove_liquidity
        """
        with self._locked(pool_id) as pool:
            positions = self._positions[pool_id]
            try:
                position = self._owned_position(positions, pool_id, position_id, owner)
                if shares_in > position.share_amount:
                    raise InsufficientShares(
                        f"Position holds {position.share_amount} shares, cannot burn {shares_in}",
                        position_id=position_id,
                        share_amount=position.share_amount,
                        shares_in=shares_in,
                    )
                redemption = liquidity.remove_liquidity(pool, shares_in, min_amount_a, min_amount_b)
            except PoolError as err:
                self._log_rejection(
                    "remove_liquidity_rejected",
                    pool_id,
                    err,
                    position_id=position_id,
                    shares_in=shares_in,
                )
                raise

            remaining = position.share_amount - shares_in
            if remaining == 0:
                del positions[position_id]
                new_position = None
            else:
                new_position = replace(position, share_amount=remaining)
                positions[position_id] = new_position
            share_supply = pool.share_supply

        logger.info(
            "liquidity_removed",
            pool_id=pool_id,
            position_id=position_id,
            shares_burned=shares_in,
            amount_a=redemption.amount_a,
            amount_b=redemption.amount_b,
            share_supply=share_supply,
            pool_emptied=share_supply == 0,
        )
        return Withdrawal(
            pool_id=pool_id,
            shares_burned=shares_in,
            amount_a=redemption.amount_a,
            amount_b=redemption.amount_b,
            position=new_position,
        )

    def merge_positions(self, pool_id: str, owner: str, position_ids: list[str]) -> SharePosition:
        """Combine several positions of one owner into the first of them.

        Raises:
            PositionNotFound: If any id is not in this pool
            PositionOwnershipError: If any position belongs to someone else
        """
        if not position_ids:
            raise PositionNotFound("No positions given to merge", pool_id=pool_id)
        unique_ids = list(dict.fromkeys(position_ids))

        with self._locked(pool_id):
            positions = self._positions[pool_id]
            owned = [self._owned_position(positions, pool_id, pid, owner) for pid in unique_ids]
            merged = replace(owned[0], share_amount=sum(p.share_amount for p in owned))
            for position in owned[1:]:
                del positions[position.position_id]
            positions[merged.position_id] = merged

        logger.debug(
            "positions_merged",
            pool_id=pool_id,
            position_id=merged.position_id,
            merged_count=len(owned),
            share_amount=merged.share_amount,
        )
        return merged

    @staticmethod
    def _owned_position(
        positions: dict[str, SharePosition], pool_id: str, position_id: str, owner: str
    ) -> SharePosition:
        position = positions.get(position_id)
        if position is None:
            raise PositionNotFound(
                f"No position {position_id} in pool {pool_id}",
                pool_id=pool_id,
                position_id=position_id,
            )
        if position.owner != owner:
            raise PositionOwnershipError(
                f"Position {position_id} is not owned by {owner}",
                position_id=position_id,
                owner=owner,
            )
        return position

    # --- Reads ---

    def get_pool(self, pool_id: str) -> PoolSnapshot:
        """Snapshot of the pool's current state."""
        with self._locked(pool_id) as pool:
            return pool.snapshot()

    def get_reserves(self, pool_id: str) -> tuple[int, int]:
        """Current (reserve_a, reserve_b)."""
        snapshot = self.get_pool(pool_id)
        return snapshot.reserve_a, snapshot.reserve_b

    def get_share_supply(self, pool_id: str) -> int:
        return self.get_pool(pool_id).share_supply

    def get_position(self, pool_id: str, position_id: str) -> SharePosition:
        with self._locked(pool_id):
            position = self._positions[pool_id].get(position_id)
        if position is None:
            raise PositionNotFound(
                f"No position {position_id} in pool {pool_id}",
                pool_id=pool_id,
                position_id=position_id,
            )
        return position

    def positions_of(self, owner: str, pool_id: str | None = None) -> list[SharePosition]:
        """Every position held by owner, optionally limited to one pool."""
        pool_ids = [pool_id] if pool_id is not None else self.pool_ids()
        result: list[SharePosition] = []
        for pid in pool_ids:
            with self._locked(pid):
                result.extend(p for p in self._positions[pid].values() if p.owner == owner)
        return result

    def quote(
        self,
        pool_id: str,
        direction: Direction | str,
        amount_in: int,
        slippage_bps: int | None = None,
    ) -> Quote:
        """Preview a swap against a snapshot of the pool.

        The result can be stale by the time the caller submits; pass its
        minimum_received as min_amount_out to execute_swap.
        """
        direction = Direction(direction)
        if slippage_bps is None:
            slippage_bps = self.config.default_slippage_bps
        return quote(self.get_pool(pool_id), direction, amount_in, slippage_bps)


__all__ = ["Deposit", "Withdrawal", "PoolEngine"]
