"""Shared type definitions for pool records.

These types are used at the decode boundary, where untyped wire data
(decimal strings, camelCase keys) becomes typed engine values.
"""

from typing import Annotated, Any

from pydantic import BeforeValidator, Field

from amm_engine.safe_int import UINT64_MAX


def validate_uint64(value: Any) -> str:
    """Validate that a value is a valid uint64 decimal string.

    Args:
        value: Value to validate (string or int)

    Returns:
        Valid uint64 as decimal string

    Raises:
        ValueError: If value is not a valid non-negative integer within uint64 range
    """
    # bool is an int subclass but never a valid amount
    if isinstance(value, bool):
        raise ValueError(f"Uint64 must be string or int, got {type(value).__name__}")

    if isinstance(value, int):
        if value < 0:
            raise ValueError(f"Uint64 cannot be negative: {value}")
        if value > UINT64_MAX:
            raise ValueError(f"Uint64 overflow: {value} > 2^64-1")
        return str(value)

    if not isinstance(value, str):
        raise ValueError(f"Uint64 must be string or int, got {type(value).__name__}")

    try:
        int_value = int(value)
    except ValueError as err:
        raise ValueError(f"Uint64 must be a decimal integer string: '{value}'") from err

    if int_value < 0:
        raise ValueError(f"Uint64 cannot be negative: {value}")
    if int_value > UINT64_MAX:
        raise ValueError(f"Uint64 overflow: {value} > 2^64-1")

    return str(int_value)


# 64-bit unsigned integer as decimal string (validated)
Uint64 = Annotated[
    str,
    BeforeValidator(validate_uint64),
    Field(description="64-bit unsigned integer as decimal string"),
]


def normalize_asset_id(asset: str) -> str:
    """Normalize an asset type tag such as ``0xABC::coin::COIN``.

    The hex address part is case-insensitive and is lowercased; module and
    struct names are case-sensitive and kept as given.

    Raises:
        ValueError: If the identifier is empty
    """
    asset = asset.strip()
    if not asset:
        raise ValueError("Asset identifier cannot be empty")

    address, sep, rest = asset.partition("::")
    if address[:2].lower() == "0x":
        address = address.lower()
    return address + sep + rest


AssetId = Annotated[str, BeforeValidator(lambda v: normalize_asset_id(v) if isinstance(v, str) else v)]
