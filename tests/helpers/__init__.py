"""Test helpers module for shared test utilities.

- constants: Asset ids
- factories: Pool factory functions
"""

from tests.helpers.constants import ASSET_X, ASSET_Y, ASSET_Z
from tests.helpers.factories import make_pool

__all__ = [
    # Constants
    "ASSET_X",
    "ASSET_Y",
    "ASSET_Z",
    # Factories
    "make_pool",
]
