"""Constant product AMM: pricing math and the pool engine."""

from ammkernel.amm.math import ConstantProduct, constant_product
from ammkernel.amm.pool import PoolEngine

__all__ = [
    "ConstantProduct",
    "PoolEngine",
    "constant_product",
]
