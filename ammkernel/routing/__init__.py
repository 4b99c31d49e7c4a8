"""Routing: path planning and the router contract."""

from ammkernel.routing.planning import (
    get_amounts_in,
    get_amounts_out,
    plan_exact_input,
    plan_exact_output,
    validate_path,
)
from ammkernel.routing.router import Router
from ammkernel.routing.types import HopPlan, SwapKind, SwapPlan

__all__ = [
    "HopPlan",
    "Router",
    "SwapKind",
    "SwapPlan",
    "get_amounts_in",
    "get_amounts_out",
    "plan_exact_input",
    "plan_exact_output",
    "validate_path",
]
