"""Protocol fee calculation.

This package provides the treasury fee split applied by the router.
"""

from ammkernel.fees.protocol import ProtocolFee, fee_on, gross_up_exact_output, split_exact_input

__all__ = [
    "ProtocolFee",
    "fee_on",
    "gross_up_exact_output",
    "split_exact_input",
]
