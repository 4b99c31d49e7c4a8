"""Protocol constants for the AMM kernel.

Centralizes well-known identities and protocol parameters.
"""

# The null identity. Never a valid token, pool, router or authority.
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Basis point denominator (10000 bps = 100%)
BPS_DENOMINATOR = 10_000

# Trading fee retained inside pool reserves (30 bps = 0.3%)
# Matches the classic 997/1000 constant product fee
DEFAULT_TRADING_FEE_BPS = 30

# Protocol fee skimmed to the treasury on every swap (10 bps = 0.1%)
DEFAULT_PROTOCOL_FEE_BPS = 10

# Shares minted to the zero address on the first deposit and never redeemable
MINIMUM_LIQUIDITY = 1_000

# Largest value a reserve may hold (uint112, as in the classic pair layout)
MAX_RESERVE = 2**112 - 1
