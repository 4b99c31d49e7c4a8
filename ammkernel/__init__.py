"""AMM Kernel - constant product pools, routing and router governance."""

from ammkernel.kernel import Kernel, deploy_kernel, get_default_kernel
from ammkernel.ledger import Ledger

__version__ = "0.1.0"
__all__ = ["Kernel", "Ledger", "deploy_kernel", "get_default_kernel", "__version__"]
