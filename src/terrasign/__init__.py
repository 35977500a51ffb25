"""Terra key management and transaction signing."""

__version__ = "0.1.0"

from terrasign.errors import TerraSignError  # noqa: E402
from terrasign.wallet import Wallet  # noqa: E402

__all__ = ["__version__", "TerraSignError", "Wallet"]
