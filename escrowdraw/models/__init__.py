from .base import Base

# import models so Alembic/autoloaders can discover mappers
from .credit import CreditAccount, CreditAllowance  # noqa: F401
from .ledger import LedgerTransaction  # noqa: F401
from .draw import DrawRecord  # noqa: F401

__all__ = [
    "Base",
    "CreditAccount",
    "CreditAllowance",
    "LedgerTransaction",
    "DrawRecord",
]
