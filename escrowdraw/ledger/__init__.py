"""Credit ledger and currency gateway contracts plus their SQL implementations."""

from .base import CreditLedger, CurrencyGateway
from .sql import SqlCreditLedger, SqlCurrencyGateway

__all__ = [
    "CreditLedger",
    "CurrencyGateway",
    "SqlCreditLedger",
    "SqlCurrencyGateway",
]
