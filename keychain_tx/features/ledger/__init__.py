"""Ledger feature module: transfers, recipients and their validators."""

from keychain_tx.features.ledger.service import (
    EntryResult,
    FieldError,
    FieldReader,
    LedgerService,
)
from keychain_tx.features.ledger.validators import (
    AddressValidator,
    AmountValidator,
    PublicKeyValidator,
    TokenIdValidator,
    ValidationResult,
)

__all__ = [
    "EntryResult",
    "FieldError",
    "FieldReader",
    "LedgerService",
    "AddressValidator",
    "AmountValidator",
    "PublicKeyValidator",
    "TokenIdValidator",
    "ValidationResult",
]
