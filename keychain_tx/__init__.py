"""Archethic keychain transaction form - a terminal TUI for composing transactions.

This package is organized into feature-based modules:
- features.ledger: UCO transfers, token transfers and recipients
- features.ownership: Secrets and their authorized keys
- features.submit: Transaction assembly and dispatch
- shared: Shared utilities (network, crypto, config, logging)
"""

from keychain_tx.draft import TransactionDraft, TransactionKind
from keychain_tx.form import KeyOutcome, TransactionForm
from keychain_tx.keychain import Keychain, KeychainError
from keychain_tx.navigation import Section
from keychain_tx.shared import (
    FormConfig,
    NetworkClient,
    NetworkError,
    NetworkErrorType,
    RetryConfig,
    TimeoutConfig,
)
from keychain_tx.transaction import Transaction

__version__ = "0.1.0"
__all__ = [
    "TransactionForm",
    "KeyOutcome",
    "TransactionDraft",
    "TransactionKind",
    "Transaction",
    "Keychain",
    "KeychainError",
    "Section",
    "FormConfig",
    "NetworkClient",
    "NetworkError",
    "NetworkErrorType",
    "RetryConfig",
    "TimeoutConfig",
]
