"""Feature modules for the keychain transaction form.

- ledger: UCO transfers, token transfers and recipients
- ownership: Secrets shared with authorized public keys
- submit: Transaction assembly and dispatch
"""

from keychain_tx.features import ledger
from keychain_tx.features import ownership
from keychain_tx.features import submit

__all__ = ["ledger", "ownership", "submit"]
