"""Contracts of the external collaborators used by the form."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Protocol

if TYPE_CHECKING:
    from keychain_tx.draft import TransactionDraft

OnSent = Callable[[str], None]
OnError = Callable[[str, str], None]


class TransactionProtocol(Protocol):
    address: bytes

    def origin_sign(self, private_key: bytes) -> None: ...
    def to_dict(self) -> dict[str, Any]: ...


class KeychainProtocol(Protocol):
    version: int

    def derive_address(self, service: str, index: int) -> bytes: ...
    def build_transaction(
        self, draft: "TransactionDraft", service: str, index: int
    ) -> TransactionProtocol: ...


class LedgerClientProtocol(Protocol):
    endpoint: str

    def fetch_keychain(self, seed: str) -> KeychainProtocol: ...
    def fetch_last_index(self, address: bytes) -> int: ...
    def fetch_network_public_key(self) -> str: ...
    def send_transaction(
        self, transaction: TransactionProtocol, timeout: float | None = None
    ) -> dict[str, Any]: ...


class SenderProtocol(Protocol):
    def dispatch(
        self,
        transaction: TransactionProtocol,
        retries: int,
        timeout_ms: int,
        on_sent: OnSent,
        on_error: OnError,
    ) -> None: ...
