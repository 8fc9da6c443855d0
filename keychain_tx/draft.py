"""Transaction draft assembled by the form."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TransactionKind(Enum):
    KEYCHAIN_ACCESS = "keychain_access"
    KEYCHAIN = "keychain"
    TRANSFER = "transfer"
    HOSTING = "hosting"
    TOKEN = "token"
    DATA = "data"
    CONTRACT = "contract"
    CODE_PROPOSAL = "code_proposal"
    CODE_APPROVAL = "code_approval"

    @property
    def label(self) -> str:
        return _KIND_LABELS[self]

    @property
    def type_id(self) -> int:
        return _KIND_IDS[self]


_KIND_LABELS = {
    TransactionKind.KEYCHAIN_ACCESS: "Keychain Access",
    TransactionKind.KEYCHAIN: "Keychain",
    TransactionKind.TRANSFER: "Transfer",
    TransactionKind.HOSTING: "Hosting",
    TransactionKind.TOKEN: "Token",
    TransactionKind.DATA: "Data",
    TransactionKind.CONTRACT: "Contract",
    TransactionKind.CODE_PROPOSAL: "Code Proposal",
    TransactionKind.CODE_APPROVAL: "Code Approval",
}

_KIND_IDS = {
    TransactionKind.KEYCHAIN_ACCESS: 254,
    TransactionKind.KEYCHAIN: 255,
    TransactionKind.TRANSFER: 253,
    TransactionKind.HOSTING: 252,
    TransactionKind.TOKEN: 251,
    TransactionKind.DATA: 250,
    TransactionKind.CONTRACT: 249,
    TransactionKind.CODE_PROPOSAL: 5,
    TransactionKind.CODE_APPROVAL: 6,
}


@dataclass(frozen=True)
class UcoTransfer:
    to: bytes
    amount: int

    def to_dict(self) -> dict[str, Any]:
        return {"to": self.to.hex(), "amount": self.amount}


@dataclass(frozen=True)
class TokenTransfer:
    to: bytes
    amount: int
    token_address: bytes
    token_id: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "to": self.to.hex(),
            "amount": self.amount,
            "tokenAddress": self.token_address.hex(),
            "tokenId": self.token_id,
        }


@dataclass(frozen=True)
class AuthorizedKey:
    public_key: bytes
    encrypted_secret_key: bytes

    def to_dict(self) -> dict[str, Any]:
        return {
            "publicKey": self.public_key.hex(),
            "encryptedSecretKey": self.encrypted_secret_key.hex(),
        }


@dataclass(frozen=True)
class Ownership:
    secret: bytes
    authorized_keys: tuple[AuthorizedKey, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "secret": self.secret.hex(),
            "authorizedKeys": [key.to_dict() for key in self.authorized_keys],
        }


class Collection(Enum):
    UCO_TRANSFERS = "uco_transfers"
    TOKEN_TRANSFERS = "token_transfers"
    RECIPIENTS = "recipients"
    OWNERSHIPS = "ownerships"


@dataclass
class TransactionDraft:
    kind: TransactionKind = TransactionKind.KEYCHAIN_ACCESS
    version: int = 1
    content: str = ""
    code: str = ""
    uco_transfers: list[UcoTransfer] = field(default_factory=list)
    token_transfers: list[TokenTransfer] = field(default_factory=list)
    recipients: list[bytes] = field(default_factory=list)
    ownerships: list[Ownership] = field(default_factory=list)

    def add_uco_transfer(self, transfer: UcoTransfer) -> None:
        self.uco_transfers.append(transfer)

    def add_token_transfer(self, transfer: TokenTransfer) -> None:
        self.token_transfers.append(transfer)

    def add_recipient(self, address: bytes) -> None:
        self.recipients.append(address)

    def add_ownership(self, ownership: Ownership) -> None:
        self.ownerships.append(ownership)

    def entries(self, collection: Collection) -> list[Any]:
        return getattr(self, collection.value)

    def remove(self, collection: Collection, index: int) -> bool:
        """Remove one entry, returning False when ``index`` is out of range."""
        entries = self.entries(collection)
        if not 0 <= index < len(entries):
            return False
        del entries[index]
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": self.content.encode("utf-8").hex(),
            "code": self.code,
            "ownerships": [ownership.to_dict() for ownership in self.ownerships],
            "ledger": {
                "uco": {
                    "transfers": [transfer.to_dict() for transfer in self.uco_transfers]
                },
                "token": {
                    "transfers": [
                        transfer.to_dict() for transfer in self.token_transfers
                    ]
                },
            },
            "recipients": [recipient.hex() for recipient in self.recipients],
        }
