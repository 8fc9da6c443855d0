"""Transactions built from a draft: binary signing payloads and JSON form.

The chain key signs :meth:`Transaction.previous_signature_payload`; the origin
key then signs that payload extended with the previous public key and
signature. Integers are big-endian, amounts are unsigned 64-bit and token ids
signed 64-bit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from keychain_tx.draft import TransactionDraft, TransactionKind
from keychain_tx.shared import crypto

logger = logging.getLogger(__name__)


def _sized(data: bytes, width: int = 4) -> bytes:
    return len(data).to_bytes(width, "big") + data


def _count(items: list[Any]) -> bytes:
    return len(items).to_bytes(4, "big")


@dataclass
class Transaction:
    kind: TransactionKind
    address: bytes
    data: TransactionDraft
    version: int = 1
    previous_public_key: bytes = b""
    previous_signature: bytes = b""
    origin_signature: bytes = b""

    def _data_payload(self) -> bytes:
        data = self.data
        parts = [
            _sized(data.code.encode("utf-8")),
            _sized(data.content.encode("utf-8")),
            _count(data.ownerships),
        ]
        for ownership in data.ownerships:
            parts.append(_sized(ownership.secret))
            parts.append(_count(list(ownership.authorized_keys)))
            for key in ownership.authorized_keys:
                parts.append(_sized(key.public_key, 1))
                parts.append(_sized(key.encrypted_secret_key))

        parts.append(_count(data.uco_transfers))
        for transfer in data.uco_transfers:
            parts.append(transfer.to + transfer.amount.to_bytes(8, "big"))

        parts.append(_count(data.token_transfers))
        for token_transfer in data.token_transfers:
            parts.append(
                token_transfer.token_address
                + token_transfer.to
                + token_transfer.amount.to_bytes(8, "big")
                + token_transfer.token_id.to_bytes(8, "big", signed=True)
            )

        parts.append(_count(data.recipients))
        parts.extend(data.recipients)
        return b"".join(parts)

    def previous_signature_payload(self) -> bytes:
        return (
            self.version.to_bytes(4, "big")
            + self.address
            + bytes([self.kind.type_id])
            + self._data_payload()
        )

    def origin_signature_payload(self) -> bytes:
        return (
            self.previous_signature_payload()
            + self.previous_public_key
            + _sized(self.previous_signature, 1)
        )

    def previous_sign(self, private_key: bytes) -> None:
        self.previous_signature = crypto.sign(private_key, self.previous_signature_payload())

    def origin_sign(self, private_key: bytes) -> None:
        if not self.previous_signature:
            raise ValueError("Transaction must be signed by its chain before origin signing")
        self.origin_signature = crypto.sign(private_key, self.origin_signature_payload())
        logger.debug("Origin signed transaction %s", self.address.hex())

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "address": self.address.hex(),
            "type": self.kind.value,
            "data": self.data.to_dict(),
            "previousPublicKey": self.previous_public_key.hex(),
            "previousSignature": self.previous_signature.hex(),
            "originSignature": self.origin_signature.hex(),
        }
