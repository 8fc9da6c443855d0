"""Keychain decoding, key derivation and transaction building."""

from __future__ import annotations

import copy
import hashlib
import hmac
import logging
from dataclasses import dataclass, field

from keychain_tx.draft import TransactionDraft
from keychain_tx.shared import crypto
from keychain_tx.transaction import Transaction

logger = logging.getLogger(__name__)


class KeychainError(Exception):
    pass


def seed_to_bytes(seed: str) -> bytes:
    """Hex seeds are decoded, any other passphrase is used as UTF-8 bytes."""
    value = seed.strip()
    if not value:
        raise KeychainError("Access seed is required")
    try:
        return bytes.fromhex(value)
    except ValueError:
        return value.encode("utf-8")


def replace_derivation_index(derivation_path: str, index: int) -> str:
    segments = derivation_path.split("/")
    return "/".join(segments[:-1] + [str(index)])


@dataclass(frozen=True)
class Service:
    derivation_path: str
    curve: int = crypto.CURVE_ED25519
    hash_algo: int = crypto.HASH_SHA256


class _Reader:
    def __init__(self, data: bytes):
        self.data = data
        self.pos = 0

    def take(self, size: int) -> bytes:
        if self.pos + size > len(self.data):
            raise KeychainError("Keychain payload is truncated")
        chunk = self.data[self.pos : self.pos + size]
        self.pos += size
        return chunk

    def byte(self) -> int:
        return self.take(1)[0]


@dataclass
class Keychain:
    seed: bytes
    version: int = 1
    services: dict[str, Service] = field(default_factory=dict)

    @classmethod
    def decode(cls, binary: bytes) -> "Keychain":
        reader = _Reader(binary)
        version = int.from_bytes(reader.take(4), "big")
        seed = reader.take(reader.byte())
        services: dict[str, Service] = {}
        for _ in range(reader.byte()):
            name = reader.take(reader.byte()).decode("utf-8")
            derivation_path = reader.take(reader.byte()).decode("utf-8")
            curve = reader.byte()
            hash_algo = reader.byte()
            services[name] = Service(derivation_path, curve, hash_algo)
        return cls(seed=seed, version=version, services=services)

    def service(self, name: str) -> Service:
        try:
            return self.services[name]
        except KeyError:
            raise KeychainError(f"Unknown service '{name}' in keychain") from None

    def derive_keypair(self, service: str, index: int) -> crypto.KeyPair:
        definition = self.service(service)
        path = replace_derivation_index(definition.derivation_path, index)
        hashed_path = hashlib.sha256(path.encode("utf-8")).digest()
        extended_seed = hmac.new(self.seed, hashed_path, hashlib.sha512).digest()[:32]
        return crypto.derive_keypair(extended_seed, 0, definition.curve)

    def derive_address(self, service: str, index: int) -> bytes:
        public_key = self.derive_keypair(service, index).public_key
        return crypto.derive_address(public_key, self.service(service).hash_algo)

    def build_transaction(
        self, draft: TransactionDraft, service: str, index: int
    ) -> Transaction:
        """Chain ``draft`` after the transaction at ``index`` of the service."""
        keypair = self.derive_keypair(service, index)
        transaction = Transaction(
            kind=draft.kind,
            address=self.derive_address(service, index + 1),
            data=copy.deepcopy(draft),
            version=draft.version,
            previous_public_key=keypair.public_key,
        )
        transaction.previous_sign(keypair.private_key)
        logger.info(
            "Built %s transaction for service %s at index %d",
            draft.kind.value,
            service,
            index,
        )
        return transaction
