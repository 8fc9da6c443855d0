"""Archethic node client used by the submit workflow."""

from __future__ import annotations

import logging
import threading
from typing import Any
from urllib.parse import urlparse

from keychain_tx.keychain import Keychain, KeychainError, seed_to_bytes
from keychain_tx.shared import crypto
from keychain_tx.shared.network import (
    NetworkClient,
    NetworkError,
    NetworkErrorType,
    RetryConfig,
    TimeoutConfig,
)
from keychain_tx.shared.protocols import OnError, OnSent, TransactionProtocol

logger = logging.getLogger(__name__)

TRANSACTION_PATH = "/api/transaction"

OWNERSHIPS_QUERY = """
query {
  lastTransaction(address: "%s") {
    data {
      ownerships {
        secret
        authorizedPublicKeys { encryptedSecretKey publicKey }
      }
    }
  }
}
"""

CHAIN_LENGTH_QUERY = 'query { lastTransaction(address: "%s") { chainLength } }'

STORAGE_NONCE_QUERY = "query { sharedSecrets { storageNoncePublicKey } }"


def _is_missing_transaction(error: NetworkError) -> bool:
    message = error.message.lower()
    return error.error_type == NetworkErrorType.QUERY_ERROR and (
        "not_exists" in message or "not found" in message
    )


class ArchethicClient:
    def __init__(
        self,
        endpoint: str,
        timeout_config: TimeoutConfig | None = None,
        retry_config: RetryConfig | None = None,
    ):
        self.endpoint = endpoint.rstrip("/")
        self._network_client = NetworkClient(
            node_url=self.endpoint,
            timeout_config=timeout_config,
            retry_config=retry_config,
        )
        # Dispatch attempts are bounded by the sender, not by the HTTP layer.
        self._send_client = NetworkClient(
            node_url=self.endpoint,
            timeout_config=timeout_config,
            retry_config=RetryConfig(max_retries=0),
        )

    def _decrypt_ownership(self, address: bytes, keypair: crypto.KeyPair) -> bytes:
        data = self._network_client.graphql(
            OWNERSHIPS_QUERY % address.hex(), context="Fetch keychain ownerships"
        )
        transaction = data.get("lastTransaction") or {}
        ownerships = (transaction.get("data") or {}).get("ownerships") or []
        own_key = keypair.public_key.hex()

        for ownership in ownerships:
            for authorized in ownership.get("authorizedPublicKeys", []):
                if authorized.get("publicKey", "").lower() != own_key:
                    continue
                aes_key = crypto.ec_decrypt(
                    bytes.fromhex(authorized["encryptedSecretKey"]), keypair.private_key
                )
                return crypto.aes_decrypt(bytes.fromhex(ownership["secret"]), aes_key)

        raise KeychainError(f"Access key is not authorized on {address.hex()}")

    def fetch_keychain(self, seed: str) -> Keychain:
        seed_bytes = seed_to_bytes(seed)
        access_keypair = crypto.derive_keypair(seed_bytes, 0)
        access_address = crypto.derive_address(
            crypto.derive_keypair(seed_bytes, 1).public_key
        )
        keychain_address = self._decrypt_ownership(access_address, access_keypair)
        keychain = Keychain.decode(
            self._decrypt_ownership(keychain_address, access_keypair)
        )
        logger.info(
            "Fetched keychain v%d with %d services", keychain.version, len(keychain.services)
        )
        return keychain

    def fetch_last_index(self, address: bytes) -> int:
        try:
            data = self._network_client.graphql(
                CHAIN_LENGTH_QUERY % address.hex(), context="Fetch last index"
            )
        except NetworkError as e:
            if _is_missing_transaction(e):
                return 0
            raise
        transaction = data.get("lastTransaction")
        if not transaction:
            return 0
        return int(transaction.get("chainLength", 0))

    def fetch_network_public_key(self) -> str:
        data = self._network_client.graphql(
            STORAGE_NONCE_QUERY, context="Fetch storage nonce public key"
        )
        public_key = (data.get("sharedSecrets") or {}).get("storageNoncePublicKey")
        if not public_key:
            raise NetworkError(
                error_type=NetworkErrorType.QUERY_ERROR,
                message="Node did not return a storage nonce public key",
            )
        return public_key

    def send_transaction(
        self, transaction: TransactionProtocol, timeout: float | None = None
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"json": transaction.to_dict()}
        if timeout is not None:
            kwargs["timeout"] = timeout
        return self._send_client.post(
            TRANSACTION_PATH, context="Send transaction", **kwargs
        )


def connect(
    endpoint: str,
    timeout_config: TimeoutConfig | None = None,
    retry_config: RetryConfig | None = None,
) -> ArchethicClient:
    parsed = urlparse(endpoint.strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"Invalid endpoint URL: {endpoint!r}")
    return ArchethicClient(endpoint.strip(), timeout_config, retry_config)


class TransactionSender:
    """Sends a transaction on a worker thread and reports through callbacks."""

    def __init__(self, client: ArchethicClient):
        self.client = client

    def _send(
        self,
        transaction: TransactionProtocol,
        retries: int,
        timeout_ms: int,
        on_sent: OnSent,
        on_error: OnError,
    ) -> None:
        timeout = timeout_ms / 1000
        last_error: Exception | None = None

        for attempt in range(retries + 1):
            try:
                self.client.send_transaction(transaction, timeout=timeout)
            except Exception as e:
                last_error = e
                logger.warning(
                    "Transaction dispatch failed (attempt %d/%d): %s",
                    attempt + 1,
                    retries + 1,
                    e,
                )
                continue
            on_sent(transaction.address.hex())
            return

        on_error("dispatch", str(last_error or "Unknown error"))

    def dispatch(
        self,
        transaction: TransactionProtocol,
        retries: int,
        timeout_ms: int,
        on_sent: OnSent,
        on_error: OnError,
    ) -> None:
        threading.Thread(
            target=self._send,
            args=(transaction, retries, timeout_ms, on_sent, on_error),
            daemon=True,
        ).start()
