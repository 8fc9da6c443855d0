"""Ownership assembly: pending authorized keys and secret encryption."""

from __future__ import annotations

import logging
from typing import Callable, Mapping

from keychain_tx.buffers import TextBuffer
from keychain_tx.draft import AuthorizedKey, Collection, Ownership, TransactionDraft
from keychain_tx.features.ledger.service import EntryResult, FieldError
from keychain_tx.features.ledger.validators import PublicKeyValidator
from keychain_tx.shared import crypto

logger = logging.getLogger(__name__)

SECRET_FIELD = "secret"
KEY_FIELD = "authorized_key"


class OwnershipService:
    """Builds ownerships from the secret buffer and the pending key list.

    ``network_key_loader`` fetches the network's storage public key; it is
    called at most once per service instance and its result reused.
    """

    def __init__(
        self,
        draft: TransactionDraft,
        buffers: Mapping[str, TextBuffer],
        secret_key: bytes,
        network_key_loader: Callable[[], str] | None = None,
        symmetric_encrypt: Callable[[bytes, bytes], bytes] = crypto.aes_encrypt,
        asymmetric_encrypt: Callable[[bytes, bytes], bytes] = crypto.ec_encrypt,
    ):
        self.draft = draft
        self.buffers = buffers
        self.secret_key = secret_key
        self.pending_keys: list[str] = []
        self.network_key_loader = network_key_loader
        self.symmetric_encrypt = symmetric_encrypt
        self.asymmetric_encrypt = asymmetric_encrypt
        self._network_public_key: str | None = None

    def add_authorized_key(self) -> bool:
        key = self.buffers[KEY_FIELD].value.strip()
        if not key:
            return False
        self.pending_keys.append(key)
        self.buffers[KEY_FIELD].clear()
        return True

    def remove_pending_key(self, index: int) -> bool:
        if not 0 <= index < len(self.pending_keys):
            return False
        del self.pending_keys[index]
        return True

    def load_network_public_key(self) -> str:
        if self._network_public_key is None:
            if self.network_key_loader is None:
                raise RuntimeError("No ledger client available to load the public key")
            self._network_public_key = self.network_key_loader()
            logger.info("Loaded network storage public key")
        self.buffers[KEY_FIELD].set(self._network_public_key)
        return self._network_public_key

    def commit_ownership(self) -> EntryResult:
        self.add_authorized_key()

        errors: list[FieldError] = []
        public_keys: list[bytes] = []
        for key in self.pending_keys:
            result = PublicKeyValidator.validate(key)
            if result.is_valid:
                public_keys.append(result.normalized_value)
            else:
                errors.append(FieldError(KEY_FIELD, f"{key[:16]}…: {result.error_message}"))
        if errors:
            return EntryResult(errors=errors)

        try:
            authorized_keys = tuple(
                AuthorizedKey(
                    public_key=public_key,
                    encrypted_secret_key=self.asymmetric_encrypt(
                        self.secret_key, public_key
                    ),
                )
                for public_key in public_keys
            )
        except crypto.CryptoError as e:
            return EntryResult(errors=[FieldError(KEY_FIELD, str(e))])

        secret = self.buffers[SECRET_FIELD].value.encode("utf-8")
        ownership = Ownership(
            secret=self.symmetric_encrypt(secret, self.secret_key),
            authorized_keys=authorized_keys,
        )
        self.draft.add_ownership(ownership)
        self.pending_keys = []
        self.buffers[SECRET_FIELD].clear()
        self.buffers[KEY_FIELD].clear()
        logger.info("Added ownership with %d authorized keys", len(authorized_keys))
        return EntryResult(entry=ownership)

    def delete_ownership(self, index: int) -> bool:
        return self.draft.remove(Collection.OWNERSHIPS, index)
