"""List collection mutators for ledger transfers and recipients."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from keychain_tx.buffers import TextBuffer
from keychain_tx.draft import Collection, TokenTransfer, TransactionDraft, UcoTransfer
from keychain_tx.features.ledger.validators import (
    AddressValidator,
    AmountValidator,
    TokenIdValidator,
    ValidationResult,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


@dataclass
class EntryResult:
    """Outcome of an add operation: the committed entry or the field errors."""

    entry: Any = None
    errors: list[FieldError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


class FieldReader:
    """Collects validated values from named buffers."""

    def __init__(self, buffers: Mapping[str, TextBuffer]):
        self.buffers = buffers
        self.errors: list[FieldError] = []

    def read(self, name: str, validate: Callable[[str], ValidationResult]) -> Any:
        result = validate(self.buffers[name].value)
        if not result.is_valid:
            self.errors.append(FieldError(name, result.error_message or "Invalid value"))
            return None
        return result.normalized_value


class LedgerService:
    def __init__(self, draft: TransactionDraft, buffers: Mapping[str, TextBuffer]):
        self.draft = draft
        self.buffers = buffers

    def _clear(self, *names: str) -> None:
        for name in names:
            self.buffers[name].clear()

    def add_uco_transfer(self) -> EntryResult:
        reader = FieldReader(self.buffers)
        to = reader.read("uco_to", AddressValidator.validate)
        amount = reader.read("uco_amount", AmountValidator.validate)
        if reader.errors:
            return EntryResult(errors=reader.errors)

        transfer = UcoTransfer(to=to, amount=amount)
        self.draft.add_uco_transfer(transfer)
        self._clear("uco_to", "uco_amount")
        logger.info("Added UCO transfer of %d to %s", amount, to.hex())
        return EntryResult(entry=transfer)

    def add_token_transfer(self) -> EntryResult:
        reader = FieldReader(self.buffers)
        to = reader.read("token_to", AddressValidator.validate)
        amount = reader.read("token_amount", AmountValidator.validate)
        token_address = reader.read("token_address", AddressValidator.validate)
        token_id = reader.read("token_id", TokenIdValidator.validate)
        if reader.errors:
            return EntryResult(errors=reader.errors)

        transfer = TokenTransfer(
            to=to, amount=amount, token_address=token_address, token_id=token_id
        )
        self.draft.add_token_transfer(transfer)
        self._clear("token_to", "token_amount", "token_address", "token_id")
        logger.info(
            "Added token transfer of %d (%s #%d) to %s",
            amount,
            token_address.hex(),
            token_id,
            to.hex(),
        )
        return EntryResult(entry=transfer)

    def add_recipient(self) -> EntryResult:
        reader = FieldReader(self.buffers)
        recipient = reader.read("recipient", AddressValidator.validate)
        if reader.errors:
            return EntryResult(errors=reader.errors)

        self.draft.add_recipient(recipient)
        self._clear("recipient")
        logger.info("Added recipient %s", recipient.hex())
        return EntryResult(entry=recipient)

    def delete_entry(self, collection: Collection, index: int) -> bool:
        removed = self.draft.remove(collection, index)
        if removed:
            logger.info("Removed %s entry at %d", collection.value, index)
        else:
            logger.debug(
                "Ignored removal of %s entry at %d (out of range)",
                collection.value,
                index,
            )
        return removed
