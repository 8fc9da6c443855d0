"""Transaction assembly: from the collected draft to a dispatched transaction.

The steps run strictly in order and are not resumable. A failure at any step
is raised as :class:`WorkflowError` tagged with the failing :class:`Stage`;
only the final dispatch has its own bounded retry.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Any, Callable, TypeVar

from keychain_tx import client
from keychain_tx.draft import TransactionDraft
from keychain_tx.shared.config import FormConfig
from keychain_tx.shared.logging import get_logger
from keychain_tx.shared.protocols import (
    LedgerClientProtocol,
    OnError,
    OnSent,
    SenderProtocol,
    TransactionProtocol,
)

logger = get_logger(__name__)

T = TypeVar("T")


class Stage(Enum):
    ENDPOINT = "endpoint"
    CONNECT = "connect"
    KEYCHAIN = "keychain"
    DERIVE_ADDRESS = "derive_address"
    INDEX_LOOKUP = "index_lookup"
    BUILD = "build"
    ORIGIN_SIGN = "origin_sign"
    DISPATCH = "dispatch"


class WorkflowError(Exception):
    def __init__(self, stage: Stage, message: str):
        super().__init__(message)
        self.stage = stage
        self.message = message

    def __str__(self) -> str:
        return f"[{self.stage.value}] {self.message}"


@dataclass(frozen=True)
class WorkflowResult:
    success: bool
    message: str = ""
    stage: str | None = None
    transaction_address: str | None = None

    @classmethod
    def sent(cls, transaction_address: str) -> "WorkflowResult":
        return cls(success=True, transaction_address=transaction_address)

    @classmethod
    def failed(cls, stage: str, message: str) -> "WorkflowResult":
        return cls(success=False, stage=stage, message=message)

    @property
    def feedback(self) -> str:
        if self.success:
            return "Transaction sent"
        return f"Transaction error [{self.stage}]: {self.message}"


class SubmitWorkflow:
    def __init__(
        self,
        connect: Callable[[str], LedgerClientProtocol],
        origin_private_key: bytes,
        retries: int = 1,
        timeout_ms: int = 1000,
        sender_factory: Callable[[Any], SenderProtocol] = client.TransactionSender,
    ):
        self.connect = connect
        self.origin_private_key = origin_private_key
        self.retries = retries
        self.timeout_ms = timeout_ms
        self.sender_factory = sender_factory

    @classmethod
    def from_config(cls, config: FormConfig) -> "SubmitWorkflow":
        return cls(
            connect=partial(
                client.connect,
                timeout_config=config.timeout_config,
                retry_config=config.retry_config,
            ),
            origin_private_key=config.origin_private_key_bytes,
            retries=config.dispatch_retries,
            timeout_ms=config.dispatch_timeout_ms,
        )

    @staticmethod
    def _step(stage: Stage, operation: Callable[..., T], *args: Any) -> T:
        try:
            return operation(*args)
        except WorkflowError:
            raise
        except Exception as e:
            logger.error("Submit workflow failed at %s: %s", stage.value, e)
            raise WorkflowError(stage, str(e) or type(e).__name__) from e

    def run(
        self,
        endpoint: str,
        seed: str,
        service_name: str,
        draft: TransactionDraft,
        on_sent: OnSent,
        on_error: OnError,
    ) -> TransactionProtocol:
        if not endpoint or not endpoint.strip():
            raise WorkflowError(Stage.ENDPOINT, "Node endpoint is required")

        ledger = self._step(Stage.CONNECT, self.connect, endpoint)
        keychain = self._step(Stage.KEYCHAIN, ledger.fetch_keychain, seed)
        genesis_address = self._step(
            Stage.DERIVE_ADDRESS, keychain.derive_address, service_name, 0
        )
        index = self._step(Stage.INDEX_LOOKUP, ledger.fetch_last_index, genesis_address)

        draft.version = keychain.version
        transaction = self._step(
            Stage.BUILD, keychain.build_transaction, draft, service_name, index
        )
        self._step(Stage.ORIGIN_SIGN, transaction.origin_sign, self.origin_private_key)

        sender = self._step(Stage.DISPATCH, self.sender_factory, ledger)
        self._step(
            Stage.DISPATCH,
            sender.dispatch,
            transaction,
            self.retries,
            self.timeout_ms,
            on_sent,
            on_error,
        )
        logger.with_context(service=service_name, index=index).info(
            "Dispatching %s transaction %s",
            draft.kind.value,
            transaction.address.hex(),
        )
        return transaction
