"""Submit event handlers for the keychain transaction TUI."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rich.markup import escape
from textual.message import Message

from keychain_tx.features.submit.service import WorkflowResult
from keychain_tx.shared.logging import format_error_for_user

if TYPE_CHECKING:
    from keychain_tx.__main__ import TransactionFormApp

logger = logging.getLogger(__name__)


class WorkflowFinished(Message):
    """Posted from the dispatch thread once a result is queued on the form."""


class SubmitHandlersMixin:
    """Mixin class providing dispatch result handling for TransactionFormApp."""

    def _post_workflow_finished(self: "TransactionFormApp") -> None:
        # Called from the dispatch thread; post_message is thread-safe.
        self.post_message(WorkflowFinished())

    def _announce_result(self: "TransactionFormApp", result: WorkflowResult) -> None:
        if result.success:
            logger.info("Transaction %s sent", result.transaction_address)
            self.notify(
                escape(f"Transaction {result.transaction_address} sent"),
                title="Transaction sent",
            )
        else:
            logger.error(
                "Transaction failed at %s: %s", result.stage, result.message
            )
            self.notify(
                escape(f"{result.feedback}\n{format_error_for_user(result.message)}"),
                title="Transaction error",
                severity="error",
            )

    def on_workflow_finished(self: "TransactionFormApp", message: WorkflowFinished) -> None:
        for result in self.form.drain_results():
            self._announce_result(result)
        self.refresh_view()
