"""The transaction form: section/cursor state, key handling and submission.

The form owns the draft, the text buffers and the cursor. Text is edited in
Textual widgets which report every change through :meth:`TransactionForm.set_field`;
the form decides which of them holds focus through :attr:`focused_field`.
Key handling runs on the UI thread. The only state touched from another thread is the result
queue, which the dispatch callbacks feed through :meth:`post_result` and the
UI drains with :meth:`drain_results`.
"""

from __future__ import annotations

import logging
import queue
from enum import Enum
from typing import Callable

from keychain_tx.buffers import TextBuffer, default_buffers
from keychain_tx.draft import Collection, TransactionDraft, TransactionKind
from keychain_tx.features.ledger.service import EntryResult, LedgerService
from keychain_tx.features.ownership.service import OwnershipService
from keychain_tx.features.submit.service import (
    SubmitWorkflow,
    WorkflowError,
    WorkflowResult,
)
from keychain_tx.navigation import (
    CUSTOM_PRESET,
    ENDPOINT_PRESETS,
    SECTION_FIELDS,
    SECTIONS,
    TRANSACTION_KINDS,
    Address,
    ListSizes,
    Region,
    Section,
    clamp,
    move,
    position_of,
    resolve,
    virtual_space,
)
from keychain_tx.shared import crypto
from keychain_tx.shared.config import FormConfig
from keychain_tx.shared.protocols import LedgerClientProtocol

logger = logging.getLogger(__name__)


class KeyOutcome(Enum):
    HANDLED = "handled"
    IGNORED = "ignored"
    BACK = "back"
    QUIT = "quit"


_ENTRY_COLLECTIONS = {
    Section.UCO_TRANSFERS: Collection.UCO_TRANSFERS,
    Section.TOKEN_TRANSFERS: Collection.TOKEN_TRANSFERS,
    Section.RECIPIENTS: Collection.RECIPIENTS,
}

_DELETABLE_REGIONS = (Region.ENTRY, Region.PENDING_KEY, Region.OWNERSHIP)

_NEXT_SECTION_KEYS = ("tab", "right")
_PREVIOUS_SECTION_KEYS = ("shift+tab", "left")
_BACK_KEYS = ("escape", "esc")


class TransactionForm:
    def __init__(
        self,
        config: FormConfig | None = None,
        connect: Callable[[str], LedgerClientProtocol] | None = None,
        workflow: SubmitWorkflow | None = None,
        secret_key: bytes | None = None,
        on_result_posted: Callable[[], None] | None = None,
    ):
        self.config = config or FormConfig()
        self.workflow = workflow or SubmitWorkflow.from_config(self.config)
        self.connect = connect or self.workflow.connect

        self.buffers: dict[str, TextBuffer] = default_buffers()
        self.draft = TransactionDraft()
        self.ledger = LedgerService(self.draft, self.buffers)
        self.ownership = OwnershipService(
            self.draft,
            self.buffers,
            secret_key or crypto.generate_secret_key(),
            network_key_loader=self._load_network_key,
        )

        self.section = Section.MAIN
        self.cursor = 0
        self.service_name = ""
        self.endpoint_preset: str | None = None
        self.field_errors: dict[str, str] = {}
        self.feedback = ""
        self.feedback_is_error = False
        self.dispatch_pending = False
        self.on_result_posted = on_result_posted
        self._results: queue.SimpleQueue[WorkflowResult] = queue.SimpleQueue()

    def initialize(self, service_name: str = "", seed: str = "", endpoint: str = "") -> None:
        self.service_name = service_name
        self.buffers["seed"].set(seed)
        self.buffers["endpoint"].set(endpoint)
        self.endpoint_preset = next(
            (
                name
                for name in ENDPOINT_PRESETS
                if endpoint and self.config.endpoint_presets.get(name) == endpoint
            ),
            None,
        )
        self.section = Section.MAIN
        self.cursor = 0
        logger.info(
            "Form initialized%s",
            f" for service {service_name}" if service_name else "",
        )

    # State queries

    @property
    def service_mode(self) -> bool:
        return bool(self.service_name)

    @property
    def sizes(self) -> ListSizes:
        return ListSizes(
            uco_transfers=len(self.draft.uco_transfers),
            token_transfers=len(self.draft.token_transfers),
            recipients=len(self.draft.recipients),
            pending_keys=len(self.ownership.pending_keys),
            ownerships=len(self.draft.ownerships),
        )

    @property
    def virtual_space(self) -> int:
        return virtual_space(self.section, self.sizes, self.service_mode)

    @property
    def address(self) -> Address | None:
        return resolve(self.section, self.cursor, self.sizes, self.service_mode)

    @property
    def focused_field(self) -> str | None:
        address = self.address
        if address is None or address.region is not Region.FIELD:
            return None
        return SECTION_FIELDS[self.section][address.index]

    def is_focused(self, address: Address) -> bool:
        return self.address == address

    def _reclamp(self) -> None:
        self.cursor = clamp(self.cursor, self.virtual_space)

    def _focus(self, address: Address) -> None:
        position = position_of(self.section, address, self.sizes, self.service_mode)
        if position is not None:
            self.cursor = position

    def _set_feedback(self, message: str, is_error: bool = False) -> None:
        self.feedback = message
        self.feedback_is_error = is_error

    # Navigation

    def _switch_section(self, step: int) -> None:
        index = SECTIONS.index(self.section)
        target = min(max(index + step, 0), len(SECTIONS) - 1)
        self.select_section(SECTIONS[target])

    def select_section(self, section: Section) -> bool:
        if section is self.section:
            return False
        self.section = section
        self.cursor = 0
        return True

    def next_section(self) -> None:
        self._switch_section(1)

    def previous_section(self) -> None:
        self._switch_section(-1)

    def move_cursor(self, delta: int) -> None:
        self.cursor = move(self.cursor, delta, self.virtual_space)

    # Activation

    def select_preset(self, name: str) -> None:
        if name != CUSTOM_PRESET:
            self.buffers["endpoint"].set(self.config.endpoint_presets.get(name, ""))
        self.endpoint_preset = name
        self._focus(Address(Region.FIELD, 0))

    def select_kind(self, kind: TransactionKind) -> None:
        self.draft.kind = kind
        self._focus(Address(Region.SUBMIT))

    def _apply_entry_result(self, result: EntryResult) -> EntryResult:
        for name in SECTION_FIELDS[self.section]:
            self.field_errors.pop(name, None)
        for error in result.errors:
            self.field_errors.setdefault(error.field, error.message)
        return result

    def _add_entry(self) -> EntryResult | None:
        adders = {
            Section.UCO_TRANSFERS: self.ledger.add_uco_transfer,
            Section.TOKEN_TRANSFERS: self.ledger.add_token_transfer,
            Section.RECIPIENTS: self.ledger.add_recipient,
        }
        adder = adders.get(self.section)
        if adder is None:
            return None
        return self._apply_entry_result(adder())

    def activate(self) -> None:
        address = self.address
        if address is None:
            self._reclamp()
            return

        region = address.region
        if region is Region.ENDPOINT_PRESET:
            self.select_preset(ENDPOINT_PRESETS[address.index])
        elif region is Region.TRANSACTION_KIND:
            self.select_kind(TRANSACTION_KINDS[address.index])
        elif region is Region.SUBMIT:
            self.submit()
        elif region is Region.ADD:
            self._add_entry()
        elif region is Region.FIELD:
            if self.section is Section.RECIPIENTS:
                self._add_entry()
            elif self.section is Section.CONTENT:
                self.insert_newline()
        elif region is Region.ADD_AUTHORIZED_KEY:
            self.ownership.add_authorized_key()
        elif region is Region.LOAD_NETWORK_KEY:
            self.load_network_public_key()
        elif region is Region.COMMIT_OWNERSHIP:
            self._apply_entry_result(self.ownership.commit_ownership())

        self._reclamp()

    def delete(self) -> bool:
        address = self.address
        if address is None or address.region not in _DELETABLE_REGIONS:
            return False

        if address.region is Region.ENTRY:
            removed = self.ledger.delete_entry(
                _ENTRY_COLLECTIONS[self.section], address.index
            )
        elif address.region is Region.PENDING_KEY:
            removed = self.ownership.remove_pending_key(address.index)
        else:
            removed = self.ownership.delete_ownership(address.index)

        if removed:
            self.cursor -= 1
        self._reclamp()
        return removed

    # Text editing

    def set_field(self, name: str, value: str) -> bool:
        """Store the value a widget reports for ``name``; False when unchanged."""
        buffer = self.buffers[name]
        if buffer.value == value:
            return False
        buffer.set(value)
        self.field_errors.pop(name, None)
        return True

    def focus_field(self, name: str) -> bool:
        """Move the cursor onto ``name`` when it belongs to the active section."""
        fields = SECTION_FIELDS[self.section]
        if name not in fields:
            return False
        before = self.cursor
        self._focus(Address(Region.FIELD, fields.index(name)))
        return self.cursor != before

    def insert_newline(self) -> bool:
        name = self.focused_field
        if name is None or not self.buffers[name].multiline:
            return False
        return self.set_field(name, self.buffers[name].value + "\n")

    # Network-backed actions

    def _load_network_key(self) -> str:
        return self.connect(self.buffers["endpoint"].value).fetch_network_public_key()

    def load_network_public_key(self) -> None:
        try:
            self.ownership.load_network_public_key()
        except Exception as e:
            logger.error("Failed to load storage nonce public key: %s", e)
            self._set_feedback(f"Public key error: {e}", is_error=True)
            return
        self._set_feedback("Storage nonce public key loaded")

    def submit(self) -> None:
        if self.dispatch_pending:
            self._set_feedback("A transaction is already being sent", is_error=True)
            return

        self.draft.content = self.buffers["content"].value
        self.draft.code = self.buffers["code"].value
        service_name = self.service_name or self.config.default_service_name

        try:
            transaction = self.workflow.run(
                self.buffers["endpoint"].value,
                self.buffers["seed"].value,
                service_name,
                self.draft,
                on_sent=self._on_sent,
                on_error=self._on_error,
            )
        except WorkflowError as e:
            self._set_feedback(
                WorkflowResult.failed(e.stage.value, e.message).feedback, is_error=True
            )
            return

        self.dispatch_pending = True
        self._set_feedback(f"Sending transaction {transaction.address.hex()}...")

    # Cross-thread result delivery

    def _on_sent(self, transaction_address: str) -> None:
        self.post_result(WorkflowResult.sent(transaction_address))

    def _on_error(self, stage: str, message: str) -> None:
        self.post_result(WorkflowResult.failed(stage, message))

    def post_result(self, result: WorkflowResult) -> None:
        """Queue a dispatch result. Safe to call from any thread."""
        self._results.put(result)
        if self.on_result_posted is not None:
            self.on_result_posted()

    def drain_results(self) -> list[WorkflowResult]:
        results: list[WorkflowResult] = []
        while True:
            try:
                result = self._results.get_nowait()
            except queue.Empty:
                break
            results.append(result)
            self.dispatch_pending = False
            self._set_feedback(result.feedback, is_error=not result.success)
        return results

    # Keys

    def handle_key(self, key: str) -> KeyOutcome:
        """Apply a navigation or action key.

        Printable text and editing keys belong to the focused widget and are
        reported as ignored, except ``d`` on a deletable position.
        """
        if key == "ctrl+c":
            return KeyOutcome.QUIT
        if key in _BACK_KEYS:
            return KeyOutcome.BACK

        if key in _NEXT_SECTION_KEYS:
            self.next_section()
        elif key in _PREVIOUS_SECTION_KEYS:
            self.previous_section()
        elif key == "up":
            self.move_cursor(-1)
        elif key == "down":
            self.move_cursor(1)
        elif key == "enter":
            self.activate()
        elif key == "d" and self.address is not None and (
            self.address.region in _DELETABLE_REGIONS
        ):
            self.delete()
        else:
            return KeyOutcome.IGNORED

        self._reclamp()
        return KeyOutcome.HANDLED
