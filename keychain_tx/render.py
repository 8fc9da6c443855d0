"""Rich markup rendering of the transaction form.

Text inputs are real widgets; this module renders what sits around them: the
selectable lines above the inputs (head), the buttons and lists below them
(tail), and each input's label and validation error. Rendering is a pure
function of the form state and all user supplied text is escaped.
"""

from __future__ import annotations

from dataclasses import dataclass

from rich.markup import escape

from keychain_tx.draft import Ownership, TokenTransfer, UcoTransfer
from keychain_tx.form import TransactionForm
from keychain_tx.navigation import (
    ENDPOINT_PRESETS,
    TRANSACTION_KINDS,
    Address,
    Region,
    Section,
)

HELP_TEXT = (
    "↑/↓ move • tab/shift+tab section • enter select • d delete • esc back"
)


@dataclass(frozen=True)
class Theme:
    focused: str = "#ff5fd7"
    blurred: str = "#585858"
    error: str = "red"
    success: str = "green"


DEFAULT_THEME = Theme()


def _styled(text: str, style: str) -> str:
    return f"[{style}]{escape(text)}[/]"


def _option(form: TransactionForm, address: Address, label: str, selected: bool, theme: Theme) -> str:
    marker = "(•)" if selected else "( )"
    line = f"{marker} {label}"
    if form.is_focused(address):
        return _styled(f"> {line}", theme.focused)
    return escape(f"  {line}")


def _button(form: TransactionForm, address: Address, label: str, theme: Theme) -> str:
    text = f"[ {label} ]"
    if form.is_focused(address):
        return _styled(text, theme.focused)
    return _styled(text, theme.blurred)


def _entry(form: TransactionForm, region: Region, index: int, text: str, theme: Theme) -> str:
    if form.is_focused(Address(region, index)):
        return _styled(f"> {text}", theme.focused)
    return escape(f"  {text}")


def describe_uco_transfer(transfer: UcoTransfer) -> str:
    return f"{transfer.to.hex()}: {transfer.amount}"


def describe_token_transfer(transfer: TokenTransfer) -> str:
    return (
        f"{transfer.to.hex()}: {transfer.amount} - "
        f"{transfer.token_address.hex()} #{transfer.token_id}"
    )


def describe_ownership(ownership: Ownership) -> str:
    keys = ", ".join(key.public_key.hex() for key in ownership.authorized_keys)
    return f"**** ({keys})"


def _render_main_head(form: TransactionForm, theme: Theme) -> list[str]:
    if form.service_mode:
        return [escape(f"Creating transaction for service {form.service_name}")]

    lines = [_styled("Node endpoint", "bold")]
    for i, name in enumerate(ENDPOINT_PRESETS):
        lines.append(
            _option(
                form,
                Address(Region.ENDPOINT_PRESET, i),
                name,
                form.endpoint_preset == name,
                theme,
            )
        )
    return lines


def _render_main_tail(form: TransactionForm, theme: Theme) -> list[str]:
    lines = [_styled("Transaction type", "bold")]
    for i, kind in enumerate(TRANSACTION_KINDS):
        lines.append(
            _option(
                form,
                Address(Region.TRANSACTION_KIND, i),
                kind.label,
                form.draft.kind is kind,
                theme,
            )
        )
    lines.append("")
    lines.append(_button(form, Address(Region.SUBMIT), "Send", theme))
    return lines


def _render_list_tail(form: TransactionForm, theme: Theme) -> list[str]:
    lines = [_button(form, Address(Region.ADD), "Add", theme)]

    if form.section is Section.UCO_TRANSFERS:
        texts = [describe_uco_transfer(t) for t in form.draft.uco_transfers]
    elif form.section is Section.TOKEN_TRANSFERS:
        texts = [describe_token_transfer(t) for t in form.draft.token_transfers]
    else:
        texts = [recipient.hex() for recipient in form.draft.recipients]

    if texts:
        lines.append("")
    for i, text in enumerate(texts):
        lines.append(_entry(form, Region.ENTRY, i, text, theme))
    return lines


def _render_ownerships_tail(form: TransactionForm, theme: Theme) -> list[str]:
    lines: list[str] = []
    if form.ownership.pending_keys:
        lines.append(escape("List of authorized keys to add:"))
        for i, key in enumerate(form.ownership.pending_keys):
            lines.append(_entry(form, Region.PENDING_KEY, i, key, theme))
        lines.append("")

    lines.append(
        _button(form, Address(Region.ADD_AUTHORIZED_KEY), "Add authorization key", theme)
    )
    lines.append(
        _button(
            form,
            Address(Region.LOAD_NETWORK_KEY),
            "Load Storage Nonce Public Key",
            theme,
        )
    )
    lines.append(_button(form, Address(Region.COMMIT_OWNERSHIP), "Add", theme))

    if form.draft.ownerships:
        lines.append("")
    for i, ownership in enumerate(form.draft.ownerships):
        lines.append(
            _entry(form, Region.OWNERSHIP, i, describe_ownership(ownership), theme)
        )
    return lines


def render_head(form: TransactionForm, theme: Theme = DEFAULT_THEME) -> str:
    """Lines shown above the section's inputs."""
    if form.section is Section.MAIN:
        return "\n".join(_render_main_head(form, theme))
    return ""


def render_tail(form: TransactionForm, theme: Theme = DEFAULT_THEME) -> str:
    """Buttons and committed lists shown below the section's inputs."""
    if form.section is Section.MAIN:
        lines = _render_main_tail(form, theme)
    elif form.section is Section.OWNERSHIPS:
        lines = _render_ownerships_tail(form, theme)
    elif form.section is Section.CONTENT:
        lines = []
    else:
        lines = _render_list_tail(form, theme)
    return "\n".join(lines)


def render_label(form: TransactionForm, name: str, theme: Theme = DEFAULT_THEME) -> str:
    prompt = form.buffers[name].prompt
    if form.focused_field == name:
        return _styled(f"> {prompt}:", theme.focused)
    return escape(f"  {prompt}:")


def render_field_error(form: TransactionForm, name: str, theme: Theme = DEFAULT_THEME) -> str:
    error = form.field_errors.get(name)
    if not error:
        return ""
    return _styled(f"⚠ {error}", theme.error)


def render_feedback(form: TransactionForm, theme: Theme = DEFAULT_THEME) -> str:
    if not form.feedback:
        return ""
    style = theme.error if form.feedback_is_error else theme.success
    return _styled(form.feedback, style)


def render_help(theme: Theme = DEFAULT_THEME) -> str:
    return _styled(HELP_TEXT, theme.blurred)
