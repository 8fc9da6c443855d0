"""Main application entry point for the keychain transaction form."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Sequence

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical, VerticalScroll
from textual.events import DescendantFocus, Key
from textual.widget import Widget
from textual.widgets import Footer, Header, Input, Static, Tab, Tabs, TextArea

from keychain_tx.features.submit.handlers import SubmitHandlersMixin
from keychain_tx.form import KeyOutcome, TransactionForm
from keychain_tx.navigation import SECTION_FIELDS, SECTIONS, Section
from keychain_tx.render import (
    render_feedback,
    render_field_error,
    render_head,
    render_help,
    render_label,
    render_tail,
)
from keychain_tx.shared.config import FormConfig
from keychain_tx.shared.logging import LoggingConfig, setup_logging
from keychain_tx.styles import CSS

logger = logging.getLogger(__name__)

DEFAULT_SEED_ENV = "KEYCHAIN_TX_SEED"
FIELD_ID_PREFIX = "field-"


def section_key(section: Section) -> str:
    return section.name.lower().replace("_", "-")


def _tab_id(section: Section) -> str:
    return f"tab-{section_key(section)}"


_SECTION_BY_TAB = {_tab_id(section): section for section in SECTIONS}


def _field_name(widget: Widget | None) -> str | None:
    if widget is None or not widget.id or not widget.id.startswith(FIELD_ID_PREFIX):
        return None
    return widget.id[len(FIELD_ID_PREFIX):]


class TransactionFormApp(SubmitHandlersMixin, App):
    CSS = CSS
    TITLE = "Archethic Keychain Transaction"

    BINDINGS = [
        Binding("tab,right", "next_section", "Next section", priority=True),
        Binding("shift+tab,left", "previous_section", "Previous section", priority=True),
        Binding("up", "cursor('up')", "Up", show=False, priority=True),
        Binding("down", "cursor('down')", "Down", show=False, priority=True),
        Binding("enter", "activate", "Select", priority=True),
        Binding("escape", "back", "Back", priority=True),
        Binding("ctrl+c", "quit", "Quit", priority=True),
    ]

    def __init__(
        self,
        config: FormConfig | None = None,
        service_name: str = "",
        seed: str = "",
        endpoint: str = "",
        form: TransactionForm | None = None,
    ):
        super().__init__()
        self.form = form or TransactionForm(config)
        self.form.on_result_posted = self._post_workflow_finished
        self.form.initialize(service_name=service_name, seed=seed, endpoint=endpoint)

    def _build_field(self, name: str) -> Widget:
        buffer = self.form.buffers[name]
        field_id = f"{FIELD_ID_PREFIX}{name}"
        if buffer.multiline:
            return TextArea(buffer.value, id=field_id, classes="input-field")
        return Input(
            value=buffer.value,
            placeholder=buffer.placeholder,
            password=buffer.masked,
            id=field_id,
            classes="input-field",
        )

    def compose(self) -> ComposeResult:
        yield Header()
        self.tabs = Tabs(
            *(Tab(section.label, id=_tab_id(section)) for section in SECTIONS),
            id="section-tabs",
        )
        # Keyboard focus always belongs to the form's cursor.
        self.tabs.can_focus = False
        yield self.tabs

        with VerticalScroll(id="form-body"):
            for section in SECTIONS:
                key = section_key(section)
                with Vertical(id=f"section-{key}", classes="section"):
                    yield Static(id=f"head-{key}", classes="section-head")
                    for name in SECTION_FIELDS[section]:
                        with Vertical(id=f"row-{name}", classes="field-row"):
                            yield Static(id=f"label-{name}", classes="field-label")
                            yield self._build_field(name)
                            yield Static(id=f"error-{name}", classes="field-error")
                    yield Static(id=f"tail-{key}", classes="section-tail")

        yield Static(id="feedback")
        yield Static(id="help")
        yield Footer()

    def on_mount(self) -> None:
        self.refresh_view()

    def _sync_fields(self) -> None:
        for name, buffer in self.form.buffers.items():
            widget = self.query_one(f"#{FIELD_ID_PREFIX}{name}")
            if isinstance(widget, TextArea):
                if widget.text != buffer.value:
                    widget.load_text(buffer.value)
            elif isinstance(widget, Input) and widget.value != buffer.value:
                widget.value = buffer.value

            self.query_one(f"#label-{name}", Static).update(render_label(self.form, name))
            self.query_one(f"#error-{name}", Static).update(
                render_field_error(self.form, name)
            )

    def _sync_focus(self) -> None:
        name = self.form.focused_field
        if name is None:
            if self.focused is not None:
                self.set_focus(None)
            return
        widget = self.query_one(f"#{FIELD_ID_PREFIX}{name}")
        if self.focused is not widget:
            widget.focus()

    def refresh_view(self) -> None:
        form = self.form
        self.tabs.active = _tab_id(form.section)

        for section in SECTIONS:
            self.query_one(f"#section-{section_key(section)}").display = (
                section is form.section
            )
        for name in SECTION_FIELDS[Section.MAIN]:
            self.query_one(f"#row-{name}").display = not form.service_mode

        key = section_key(form.section)
        self.query_one(f"#head-{key}", Static).update(render_head(form))
        self.query_one(f"#tail-{key}", Static).update(render_tail(form))
        self._sync_fields()
        self.query_one("#feedback", Static).update(render_feedback(form))
        self.query_one("#help", Static).update(render_help())
        self._sync_focus()

    def _route(self, key: str) -> KeyOutcome:
        outcome = self.form.handle_key(key)
        if outcome is KeyOutcome.BACK:
            self.exit(result="back")
        elif outcome is KeyOutcome.QUIT:
            self.exit(result="quit")
        elif outcome is KeyOutcome.HANDLED:
            self.refresh_view()
        return outcome

    def _field_changed(self, widget: Widget, value: str) -> None:
        name = _field_name(widget)
        if name is not None and self.form.set_field(name, value):
            self.refresh_view()

    def on_input_changed(self, event: Input.Changed) -> None:
        self._field_changed(event.input, event.value)

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        self._field_changed(event.text_area, event.text_area.text)

    def on_tabs_tab_activated(self, event: Tabs.TabActivated) -> None:
        """Handle a tab picked with the mouse."""
        if not event.tab or event.tab.id != self.tabs.active:
            return
        section = _SECTION_BY_TAB.get(event.tab.id)
        if section is not None and self.form.select_section(section):
            logger.debug("Switched to section %s", section.label)
            self.refresh_view()

    def on_descendant_focus(self, event: DescendantFocus) -> None:
        name = _field_name(self.focused)
        if name is not None and self.form.focus_field(name):
            self.refresh_view()

    def action_next_section(self) -> None:
        self._route("tab")

    def action_previous_section(self) -> None:
        self._route("shift+tab")

    def action_cursor(self, direction: str) -> None:
        self._route(direction)

    def action_activate(self) -> None:
        name = self.form.focused_field
        if name is not None and self.form.buffers[name].multiline:
            self.query_one(f"#{FIELD_ID_PREFIX}{name}", TextArea).insert("\n")
            return
        self._route("enter")

    def action_back(self) -> None:
        self._route("escape")

    def action_quit(self) -> None:
        self._route("ctrl+c")

    def on_key(self, event: Key) -> None:
        # Keys typed into a focused input never get here.
        if self.form.focused_field is not None:
            return
        if self._route(event.key) is KeyOutcome.HANDLED:
            event.stop()
            event.prevent_default()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="keychain-tx",
        description="Compose and send a transaction from an Archethic keychain.",
    )
    parser.add_argument(
        "--service",
        default="",
        help="Keychain service to send from (hides endpoint and seed inputs)",
    )
    parser.add_argument("--endpoint", default="", help="Node endpoint URL")
    parser.add_argument(
        "--seed-env",
        default=DEFAULT_SEED_ENV,
        help="Environment variable holding the access seed (default: %(default)s)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the application."""
    args = build_parser().parse_args(argv)

    setup_logging(LoggingConfig.from_environment())
    config = FormConfig.load()

    if args.service and not args.endpoint:
        logger.warning("Service mode without --endpoint; submit will fail")

    app = TransactionFormApp(
        config=config,
        service_name=args.service,
        seed=os.getenv(args.seed_env, ""),
        endpoint=args.endpoint,
    )
    result = app.run()
    logger.info("Form closed with result %s", result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
