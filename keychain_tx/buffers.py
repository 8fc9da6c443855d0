"""Values behind the form's text prompts.

Editing happens in the Textual ``Input``/``TextArea`` widgets; the form keeps
the last value each widget reported so that validation and submission never
reach into the widget tree.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class TextBuffer:
    prompt: str
    value: str = ""
    masked: bool = False
    multiline: bool = False
    placeholder: str = ""

    def set(self, value: str) -> None:
        if not self.multiline:
            value = value.replace("\n", "")
        self.value = value

    def clear(self) -> None:
        self.value = ""

    def __bool__(self) -> bool:
        return bool(self.value)


def default_buffers() -> dict[str, TextBuffer]:
    return {
        "endpoint": TextBuffer("Node endpoint", placeholder="https://..."),
        "seed": TextBuffer("Access seed", masked=True),
        "uco_to": TextBuffer("To", placeholder="Address (hex)"),
        "uco_amount": TextBuffer("Amount", placeholder="Amount"),
        "token_to": TextBuffer("To", placeholder="Address (hex)"),
        "token_amount": TextBuffer("Amount", placeholder="Amount"),
        "token_address": TextBuffer("Token Address", placeholder="Token address (hex)"),
        "token_id": TextBuffer("Token ID", placeholder="Token ID"),
        "recipient": TextBuffer("Recipient address", placeholder="Address (hex)"),
        "secret": TextBuffer("Secret"),
        "authorized_key": TextBuffer("Authorization key", placeholder="Public key (hex)"),
        "content": TextBuffer("Content", multiline=True),
        "code": TextBuffer("Code", multiline=True),
    }
