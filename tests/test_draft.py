"""Unit tests for the transaction draft and text buffers."""

import pytest

from keychain_tx.buffers import TextBuffer, default_buffers
from keychain_tx.draft import Collection, TransactionDraft, TransactionKind, UcoTransfer


@pytest.mark.unit
class TestTransactionDraft:
    def test_defaults(self):
        draft = TransactionDraft()
        assert draft.kind is TransactionKind.KEYCHAIN_ACCESS
        assert draft.version == 1
        assert all(not draft.entries(collection) for collection in Collection)

    def test_remove_bounds(self):
        draft = TransactionDraft()
        draft.add_uco_transfer(UcoTransfer(to=b"\x01" * 34, amount=1))
        assert not draft.remove(Collection.UCO_TRANSFERS, 1)
        assert not draft.remove(Collection.UCO_TRANSFERS, -1)
        assert draft.remove(Collection.UCO_TRANSFERS, 0)
        assert draft.uco_transfers == []

    def test_kind_metadata(self):
        assert TransactionKind.CODE_PROPOSAL.label == "Code Proposal"
        assert TransactionKind.TRANSFER.type_id == 253
        assert len({kind.type_id for kind in TransactionKind}) == len(TransactionKind)


@pytest.mark.unit
class TestTextBuffer:
    def test_single_line_strips_newlines(self):
        buffer = TextBuffer("To")
        buffer.set("ab\ncd")
        assert buffer.value == "abcd"

    def test_multiline(self):
        buffer = TextBuffer("Content", multiline=True)
        buffer.set("a\nb")
        assert buffer.value == "a\nb"

    def test_clear(self):
        buffer = TextBuffer("To", value="abc")
        assert buffer
        buffer.clear()
        assert not buffer

    def test_default_buffers(self):
        buffers = default_buffers()
        assert buffers["seed"].masked
        assert not buffers["secret"].masked
        assert buffers["content"].multiline and buffers["code"].multiline
        assert buffers["uco_to"].placeholder == "Address (hex)"
        assert not buffers["uco_to"]
