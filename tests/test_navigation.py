"""Unit tests for focus navigation over section layouts."""

import pytest

from keychain_tx.navigation import (
    ENDPOINT_PRESETS,
    SECTIONS,
    TRANSACTION_KINDS,
    Address,
    ListSizes,
    Region,
    Section,
    clamp,
    layout,
    move,
    position_of,
    resolve,
    virtual_space,
)

SIZES = ListSizes(
    uco_transfers=2, token_transfers=1, recipients=3, pending_keys=2, ownerships=1
)


@pytest.mark.unit
class TestVirtualSpace:
    def test_main_section(self):
        assert virtual_space(Section.MAIN, ListSizes()) == 16

    def test_main_section_in_service_mode(self):
        assert virtual_space(Section.MAIN, ListSizes(), service_mode=True) == 10

    def test_main_section_ignores_list_sizes(self):
        assert virtual_space(Section.MAIN, SIZES) == 16

    @pytest.mark.parametrize(
        "section,expected",
        [
            (Section.UCO_TRANSFERS, 2 + 1 + 2),
            (Section.TOKEN_TRANSFERS, 4 + 1 + 1),
            (Section.RECIPIENTS, 1 + 1 + 3),
            (Section.OWNERSHIPS, 2 + 2 + 3 + 1),
            (Section.CONTENT, 2),
        ],
    )
    def test_list_sections(self, section, expected):
        assert virtual_space(section, SIZES) == expected

    def test_empty_lists(self):
        assert virtual_space(Section.UCO_TRANSFERS, ListSizes()) == 3
        assert virtual_space(Section.OWNERSHIPS, ListSizes()) == 5


@pytest.mark.unit
class TestResolve:
    def test_main_regions(self):
        assert resolve(Section.MAIN, 0, SIZES) == Address(Region.ENDPOINT_PRESET, 0)
        assert resolve(Section.MAIN, 3, SIZES) == Address(Region.ENDPOINT_PRESET, 3)
        assert resolve(Section.MAIN, 4, SIZES) == Address(Region.FIELD, 0)
        assert resolve(Section.MAIN, 5, SIZES) == Address(Region.FIELD, 1)
        assert resolve(Section.MAIN, 6, SIZES) == Address(Region.TRANSACTION_KIND, 0)
        assert resolve(Section.MAIN, 14, SIZES) == Address(Region.TRANSACTION_KIND, 8)
        assert resolve(Section.MAIN, 15, SIZES) == Address(Region.SUBMIT, 0)

    def test_main_regions_in_service_mode(self):
        assert resolve(Section.MAIN, 0, SIZES, service_mode=True) == Address(
            Region.TRANSACTION_KIND, 0
        )
        assert resolve(Section.MAIN, 9, SIZES, service_mode=True) == Address(
            Region.SUBMIT, 0
        )

    def test_list_section_regions(self):
        assert resolve(Section.UCO_TRANSFERS, 1, SIZES) == Address(Region.FIELD, 1)
        assert resolve(Section.UCO_TRANSFERS, 2, SIZES) == Address(Region.ADD, 0)
        assert resolve(Section.UCO_TRANSFERS, 3, SIZES) == Address(Region.ENTRY, 0)
        assert resolve(Section.UCO_TRANSFERS, 4, SIZES) == Address(Region.ENTRY, 1)

    def test_ownership_regions(self):
        expected = [
            Address(Region.FIELD, 0),
            Address(Region.FIELD, 1),
            Address(Region.PENDING_KEY, 0),
            Address(Region.PENDING_KEY, 1),
            Address(Region.ADD_AUTHORIZED_KEY, 0),
            Address(Region.LOAD_NETWORK_KEY, 0),
            Address(Region.COMMIT_OWNERSHIP, 0),
            Address(Region.OWNERSHIP, 0),
        ]
        assert [resolve(Section.OWNERSHIPS, i, SIZES) for i in range(8)] == expected

    def test_out_of_range(self):
        assert resolve(Section.CONTENT, 2, SIZES) is None
        assert resolve(Section.CONTENT, -1, SIZES) is None

    def test_position_of_inverts_resolve(self):
        for section in SECTIONS:
            for cursor in range(virtual_space(section, SIZES)):
                address = resolve(section, cursor, SIZES)
                assert position_of(section, address, SIZES) == cursor

    def test_position_of_missing_region(self):
        assert position_of(Section.CONTENT, Address(Region.ADD), SIZES) is None
        assert (
            position_of(Section.MAIN, Address(Region.FIELD, 0), SIZES, service_mode=True)
            is None
        )


@pytest.mark.unit
class TestMove:
    @pytest.mark.parametrize("section", SECTIONS)
    @pytest.mark.parametrize("service_mode", [False, True])
    def test_down_then_up_returns_to_start(self, section, service_mode):
        size = virtual_space(section, SIZES, service_mode)
        for cursor in range(size):
            assert move(move(cursor, 1, size), -1, size) == cursor

    def test_wraps_at_both_ends(self):
        assert move(15, 1, 16) == 0
        assert move(0, -1, 16) == 15

    def test_service_mode_never_visits_endpoint_or_seed(self):
        size = virtual_space(Section.MAIN, SIZES, service_mode=True)
        cursor = 0
        for _ in range(size * 2):
            cursor = move(cursor, 1, size)
            address = resolve(Section.MAIN, cursor, SIZES, service_mode=True)
            assert address.region not in (Region.ENDPOINT_PRESET, Region.FIELD)

    def test_empty_space(self):
        assert move(3, 1, 0) == 0


@pytest.mark.unit
class TestClamp:
    def test_within_range(self):
        assert clamp(3, 5) == 3

    def test_above_range(self):
        assert clamp(7, 5) == 4

    def test_below_range(self):
        assert clamp(-1, 5) == 0

    def test_layout_spans_match_constants(self):
        spans = dict(layout(Section.MAIN, SIZES))
        assert spans[Region.ENDPOINT_PRESET] == len(ENDPOINT_PRESETS)
        assert spans[Region.TRANSACTION_KIND] == len(TRANSACTION_KINDS)
