"""Focus navigation over the per-section virtual field space.

Every section lays its addressable positions out as an ordered list of
regions. A cursor is only ever interpreted through :func:`resolve`, which turns
it into an :class:`Address` naming the region and the offset inside it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from keychain_tx.draft import TransactionKind


class Section(Enum):
    MAIN = "Main"
    UCO_TRANSFERS = "UCO Transfers"
    TOKEN_TRANSFERS = "Token Transfers"
    RECIPIENTS = "Recipients"
    OWNERSHIPS = "Ownerships"
    CONTENT = "Content"

    @property
    def label(self) -> str:
        return self.value


SECTIONS: tuple[Section, ...] = tuple(Section)


class Region(Enum):
    ENDPOINT_PRESET = "endpoint_preset"
    FIELD = "field"
    TRANSACTION_KIND = "transaction_kind"
    SUBMIT = "submit"
    ADD = "add"
    ENTRY = "entry"
    PENDING_KEY = "pending_key"
    ADD_AUTHORIZED_KEY = "add_authorized_key"
    LOAD_NETWORK_KEY = "load_network_key"
    COMMIT_OWNERSHIP = "commit_ownership"
    OWNERSHIP = "ownership"


@dataclass(frozen=True)
class Address:
    region: Region
    index: int = 0


@dataclass(frozen=True)
class ListSizes:
    uco_transfers: int = 0
    token_transfers: int = 0
    recipients: int = 0
    pending_keys: int = 0
    ownerships: int = 0


ENDPOINT_PRESETS: tuple[str, ...] = ("Local", "Testnet", "Mainnet", "Custom")
CUSTOM_PRESET = "Custom"
TRANSACTION_KINDS: tuple[TransactionKind, ...] = tuple(TransactionKind)

SECTION_FIELDS: dict[Section, tuple[str, ...]] = {
    Section.MAIN: ("endpoint", "seed"),
    Section.UCO_TRANSFERS: ("uco_to", "uco_amount"),
    Section.TOKEN_TRANSFERS: ("token_to", "token_amount", "token_address", "token_id"),
    Section.RECIPIENTS: ("recipient",),
    Section.OWNERSHIPS: ("secret", "authorized_key"),
    Section.CONTENT: ("content", "code"),
}

_LIST_LENGTH = {
    Section.UCO_TRANSFERS: lambda sizes: sizes.uco_transfers,
    Section.TOKEN_TRANSFERS: lambda sizes: sizes.token_transfers,
    Section.RECIPIENTS: lambda sizes: sizes.recipients,
}


def layout(
    section: Section, sizes: ListSizes, service_mode: bool = False
) -> list[tuple[Region, int]]:
    """Ordered ``(region, span)`` pairs making up the section's cursor domain."""
    field_count = len(SECTION_FIELDS[section])

    if section is Section.MAIN:
        regions = [
            (Region.TRANSACTION_KIND, len(TRANSACTION_KINDS)),
            (Region.SUBMIT, 1),
        ]
        if service_mode:
            return regions
        return [
            (Region.ENDPOINT_PRESET, len(ENDPOINT_PRESETS)),
            (Region.FIELD, field_count),
        ] + regions

    if section is Section.OWNERSHIPS:
        return [
            (Region.FIELD, field_count),
            (Region.PENDING_KEY, sizes.pending_keys),
            (Region.ADD_AUTHORIZED_KEY, 1),
            (Region.LOAD_NETWORK_KEY, 1),
            (Region.COMMIT_OWNERSHIP, 1),
            (Region.OWNERSHIP, sizes.ownerships),
        ]

    if section is Section.CONTENT:
        return [(Region.FIELD, field_count)]

    return [
        (Region.FIELD, field_count),
        (Region.ADD, 1),
        (Region.ENTRY, _LIST_LENGTH[section](sizes)),
    ]


def virtual_space(section: Section, sizes: ListSizes, service_mode: bool = False) -> int:
    return sum(span for _, span in layout(section, sizes, service_mode))


def resolve(
    section: Section, cursor: int, sizes: ListSizes, service_mode: bool = False
) -> Address | None:
    if cursor < 0:
        return None
    start = 0
    for region, span in layout(section, sizes, service_mode):
        if cursor < start + span:
            return Address(region, cursor - start)
        start += span
    return None


def position_of(
    section: Section, address: Address, sizes: ListSizes, service_mode: bool = False
) -> int | None:
    start = 0
    for region, span in layout(section, sizes, service_mode):
        if region is address.region:
            if 0 <= address.index < span:
                return start + address.index
            return None
        start += span
    return None


def move(cursor: int, delta: int, size: int) -> int:
    if size <= 0:
        return 0
    return (cursor + delta) % size


def clamp(cursor: int, size: int) -> int:
    if size <= 0:
        return 0
    return min(max(cursor, 0), size - 1)
