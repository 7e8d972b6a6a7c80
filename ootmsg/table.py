"""
ootmsg: Message table reader/writer.

The message table is a list of 8-byte records (see constants.RECORD_SIZE)
holding one language section after another. A section runs from its first
record with the wanted bank byte to a 0xFFFD sentinel whose offset is the
size of the message data; the table closes with a 0xFFFF record.

Message lengths are not stored: each message runs up to the next record's
offset (the sentinel's, for the last one).
"""

import struct
from dataclasses import dataclass, replace

from .codec import decode_message, encode_message
from .constants import (
    RECORD_SIZE, SENTINEL_ID, TERMINATOR_ID, ENGLISH_BANK, MAX_OFFSET,
    box_type_name, box_position_name,
)
from .errors import MessageFormatError, MalformedTable

LABEL_PREVIEW = 30


@dataclass
class MessageEntry:
    """One message table record plus its decoded text."""

    id: int
    type: int
    position: int
    bank: int
    offset: int
    text: str = ''

    @property
    def type_name(self):
        return box_type_name(self.type)

    @property
    def position_name(self):
        return box_position_name(self.position)

    def label(self) -> str:
        """List label: hex id and a one-line preview of the text."""
        snippet = self.text.replace('\n', ' ')
        if len(snippet) > LABEL_PREVIEW:
            snippet = snippet[:LABEL_PREVIEW] + '...'
        return f"0x{self.id:04x}  {snippet}"


# =============================================================================
# RECORDS
# =============================================================================

def unpack_record(data: bytes, pos: int) -> MessageEntry:
    """Decode the 8-byte record at pos (text left empty)."""
    if pos + RECORD_SIZE > len(data):
        raise MalformedTable(
            f"table truncated: record at 0x{pos:X} needs {RECORD_SIZE} bytes, "
            f"{len(data) - pos} left")
    msg_id, layout, _reserved, bank = struct.unpack_from('>HBBB', data, pos)
    offset = int.from_bytes(data[pos + 5:pos + 8], 'big')
    return MessageEntry(msg_id, layout >> 4, layout & 0x0F, bank, offset)


def pack_record(msg_id: int, box_type: int, position: int, bank: int,
                offset: int) -> bytes:
    """Encode one 8-byte record."""
    if not 0 <= msg_id <= 0xFFFF:
        raise MalformedTable(f"message id {msg_id:#x} does not fit in 16 bits")
    if not (0 <= box_type <= 0x0F and 0 <= position <= 0x0F):
        raise MalformedTable(
            f"message 0x{msg_id:04X}: type {box_type} / position {position} "
            f"do not fit in 4 bits")
    if not 0 <= bank <= 0xFF:
        raise MalformedTable(f"message 0x{msg_id:04X}: bank {bank:#x} out of range")
    if not 0 <= offset <= MAX_OFFSET:
        raise MalformedTable(
            f"message 0x{msg_id:04X}: offset 0x{offset:X} does not fit in 24 bits")
    return (struct.pack('>HBBB', msg_id, (box_type << 4) | position, 0, bank)
            + offset.to_bytes(3, 'big'))


def iter_records(table: bytes):
    """Yield (position, entry) for every whole record in the table."""
    for pos in range(0, len(table) - RECORD_SIZE + 1, RECORD_SIZE):
        yield pos, unpack_record(table, pos)


# =============================================================================
# PARSE (table + data -> entries)
# =============================================================================

def find_section(table: bytes, bank: int = ENGLISH_BANK) -> int:
    """Return the position of the first record whose bank byte matches."""
    for pos in range(0, len(table), RECORD_SIZE):
        if pos + 4 < len(table) and table[pos + 4] == bank:
            return pos
    raise MalformedTable(f"no record with bank 0x{bank:02X} in table "
                         f"({len(table)} bytes)")


def read_section(table: bytes, bank: int = ENGLISH_BANK) -> tuple:
    """
    Read the records of one language section.

    Returns: (entries, sentinel) where entries excludes the 0xFFFD sentinel.
    """
    pos = find_section(table, bank)
    entries = []

    while pos < len(table):
        entry = unpack_record(table, pos)
        pos += RECORD_SIZE
        if entry.id == SENTINEL_ID:
            return entries, entry
        entries.append(entry)

    raise MalformedTable(
        f"bank 0x{bank:02X} section has no 0x{SENTINEL_ID:04X} sentinel "
        f"({len(entries)} records read)")


def message_spans(entries: list, end_offset: int) -> list:
    """
    Compute (offset, length) of each message.

    Raises:
        MalformedTable: If an offset is below the previous one
    """
    offsets = [entry.offset for entry in entries] + [end_offset]
    spans = []
    for i, entry in enumerate(entries):
        length = offsets[i + 1] - offsets[i]
        if length < 0:
            raise MalformedTable(
                f"message 0x{entry.id:04X}: offset 0x{offsets[i]:06X} is past "
                f"the next offset 0x{offsets[i + 1]:06X}")
        spans.append((offsets[i], length))
    return spans


def parse_section(table: bytes, messages: bytes, bank: int = ENGLISH_BANK) -> tuple:
    """
    Like parse_table, but also return the section's 0xFFFD sentinel.

    Returns: (entries, sentinel)
    """
    entries, sentinel = read_section(table, bank)

    for entry, (offset, length) in zip(entries, message_spans(entries, sentinel.offset)):
        try:
            entry.text = decode_message(messages, offset, length)
        except MessageFormatError as err:
            err.args = (f"message 0x{entry.id:04X}: {err}",)
            raise

    return entries, sentinel


def parse_table(table: bytes, messages: bytes, bank: int = ENGLISH_BANK) -> list:
    """
    Parse a message table and decode the text of every message in a section.

    Args:
        table:    Message table file contents
        messages: Message data file contents
        bank:     Section to load (0x07 = English)

    Returns:
        List of MessageEntry in table order, without the sentinel

    Raises:
        MalformedTable: If the table is truncated, has no section for bank,
            lacks the sentinel or has decreasing offsets
        TruncatedMessage: If a message's commands run past its end
    """
    entries, _sentinel = parse_section(table, messages, bank)
    return entries


# =============================================================================
# BUILD (entries -> table + data)
# =============================================================================

def layout_messages(entries: list) -> tuple:
    """
    Encode every message back to back.

    Returns: (offsets, message_data)
    """
    data = bytearray()
    offsets = []

    for entry in entries:
        offsets.append(len(data))
        try:
            data.extend(encode_message(entry.text))
        except MessageFormatError as err:
            err.args = (f"message 0x{entry.id:04X}: {err}",)
            raise

    if len(data) > MAX_OFFSET:
        raise MalformedTable(
            f"message data is 0x{len(data):X} bytes, offsets are limited to 24 bits")
    return offsets, bytes(data)


def build_files(entries: list) -> tuple:
    """
    Re-encode all entries and rebuild the table.

    Entries keep their order and their stored offset fields are left
    untouched; the written records carry the recomputed offsets. The
    sentinel is always written with the English bank byte, whatever the
    banks of the entries.

    Returns: (table_bytes, message_bytes)
    """
    offsets, data = layout_messages(entries)

    table = bytearray()
    for entry, offset in zip(entries, offsets):
        table.extend(pack_record(entry.id, entry.type, entry.position,
                                 entry.bank, offset))
    table.extend(pack_record(SENTINEL_ID, 0, 0, ENGLISH_BANK, len(data)))
    table.extend(pack_record(TERMINATOR_ID, 0, 0, 0, 0))

    return bytes(table), data


def relocate(entries: list) -> list:
    """Return copies of entries carrying the offsets build_files writes."""
    offsets, _data = layout_messages(entries)
    return [replace(entry, offset=offset) for entry, offset in zip(entries, offsets)]
