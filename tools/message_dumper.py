#!/usr/bin/env python
"""
Ocarina of Time Message Dumper
================================
Print the messages of a message table / message data file pair.

Files:
  - Message table (.tbl): 8-byte big-endian records
      uint16 id | type<<4|position | 0 | bank | uint24 offset
    one section per bank, closed by a 0xFFFD sentinel (offset = data size)
    and a 0xFFFF record
  - Message data (.bin): messages back to back, each ending in 0x02 and
    zero-padded to 4 bytes

Text is shown in shortcode form: [break], [color:red], [sfx:4807], ...

Usage:
  python message_dumper.py message_table.tbl nes_message_data_static.bin
  python message_dumper.py TBL BIN --id 0x0001           # Single message
  python message_dumper.py TBL BIN --search "Kokiri"      # Search text
  python message_dumper.py TBL BIN --stats                # Statistics
  python message_dumper.py TBL BIN --records              # Raw table records
  python message_dumper.py TBL BIN --bank 0x08            # Other section
"""

import sys
import argparse
import os
import re

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from ootmsg.constants import ENGLISH_BANK
from ootmsg.errors import MessageFormatError
from ootmsg.table import iter_records, message_spans, parse_section

TAG_NAME = re.compile(r'\[([^\]:]+)')


# =============================================================================
# LOADING
# =============================================================================

def load_files(table_path: str, data_path: str, bank: int = ENGLISH_BANK) -> tuple:
    """
    Load and parse a table/data pair.

    Returns: (entries, spans, table_bytes, data_bytes)
    """
    with open(table_path, 'rb') as f:
        table = f.read()
    with open(data_path, 'rb') as f:
        data = f.read()

    entries, sentinel = parse_section(table, data, bank)
    return entries, message_spans(entries, sentinel.offset), table, data


def find_entry(entries: list, msg_id: int) -> int:
    """Index of the first entry with msg_id, or -1."""
    for i, entry in enumerate(entries):
        if entry.id == msg_id:
            return i
    return -1


def describe(entry) -> str:
    type_name = entry.type_name or f'unknown({entry.type})'
    pos_name = entry.position_name or f'unknown({entry.position})'
    return f"type={type_name} position={pos_name} bank=0x{entry.bank:02X}"


# =============================================================================
# DISPLAY MODES
# =============================================================================

def show_all(entries: list):
    """Dump every message."""
    print(f"  Messages: {len(entries)}\n")
    for entry in entries:
        text = entry.text.replace('\n', '\\n')
        print(f"[0x{entry.id:04X}] {text}")


def show_id(entries: list, spans: list, data: bytes, msg_id: int):
    """Show one message with its raw bytes."""
    idx = find_entry(entries, msg_id)
    if idx < 0:
        print(f"Message 0x{msg_id:04X} not found")
        return

    entry = entries[idx]
    offset, length = spans[idx]
    raw = data[offset:offset + length]

    print(f"Message 0x{entry.id:04X} @ offset 0x{offset:06X} ({idx + 1} / {len(entries)}):")
    print(f"  {describe(entry)}")
    print(f"  Length: {length} bytes")
    for i in range(0, len(raw), 16):
        hex_str = ' '.join(f'{b:02X}' for b in raw[i:i + 16])
        print(f"  {offset + i:06X}: {hex_str}")
    print("  Text:")
    for line in entry.text.split('\n'):
        print(f"    {line}")


def show_search(entries: list, query: str):
    """Search for messages containing the query text."""
    query_lower = query.lower()
    matches = 0

    for entry in entries:
        if query_lower in entry.text.lower():
            print(entry.label())
            matches += 1

    print(f"\n  Found {matches} matches for '{query}'")


def show_stats(entries: list, spans: list, data: bytes, bank: int):
    """Show section statistics."""
    lengths = [length for _offset, length in spans]
    total = sum(lengths)
    types = {}
    tags = {}
    for entry in entries:
        name = entry.type_name or f'unknown({entry.type})'
        types[name] = types.get(name, 0) + 1
        for tag in TAG_NAME.findall(entry.text):
            tags[tag] = tags.get(tag, 0) + 1

    print(f"=== Message Section Statistics ===")
    print(f"  Bank:              0x{bank:02X}")
    print(f"  Messages:          {len(entries)}")
    print(f"  Data size:         {len(data):,} bytes")
    print(f"  Section bytes:     {total:,}")
    if lengths:
        print(f"  Avg message len:   {total / len(lengths):.1f}")
        print(f"  Min message len:   {min(lengths)}")
        print(f"  Max message len:   {max(lengths)}")
    print(f"  Box types:")
    for name, count in sorted(types.items(), key=lambda kv: -kv[1]):
        print(f"    {name:<18} {count}")
    if tags:
        print(f"  Most used tags:")
        for name, count in sorted(tags.items(), key=lambda kv: -kv[1])[:10]:
            print(f"    {name:<18} {count}")


def show_records(table: bytes):
    """List every record of the table, all banks included."""
    for pos, entry in iter_records(table):
        print(f"  {pos:06X}: id=0x{entry.id:04X} type={entry.type} "
              f"position={entry.position} bank=0x{entry.bank:02X} "
              f"offset=0x{entry.offset:06X}")
    if len(table) % 8:
        print(f"  {len(table) % 8} trailing byte(s) ignored")


# =============================================================================
# MAIN
# =============================================================================

def main():
    p = argparse.ArgumentParser(
        description='Ocarina of Time Message Dumper',
        formatter_class=argparse.RawDescriptionHelpFormatter)
    p.add_argument('table', help='Message table file (.tbl)')
    p.add_argument('data', help='Message data file (.bin)')
    p.add_argument('--bank', type=lambda x: int(x, 0), default=ENGLISH_BANK,
                   metavar='N', help='Section bank byte (default: 0x07, English)')
    p.add_argument('--id', type=lambda x: int(x, 0), default=None, metavar='N',
                   help='Show a single message (decimal or 0x hex)')
    p.add_argument('--search', type=str, default=None, metavar='TEXT',
                   help='Search for messages containing TEXT')
    p.add_argument('--stats', action='store_true',
                   help='Show statistics')
    p.add_argument('--records', action='store_true',
                   help='List raw table records')
    args = p.parse_args()

    if args.records:
        with open(args.table, 'rb') as f:
            show_records(f.read())
        return

    try:
        entries, spans, _table, data = load_files(args.table, args.data, args.bank)
    except MessageFormatError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"  Loaded: {len(entries)} messages, {len(data):,} bytes of message data\n")

    if args.id is not None:
        show_id(entries, spans, data, args.id)
    elif args.search is not None:
        show_search(entries, args.search)
    elif args.stats:
        show_stats(entries, spans, data, args.bank)
    else:
        show_all(entries)


if __name__ == '__main__':
    main()
