#!/usr/bin/env python
"""
Ocarina of Time Message Editor
================================
Edit a message table / message data file pair and write it back.

Saving re-encodes every message of the section, recomputes all offsets and
writes a new table holding only that section, closed by the 0xFFFD sentinel
(offset = data size) and the 0xFFFF record.

Message text uses shortcode tags ([break], [color:red], [sfx:4807], ...).
On the command line "\\n" stands for a line break.

Usage:
  python message_editor.py TBL BIN --set-text "0x0001=Hey\\n[break]"
  python message_editor.py TBL BIN --set 0x0001 type=wood position=bottom
  python message_editor.py TBL BIN --export messages.json       # Script out
  python message_editor.py TBL BIN --import messages.json       # Script in
  python message_editor.py TBL BIN --set-text ... --out-table NEW.tbl --out-data NEW.bin
  python message_editor.py TBL BIN --verify                     # Rebuild roundtrip

Offline workflow:
  1. python message_editor.py TBL BIN --export messages.json
  2. edit messages.json ("text" is shown with [break] on its own line)
  3. python message_editor.py TBL BIN --import messages.json --out-table NEW.tbl --out-data NEW.bin
"""

import sys
import argparse
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from ootmsg.constants import ENGLISH_BANK, BOX_TYPES, BOX_POSITIONS
from ootmsg.script import dump_script, load_script
from ootmsg.table import build_files, parse_table


# =============================================================================
# EDITS
# =============================================================================

def parse_value(s: str, names: tuple) -> int:
    """Parse a box type/position given by name or number."""
    s = s.strip()
    if s.lower() in names:
        return names.index(s.lower())
    try:
        return int(s, 0)
    except ValueError:
        raise ValueError(f"bad value {s!r}, expected one of "
                         f"{', '.join(names)} or a number") from None


def parse_id(s: str) -> int:
    try:
        return int(s, 0)
    except ValueError:
        raise ValueError(f"bad message id {s!r}") from None


def split_assignment(s: str, form: str) -> tuple:
    if '=' not in s:
        raise ValueError(f"expected {form}, got {s!r}")
    key, value = s.split('=', 1)
    return key, value


def find_entry(entries: list, msg_id: int):
    for entry in entries:
        if entry.id == msg_id:
            return entry
    return None


def set_text(entries: list, assignment: str) -> bool:
    """Apply an ID=TEXT edit. Returns True if a message was changed."""
    key, text = split_assignment(assignment, 'ID=TEXT')
    entry = find_entry(entries, parse_id(key))
    if entry is None:
        print(f"  Message {key} not found")
        return False
    entry.text = text.replace('\\n', '\n')
    print(f"  Set 0x{entry.id:04X} text = {entry.text!r}")
    return True


def set_fields(entries: list, args: list) -> bool:
    """Apply ID KEY=VAL [KEY=VAL ...] edits to a message's box settings."""
    entry = find_entry(entries, parse_id(args[0]))
    if entry is None:
        print(f"  Message {args[0]} not found")
        return False

    modified = False
    for kv in args[1:]:
        k, v = split_assignment(kv, 'KEY=VAL')
        k = k.lower()
        if k == 'type':
            entry.type = parse_value(v, BOX_TYPES)
        elif k in ('position', 'pos'):
            entry.position = parse_value(v, BOX_POSITIONS)
        else:
            print(f"  Unknown key: {k}")
            continue
        modified = True
        print(f"  Set 0x{entry.id:04X}.{k} = {v}")
    return modified


# =============================================================================
# VERIFY
# =============================================================================

def verify_rebuild(entries: list, table: bytes, data: bytes) -> int:
    """Rebuild without edits and compare against the input files.

    Returns 0 if identical, 1 if different.
    """
    new_table, new_data = build_files(entries)

    issues = []
    for label, orig, new in (('table', table, new_table), ('data', data, new_data)):
        if orig == new:
            continue
        if len(orig) != len(new):
            issues.append(f"{label} size: {len(orig):,} vs {len(new):,}")
        for i in range(min(len(orig), len(new))):
            if orig[i] != new[i]:
                issues.append(f"{label} first diff at 0x{i:06X}: "
                              f"0x{orig[i]:02X} vs 0x{new[i]:02X}")
                break

    if not issues:
        print(f"VERIFY OK: rebuilt table and data are byte-identical ({len(entries)} messages)")
        return 0

    print(f"VERIFY FAILED: rebuilt files differ from the input")
    for issue in issues:
        print(f"  - {issue}")
    return 1


# =============================================================================
# MAIN
# =============================================================================

def main():
    p = argparse.ArgumentParser(
        description='Ocarina of Time Message Editor',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s message_table.tbl nes_message_data_static.bin --export messages.json
  %(prog)s message_table.tbl nes_message_data_static.bin --set 0x0001 type=blue
  %(prog)s message_table.tbl nes_message_data_static.bin --verify
        """)
    p.add_argument('table', help='Message table file (.tbl)')
    p.add_argument('data', help='Message data file (.bin)')
    p.add_argument('--bank', type=lambda x: int(x, 0), default=ENGLISH_BANK,
                   metavar='N', help='Section bank byte (default: 0x07, English)')
    p.add_argument('--set-text', action='append', default=[], metavar='ID=TEXT',
                   help='Replace the text of message ID')
    p.add_argument('--set', nargs='+', action='append', default=[], metavar='ARG',
                   help='ID KEY=VAL [KEY=VAL ...]: set type / position')
    p.add_argument('--export', default=None, metavar='FILE',
                   help='Write the section as a JSON script')
    p.add_argument('--import', dest='import_path', default=None, metavar='FILE',
                   help='Replace the section with a JSON script')
    p.add_argument('--out-table', default=None, metavar='FILE',
                   help='Output table file (default: overwrite input)')
    p.add_argument('--out-data', default=None, metavar='FILE',
                   help='Output data file (default: overwrite input)')
    p.add_argument('--verify', action='store_true',
                   help='Check that an unedited rebuild is byte-identical')
    args = p.parse_args()

    with open(args.table, 'rb') as f:
        table = f.read()
    with open(args.data, 'rb') as f:
        data = f.read()

    try:
        entries = parse_table(table, data, args.bank)
        print(f"  Loaded: {len(entries)} messages")

        if args.verify:
            sys.exit(verify_rebuild(entries, table, data))

        modified = False
        if args.import_path:
            with open(args.import_path, encoding='utf-8') as f:
                entries = load_script(f.read())
            print(f"  Imported: {len(entries)} messages from {args.import_path}")
            modified = True

        for assignment in args.set_text:
            modified |= set_text(entries, assignment)
        for field_args in args.set:
            modified |= set_fields(entries, field_args)

        if args.export:
            with open(args.export, 'w', encoding='utf-8') as f:
                f.write(dump_script(entries))
            print(f"  Exported: {len(entries)} messages -> {args.export}")

        if modified or args.out_table or args.out_data:
            new_table, new_data = build_files(entries)
            out_table = args.out_table or args.table
            out_data = args.out_data or args.data
            with open(out_table, 'wb') as f:
                f.write(new_table)
            with open(out_data, 'wb') as f:
                f.write(new_data)
            print(f"  Saved to {out_table} ({len(new_table):,} bytes) "
                  f"and {out_data} ({len(new_data):,} bytes)")
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
