"""
ootmsg: Message text codec.

Implements:
  - decoding of raw message bytes into shortcode text
  - encoding of shortcode text back into terminated, padded message bytes
  - display normalization ([break] / [breakdelay:XX] on their own lines)

Shortcode syntax:
  [name]          single-byte command or button icon   [break], [A-button]
  [name:HEX]      command with a big-endian operand    [sfx:4807], [item:2f]
  [color:NAME]    color command, NAME or 2 hex digits  [color:red], [color:4c]
  newline         0x01 line break
"""

import re

from .constants import (
    LINE_BREAK, END_MARKER, SKIPPED_BYTES, PRINTABLE_FIRST, PRINTABLE_LAST,
    SPECIAL_CHARS, CHAR_BYTES, BUTTONS, BUTTON_BYTES, COLORS, COLOR_BYTES,
    NOARG_COMMANDS, NOARG_BYTES, OPERAND_COMMANDS, OPERAND_OPCODES,
    MESSAGE_ALIGN,
)
from .errors import TruncatedMessage, InvalidHexOperand, UnencodableCharacter


# =============================================================================
# DECODE (bytes -> shortcode)
# =============================================================================

def decode_message(raw: bytes, start: int = 0, byte_count: int = None) -> str:
    """
    Decode one message into shortcode text.

    Scans byte_count bytes from start (to the end of raw if omitted) and stops
    early at the 0x02 end marker. 0x00/0x03 and unknown bytes produce no
    output.

    Args:
        raw:        Message data buffer
        start:      Offset of the message in raw
        byte_count: Number of bytes the message may occupy

    Returns:
        Shortcode text

    Raises:
        TruncatedMessage: If a command's operand (or the scan itself) runs
            past the message end or the buffer end
    """
    end = len(raw) if byte_count is None else start + byte_count
    limit = min(end, len(raw))
    out = []
    i = start

    while i < end:
        if i >= len(raw):
            raise TruncatedMessage(
                f"message data ends at 0x{len(raw):06X} before end marker",
                offset=i)
        b = raw[i]

        if b in SKIPPED_BYTES:
            i += 1
            continue
        if b == END_MARKER:
            break

        if b == LINE_BREAK:
            out.append('\n')
        elif b in NOARG_COMMANDS:
            out.append(f'[{NOARG_COMMANDS[b]}]')
        elif b in OPERAND_COMMANDS:
            name, width = OPERAND_COMMANDS[b]
            if i + width >= limit:
                raise TruncatedMessage(
                    f"[{name}] at 0x{i:06X} needs {width} operand byte(s), "
                    f"message ends at 0x{limit:06X}",
                    offset=i, opcode=b)
            value = int.from_bytes(raw[i + 1:i + 1 + width], 'big')
            if name == 'color' and value in COLORS:
                out.append(f'[color:{COLORS[value]}]')
            else:
                out.append(f'[{name}:{value:0{width * 2}x}]')
            i += width
        elif b in SPECIAL_CHARS:
            out.append(SPECIAL_CHARS[b])
        elif b in BUTTONS:
            out.append(f'[{BUTTONS[b]}]')
        elif PRINTABLE_FIRST <= b <= PRINTABLE_LAST:
            out.append(chr(b))

        i += 1

    return ''.join(out)


# =============================================================================
# ENCODE (shortcode -> bytes)
# =============================================================================

_HEX_DIGITS = re.compile(r'[0-9A-Fa-f]+')


def parse_operand(tag: str, value: str, width: int) -> bytes:
    """Parse a hex tag value into width big-endian bytes."""
    digits = value[2:] if value[:2] in ('0x', '0X') else value
    if not _HEX_DIGITS.fullmatch(digits):
        raise InvalidHexOperand(
            f"[{tag}:{value}]: operand is not hexadecimal", tag=tag, value=value)
    number = int(digits, 16)
    if number >> (8 * width):
        raise InvalidHexOperand(
            f"[{tag}:{value}]: operand does not fit in {width} byte(s)",
            tag=tag, value=value)
    return number.to_bytes(width, 'big')


def encode_tag(token: str) -> bytes:
    """
    Encode the inside of one [...] tag.

    Unknown tag names, and operand commands written without a value,
    encode to nothing.
    """
    name, _, value = token.partition(':')

    if name in NOARG_BYTES:
        return bytes([NOARG_BYTES[name]])
    if name in OPERAND_OPCODES and value:
        opcode, width = OPERAND_OPCODES[name]
        if name == 'color' and value in COLOR_BYTES:
            return bytes([opcode, COLOR_BYTES[value]])
        return bytes([opcode]) + parse_operand(name, value, width)
    if name in BUTTON_BYTES:
        return bytes([BUTTON_BYTES[name]])
    return b''


def encode_message(text: str) -> bytes:
    """
    Encode shortcode text into message bytes.

    The result always ends with the 0x02 end marker and is zero-padded to a
    multiple of 4 bytes. A '[' with no closing ']' is dropped.

    Raises:
        InvalidHexOperand: If a tag value cannot be parsed
        UnencodableCharacter: If a character is above U+00FF and is not a
            font glyph
    """
    out = bytearray()
    i = 0

    while i < len(text):
        ch = text[i]

        if ch == '[':
            close = text.find(']', i)
            if close < 0:
                i += 1
                continue
            out.extend(encode_tag(text[i + 1:close]))
            i = close + 1
            continue

        if ch == '\n':
            out.append(LINE_BREAK)
        elif ch in CHAR_BYTES:
            out.append(CHAR_BYTES[ch])
        else:
            code = ord(ch)
            if code > 0xFF:
                raise UnencodableCharacter(
                    f"character {ch!r} (U+{code:04X}) at position {i} "
                    f"has no byte value", char=ch, position=i)
            out.append(code)
        i += 1

    out.append(END_MARKER)
    out.extend(bytes(-len(out) % MESSAGE_ALIGN))
    return bytes(out)


# =============================================================================
# DISPLAY NORMALIZATION
# =============================================================================

_BREAK_DELAY = re.compile(r'\[breakdelay:[^\]]*\]')
_BREAK_FULL = re.compile(r'\n?\[break\]\n?')
_BREAK_DELAY_FULL = re.compile(r'\n?(\[breakdelay:[^\]]*\])\n?')


def to_display(text: str) -> str:
    """Put every [break] and [breakdelay:XX] tag on a line of its own."""
    text = text.replace('[break]', '\n[break]\n')
    return _BREAK_DELAY.sub(lambda m: f'\n{m.group(0)}\n', text)


def from_display(text: str) -> str:
    """Undo to_display: drop one line break on each side of those tags."""
    text = _BREAK_FULL.sub('[break]', text)
    return _BREAK_DELAY_FULL.sub(r'\1', text)


def normalize_display(text: str) -> str:
    """Re-normalize edited display text; applying it twice changes nothing."""
    return to_display(from_display(text))
