"""
ootmsg: Message encoding constants and lookup tables.

Byte values are those of the N64 English message data (message_data_static
and its offset table). Every table is read-only; the reverse maps used by the
encoder are built once at import time.
"""

from types import MappingProxyType


def _reverse(table):
    return MappingProxyType({value: key for key, value in table.items()})


# =============================================================================
# CONTROL BYTES
# =============================================================================

LINE_BREAK = 0x01
END_MARKER = 0x02
SKIPPED_BYTES = frozenset((0x00, 0x03))

PRINTABLE_FIRST = 0x20
PRINTABLE_LAST = 0x7E


# =============================================================================
# FONT GLYPHS (0x80-0x9E)
# =============================================================================

SPECIAL_CHARS = MappingProxyType({
    0x80: 'À', 0x81: 'Á', 0x82: 'Å', 0x83: 'Ä', 0x84: 'Ç',
    0x85: 'È', 0x86: 'É', 0x87: 'Ê', 0x88: 'Ë', 0x89: 'Ï',
    0x8A: 'Ô', 0x8B: 'Ö', 0x8C: 'Ù', 0x8D: 'Û', 0x8E: 'Ü',
    0x8F: 'ß', 0x90: 'à', 0x91: 'á', 0x92: 'å', 0x93: 'ä',
    0x94: 'ç', 0x95: 'è', 0x96: 'é', 0x97: 'ê', 0x98: 'ë',
    0x99: 'ï', 0x9A: 'ô', 0x9B: 'ö', 0x9C: 'ù', 0x9D: 'û',
    0x9E: 'ü',
})
CHAR_BYTES = _reverse(SPECIAL_CHARS)


# =============================================================================
# CONTROLLER BUTTON ICONS (0x9F-0xAA)
# =============================================================================

BUTTONS = MappingProxyType({
    0x9F: "A-button", 0xA0: "B-button", 0xA1: "C-button", 0xA2: "L-button",
    0xA3: "R-button", 0xA4: "Z-button", 0xA5: "C-up",     0xA6: "C-down",
    0xA7: "C-left",   0xA8: "C-right",  0xA9: "Triangle", 0xAA: "Stick",
})
BUTTON_BYTES = _reverse(BUTTONS)


# =============================================================================
# TEXT COLORS (operand of the 0x05 color command)
# =============================================================================

COLORS = MappingProxyType({
    0x40: "default",   0x41: "red",    0x42: "green",  0x43: "blue",
    0x44: "lightblue", 0x45: "purple", 0x46: "yellow", 0x47: "black",
})
COLOR_BYTES = _reverse(COLORS)


# =============================================================================
# COMMANDS
# =============================================================================

# Single-byte commands: [name]
NOARG_COMMANDS = MappingProxyType({
    0x04: "break",
    0x08: "quicktexton",
    0x09: "quicktextoff",
    0x0A: "shop",
    0x0B: "event",
    0x0D: "waitbutton",
    0x0F: "name",
    0x10: "ocarina",
    0x11: "endfade",
    0x16: "marathon",
    0x17: "horserace",
    0x18: "archery",
    0x19: "skulltulas",
    0x1A: "unskippable",
    0x1B: "twochoice",
    0x1C: "threechoice",
    0x1D: "fish",
    0x1F: "time",
})
NOARG_BYTES = _reverse(NOARG_COMMANDS)

# Commands with a big-endian operand: opcode -> (name, operand width in bytes)
OPERAND_COMMANDS = MappingProxyType({
    0x05: ("color",      1),
    0x06: ("shift",      1),
    0x07: ("textid",     2),
    0x0C: ("breakdelay", 1),
    0x0E: ("fade",       1),
    0x12: ("sfx",        2),
    0x13: ("item",       1),
    0x14: ("textspeed",  1),
    0x15: ("background", 3),
    0x1E: ("minigame",   1),
})
OPERAND_OPCODES = MappingProxyType({
    name: (opcode, width) for opcode, (name, width) in OPERAND_COMMANDS.items()
})


# =============================================================================
# MESSAGE TABLE LAYOUT
# =============================================================================
#
# Record (8 bytes, big-endian):
#   +0  uint16  message id
#   +2  uint8   box type (high nibble) | box position (low nibble)
#   +3  uint8   reserved, always 0
#   +4  uint8   bank (language section)
#   +5  uint24  offset into message data

RECORD_SIZE = 8
SENTINEL_ID = 0xFFFD        # offset = end of message data
TERMINATOR_ID = 0xFFFF      # closes the table
ENGLISH_BANK = 0x07
MESSAGE_ALIGN = 4
MAX_OFFSET = 0xFFFFFF

BOX_TYPES = (
    "black",
    "wood",
    "blue",
    "ocarina",
    "none",
    "none (black text)",
)

BOX_POSITIONS = (
    "auto",
    "top",
    "middle",
    "bottom",
)


def box_type_name(value: int):
    """Name of a box type nibble, or None if the game defines no such style."""
    return BOX_TYPES[value] if 0 <= value < len(BOX_TYPES) else None


def box_position_name(value: int):
    """Name of a box position nibble, or None if out of range."""
    return BOX_POSITIONS[value] if 0 <= value < len(BOX_POSITIONS) else None
