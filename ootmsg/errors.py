"""Exceptions raised by the message codec and table reader/writer."""


class MessageFormatError(ValueError):
    """Base class for every defined message/table format error."""


class MalformedTable(MessageFormatError):
    """Message table is truncated, lacks its sentinel, or has bad offsets."""


class TruncatedMessage(MessageFormatError):
    """A command's operand bytes run past the end of the message."""

    def __init__(self, message: str, offset: int = None, opcode: int = None):
        super().__init__(message)
        self.offset = offset
        self.opcode = opcode


class InvalidHexOperand(MessageFormatError):
    """A tag value is not hexadecimal or does not fit its operand."""

    def __init__(self, message: str, tag: str = None, value: str = None):
        super().__init__(message)
        self.tag = tag
        self.value = value


class UnencodableCharacter(MessageFormatError):
    """A character has no single-byte representation."""

    def __init__(self, message: str, char: str = None, position: int = None):
        super().__init__(message)
        self.char = char
        self.position = position


class ScriptError(MessageFormatError):
    """An exported message script cannot be loaded."""
