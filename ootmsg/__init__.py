"""ootmsg: Ocarina of Time message table and text codec."""
from .codec import (  # noqa: F401
    decode_message, encode_message, to_display, from_display, normalize_display,
)
from .errors import (  # noqa: F401
    MessageFormatError, MalformedTable, TruncatedMessage, InvalidHexOperand,
    UnencodableCharacter, ScriptError,
)
from .table import (  # noqa: F401
    MessageEntry, parse_table, parse_section, build_files, relocate,
)
from .script import dump_script, load_script  # noqa: F401
