"""
ootmsg: Message script export/import.

A script is a JSON document holding a whole section for offline editing:

  {
    "format": "ootmsg-script",
    "version": 1,
    "messages": [
      {"id": "0x0001", "type": 0, "position": 0, "bank": 7,
       "text": "Hey\\n\\n[break]\\n"},
      ...
    ]
  }

Text is stored in display form (see codec.to_display) so that [break] and
[breakdelay:XX] sit on their own lines; loading converts it back.
"""

import json

from .codec import to_display, from_display
from .errors import ScriptError
from .table import MessageEntry

SCRIPT_FORMAT = "ootmsg-script"
SCRIPT_VERSION = 1

_FIELD_LIMITS = {
    'id':       0xFFFF,
    'type':     0x0F,
    'position': 0x0F,
    'bank':     0xFF,
}


def dump_script(entries: list) -> str:
    """Serialize entries to a script document."""
    messages = [
        {
            'id': f"0x{entry.id:04X}",
            'type': entry.type,
            'position': entry.position,
            'bank': entry.bank,
            'text': to_display(entry.text),
        }
        for entry in entries
    ]
    doc = {'format': SCRIPT_FORMAT, 'version': SCRIPT_VERSION, 'messages': messages}
    return json.dumps(doc, indent=2, ensure_ascii=False) + '\n'


def _field(record: dict, key: str, index: int) -> int:
    if key not in record:
        raise ScriptError(f"message #{index}: missing '{key}'")
    value = record[key]
    if isinstance(value, str):
        try:
            value = int(value, 0)
        except ValueError:
            raise ScriptError(f"message #{index}: bad {key} {value!r}") from None
    elif isinstance(value, bool) or not isinstance(value, int):
        raise ScriptError(f"message #{index}: bad {key} {value!r}")
    if not 0 <= value <= _FIELD_LIMITS[key]:
        raise ScriptError(f"message #{index}: {key} {value:#x} out of range")
    return value


def load_script(text: str) -> list:
    """
    Parse a script document back into entries.

    Offsets are set to 0; build_files recomputes them.

    Raises:
        ScriptError: If the document is not a valid script
    """
    try:
        doc = json.loads(text)
    except json.JSONDecodeError as err:
        raise ScriptError(f"script is not valid JSON: {err}") from err

    if not isinstance(doc, dict) or doc.get('format') != SCRIPT_FORMAT:
        raise ScriptError(f"not an {SCRIPT_FORMAT} document")
    if doc.get('version') != SCRIPT_VERSION:
        raise ScriptError(f"unsupported script version {doc.get('version')!r}")
    messages = doc.get('messages')
    if not isinstance(messages, list):
        raise ScriptError("'messages' must be a list")

    entries = []
    for index, record in enumerate(messages):
        if not isinstance(record, dict):
            raise ScriptError(f"message #{index}: expected an object")
        body = record.get('text', '')
        if not isinstance(body, str):
            raise ScriptError(f"message #{index}: 'text' must be a string")
        entries.append(MessageEntry(
            id=_field(record, 'id', index),
            type=_field(record, 'type', index),
            position=_field(record, 'position', index),
            bank=_field(record, 'bank', index),
            offset=0,
            text=from_display(body),
        ))
    return entries
