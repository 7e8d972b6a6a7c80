from __future__ import annotations

import sys
from pathlib import Path

import pytest

import message_dumper
import message_editor
from ootmsg.table import MessageEntry, build_files, pack_record, parse_table


@pytest.fixture
def message_files(tmp_path: Path) -> tuple[Path, Path]:
    entries = [
        MessageEntry(0x0001, 0, 0, 0x07, 0, "Hey\n[break]"),
        MessageEntry(0x0002, 1, 3, 0x07, 0, "[color:red]Kokiri[color:default] Forest"),
    ]
    table, data = build_files(entries)
    table_path = tmp_path / "message_table.tbl"
    data_path = tmp_path / "message_data.bin"
    table_path.write_bytes(table)
    data_path.write_bytes(data)
    return table_path, data_path


def _run(monkeypatch, module, *argv: str) -> None:
    monkeypatch.setattr(sys, "argv", [module.__name__, *map(str, argv)])
    module.main()


def _load(table_path: Path, data_path: Path) -> list[MessageEntry]:
    return parse_table(table_path.read_bytes(), data_path.read_bytes())


def test_dumper_lists_messages(monkeypatch, capsys, message_files) -> None:
    _run(monkeypatch, message_dumper, *message_files)

    out = capsys.readouterr().out
    assert "Loaded: 2 messages" in out
    assert "[0x0001] Hey\\n[break]" in out
    assert "[0x0002] [color:red]Kokiri[color:default] Forest" in out


def test_dumper_shows_single_message(monkeypatch, capsys, message_files) -> None:
    _run(monkeypatch, message_dumper, *message_files, "--id", "0x0002")

    out = capsys.readouterr().out
    assert "Message 0x0002 @ offset 0x000008" in out
    assert "type=wood position=bottom bank=0x07" in out
    assert "05 41 4B 6F" in out


def test_dumper_search_and_stats(monkeypatch, capsys, message_files) -> None:
    _run(monkeypatch, message_dumper, *message_files, "--search", "kokiri")
    assert "Found 1 matches" in capsys.readouterr().out

    _run(monkeypatch, message_dumper, *message_files, "--stats")
    out = capsys.readouterr().out
    assert "Messages:          2" in out
    assert "color" in out


def test_dumper_records(monkeypatch, capsys, message_files) -> None:
    _run(monkeypatch, message_dumper, *message_files, "--records")

    out = capsys.readouterr().out
    assert "id=0xFFFD" in out
    assert "id=0xFFFF" in out


def test_dumper_reports_format_errors(monkeypatch, capsys, tmp_path) -> None:
    table_path = tmp_path / "bad.tbl"
    data_path = tmp_path / "bad.bin"
    table_path.write_bytes(pack_record(0x0001, 0, 0, 0x08, 0))
    data_path.write_bytes(b"\x02\x00\x00\x00")

    with pytest.raises(SystemExit) as excinfo:
        _run(monkeypatch, message_dumper, table_path, data_path)

    assert excinfo.value.code == 1
    assert "ERROR: no record with bank 0x07" in capsys.readouterr().err


def test_editor_verify(monkeypatch, capsys, message_files) -> None:
    with pytest.raises(SystemExit) as excinfo:
        _run(monkeypatch, message_editor, *message_files, "--verify")

    assert excinfo.value.code == 0
    assert "VERIFY OK" in capsys.readouterr().out


def test_editor_verify_detects_difference(monkeypatch, capsys, message_files) -> None:
    table_path, data_path = message_files
    data_path.write_bytes(data_path.read_bytes() + b"\x00\x00\x00\x00")

    with pytest.raises(SystemExit) as excinfo:
        _run(monkeypatch, message_editor, table_path, data_path, "--verify")

    assert excinfo.value.code == 1
    assert "data size" in capsys.readouterr().out


def test_editor_sets_text_and_fields(monkeypatch, tmp_path, message_files) -> None:
    out_table = tmp_path / "new.tbl"
    out_data = tmp_path / "new.bin"

    _run(
        monkeypatch, message_editor, *message_files,
        "--set-text", "0x0001=Bye\\n[break]",
        "--set", "0x0002", "type=blue", "position=1",
        "--out-table", out_table, "--out-data", out_data,
    )

    entries = _load(out_table, out_data)
    assert entries[0].text == "Bye\n[break]"
    assert (entries[1].type, entries[1].position) == (2, 1)
    assert entries[1].text == "[color:red]Kokiri[color:default] Forest"


def test_editor_export_import_roundtrip(monkeypatch, tmp_path, message_files) -> None:
    table_path, data_path = message_files
    script_path = tmp_path / "messages.json"
    original_table = table_path.read_bytes()
    original_data = data_path.read_bytes()

    _run(monkeypatch, message_editor, table_path, data_path, "--export", script_path)
    edited = script_path.read_text(encoding="utf-8").replace("Forest", "Village")
    script_path.write_text(edited, encoding="utf-8")
    _run(monkeypatch, message_editor, table_path, data_path, "--import", script_path)

    entries = _load(table_path, data_path)
    assert entries[1].text == "[color:red]Kokiri[color:default] Village"
    assert entries[0].text == "Hey\n[break]"
    assert table_path.read_bytes() == original_table
    assert data_path.read_bytes() != original_data


@pytest.mark.parametrize(
    "edit",
    [
        ("--set-text", "zz=hi"),
        ("--set-text", "0x0001"),
        ("--set", "0x0002", "type=foo"),
        ("--set", "0x0002", "position"),
        ("--set", "two", "type=blue"),
    ],
)
def test_editor_rejects_bad_edit_arguments(monkeypatch, capsys, message_files, edit) -> None:
    table_path, data_path = message_files
    original = (table_path.read_bytes(), data_path.read_bytes())

    with pytest.raises(SystemExit) as excinfo:
        _run(monkeypatch, message_editor, table_path, data_path, *edit)

    assert excinfo.value.code == 1
    assert "ERROR: " in capsys.readouterr().err
    assert (table_path.read_bytes(), data_path.read_bytes()) == original
