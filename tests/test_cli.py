import io
import json
import logging
import sys

import pytest

from csvrows.cli import main
from csvrows.config import get_settings


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def csv_file(tmp_path):
    path = tmp_path / "in.csv"
    path.write_text("a,b,c\n1,2,3\n4,5,6\n", encoding="utf-8")
    return path


def test_converts_file_to_compact_json(csv_file, capsys):
    assert main(["-i", str(csv_file)]) == 0
    out = capsys.readouterr().out
    assert out == '[{"a":1,"b":2,"c":3},{"a":4,"b":5,"c":6}]'


def test_pretty_output(csv_file, capsys):
    assert main(["--input", str(csv_file), "--pretty"]) == 0
    out = capsys.readouterr().out
    assert out == json.dumps([{"a": 1, "b": 2, "c": 3}, {"a": 4, "b": 5, "c": 6}], indent=2)


def test_pretty_wins_over_compact(csv_file, capsys):
    assert main(["-i", str(csv_file), "--compact", "--pretty"]) == 0
    assert capsys.readouterr().out.startswith("[\n  {")


def test_reads_stdin(monkeypatch, capsys):
    stdin = io.TextIOWrapper(io.BytesIO("name;note\n\"Doe;John\";café\n".encode("utf-8")))
    monkeypatch.setattr(sys, "stdin", stdin)
    assert main(["-d", ";"]) == 0
    assert json.loads(capsys.readouterr().out) == [{"name": "Doe;John", "note": "café"}]


def test_no_parse_number(tmp_path, capsys):
    path = tmp_path / "n.csv"
    path.write_text("n,m\n00123,7\n", encoding="utf-8")
    assert main(["-i", str(path), "--no-parse-number"]) == 0
    assert json.loads(capsys.readouterr().out) == [{"n": "00123", "m": "7"}]


def test_malformed_input_exits_non_zero(tmp_path, capsys):
    path = tmp_path / "bad.csv"
    path.write_text("a,b\n1\n", encoding="utf-8")
    assert main(["-i", str(path)]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err.startswith("Error: Malformed CSV")


def test_missing_file_reports_error(tmp_path, capsys):
    assert main(["-i", str(tmp_path / "missing.csv")]) == 1
    assert capsys.readouterr().err.startswith("Error: ")


def test_invalid_delimiter_reports_error(csv_file, capsys):
    assert main(["-i", str(csv_file), "-d", ";;"]) == 1
    assert "single character" in capsys.readouterr().err


def test_verbose_logs_headers_and_summary(csv_file, capsys):
    assert main(["-i", str(csv_file), "-v"]) == 0
    err = capsys.readouterr().err
    assert '[csv2json] headers: ["a", "b", "c"]' in err
    assert "[csv2json] rows=2 time=" in err


def test_bad_chunk_size_env_reports_error(csv_file, monkeypatch, capsys):
    monkeypatch.setenv("CSVROWS_CHUNK_SIZE", "abc")
    get_settings.cache_clear()
    try:
        assert main(["-i", str(csv_file)]) == 1
    finally:
        get_settings.cache_clear()
    assert capsys.readouterr().err.startswith("Error: CSVROWS_CHUNK_SIZE must be an integer")
