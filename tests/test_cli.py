"""CLI tests for the check subcommand."""

import json
import os
import sys

import pytest

from validated_yaml import cli


def _run_cli(args, monkeypatch):
    monkeypatch.setattr(sys, "argv", ["validated-yaml"] + args)
    return cli.main()


def _pattern(root):
    return os.path.join(str(root), "**", "*.yaml")


def test_check_ok(monkeypatch, capsys, metadata_dir, valid_document):
    (metadata_dir / "examples" / "example.yaml").write_text(valid_document, encoding="utf-8")
    _run_cli(["check", _pattern(metadata_dir)], monkeypatch)
    out = capsys.readouterr().out
    assert "[OK] Validation complete" in out
    assert "Status: COMMITTED" in out
    assert "Files: 1" in out
    assert "Failed: 0" in out
    assert "Digest: sha256:" in out


def test_check_failure_exits_nonzero(monkeypatch, capsys, metadata_dir, valid_document):
    (metadata_dir / "examples" / "example.yaml").write_text(
        valid_document.replace('"example-id"', "12345"), encoding="utf-8"
    )
    with pytest.raises(SystemExit) as excinfo:
        _run_cli(["check", _pattern(metadata_dir)], monkeypatch)
    assert excinfo.value.code == 1
    captured = capsys.readouterr()
    assert "Status: NOT COMMITTED" in captured.out
    assert "Failed: 1" in captured.out
    assert "Error validating YAML: " in captured.err
    assert "- at '/id': got number, want string" in captured.err


def test_check_print_emits_entries(monkeypatch, capsys, metadata_dir, valid_document, valid_payload):
    path = metadata_dir / "examples" / "example.yaml"
    path.write_text(valid_document, encoding="utf-8")
    _run_cli(["check", _pattern(metadata_dir), "--print"], monkeypatch)
    out = capsys.readouterr().out
    assert json.loads(out) == {str(path): valid_payload}


def test_check_output_dir_writes_report(monkeypatch, capsys, tmp_path, metadata_dir, valid_document):
    (metadata_dir / "examples" / "example.yaml").write_text(valid_document, encoding="utf-8")
    out_dir = tmp_path / "out"
    _run_cli(["check", _pattern(metadata_dir), "--output-dir", str(out_dir), "--quiet"], monkeypatch)
    assert capsys.readouterr().out == ""
    report = json.loads((out_dir / "validated.json").read_text(encoding="utf-8"))
    assert report["committed"] is True
    assert report["digest"].startswith("sha256:")
    assert [f["stage"] for f in report["files"]] == ["committed"]


def test_check_first_line_only(monkeypatch, capsys, metadata_dir, valid_document):
    (metadata_dir / "examples" / "example.yaml").write_text("# header\n" + valid_document, encoding="utf-8")
    with pytest.raises(SystemExit) as excinfo:
        _run_cli(["check", _pattern(metadata_dir), "--first-line-only"], monkeypatch)
    assert excinfo.value.code == 1
    assert "does not contain a valid schema reference in the first line" in capsys.readouterr().err


def test_check_no_match(monkeypatch, capsys, tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        _run_cli(["check", str(tmp_path / "*.yaml")], monkeypatch)
    assert excinfo.value.code == 1
    assert "Error: No files matched the provided input pattern" in capsys.readouterr().err


def test_check_invalid_pattern(monkeypatch, capsys, tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        _run_cli(["check", str(tmp_path / "[abc")], monkeypatch)
    assert excinfo.value.code == 1
    assert "Error: Invalid input pattern" in capsys.readouterr().err


def test_no_command_prints_help(monkeypatch, capsys):
    with pytest.raises(SystemExit) as excinfo:
        _run_cli([], monkeypatch)
    assert excinfo.value.code == 1
    assert "check" in capsys.readouterr().out


def test_version(monkeypatch, capsys):
    with pytest.raises(SystemExit) as excinfo:
        _run_cli(["--version"], monkeypatch)
    assert excinfo.value.code == 0
    assert capsys.readouterr().out.startswith("validated-yaml ")
