"""Packaging regression tests."""

from pathlib import Path


def test_source_layout():
    repo_root = Path(__file__).resolve().parent.parent
    src_pkg = repo_root / "src" / "validated_yaml"

    assert src_pkg.exists(), "validated_yaml package should exist in src/"
    assert (src_pkg / "kernel").exists(), "validated_yaml.kernel should exist"
    assert (src_pkg / "_internal").exists(), "validated_yaml._internal should exist"


def test_import_boundary():
    import validated_yaml
    import validated_yaml.kernel  # noqa: F401

    # "dev" when running from a source checkout without installing
    assert validated_yaml.__version__ in ("1.0.0", "dev")


def test_console_script_declared():
    pyproject = (Path(__file__).resolve().parent.parent / "pyproject.toml").read_text(encoding="utf-8")
    assert 'validated-yaml = "validated_yaml.cli:main"' in pyproject
