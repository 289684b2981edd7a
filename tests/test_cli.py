"""
Tests for the kvctl command line interface.
"""

import io
import json
import os
import sys

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from kvloader.cli.kvctl import build_parser, main
from kvloader.constants import IDENTITIES_ENV_VAR


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, empty_home):
    """Keep the user's SSH keys and identity settings out of CLI runs."""
    monkeypatch.setenv("HOME", str(empty_home))
    monkeypatch.delenv(IDENTITIES_ENV_VAR, raising=False)


class TestParser:
    """Tests for argument parsing."""

    def test_repeatable_sources(self):
        args = build_parser().parse_args([
            'load', '--from-literal', 'A=1', '--from-literal', 'B=2',
            '--from-file', 'x.txt', '--from-env-file', 'a.env',
        ])
        assert args.literal_sources == ['A=1', 'B=2']
        assert args.file_sources == ['x.txt']
        assert args.env_sources == ['a.env']
        assert args.format == 'env'

    def test_no_command_shows_help(self, capsys):
        assert main([]) == 1
        assert 'usage' in capsys.readouterr().out


class TestLoadCommand:
    """Tests for kvctl load."""

    def test_env_output(self, source_dir):
        (source_dir / "a.env").write_text("E=1\n")
        (source_dir / "f.txt").write_text("content")
        out = io.StringIO()
        code = main([
            'load', '--root', str(source_dir),
            '--from-env-file', 'a.env', '--from-literal', 'L=2', '--from-file', 'f.txt',
        ], out=out)
        assert code == 0
        assert out.getvalue() == "E=1\nL=2\nf.txt=content\n"

    def test_json_output(self, source_dir):
        out = io.StringIO()
        code = main(['load', '--root', str(source_dir), '--from-literal', 'A=x=y', '--format', 'json'], out=out)
        assert code == 0
        assert json.loads(out.getvalue()) == [{'key': 'A', 'value': 'x=y'}]

    def test_decrypts_with_identity(self, source_dir, identity_file, encrypt):
        (source_dir / "token.age").write_bytes(encrypt(b"s3cret"))
        out = io.StringIO()
        code = main([
            'load', '--root', str(source_dir),
            '--from-file', 'token.age', '--age-identity', str(identity_file),
        ], out=out)
        assert code == 0
        assert out.getvalue() == "token=s3cret\n"

    def test_identity_from_environment(self, source_dir, identity_file, encrypt, monkeypatch):
        monkeypatch.setenv(IDENTITIES_ENV_VAR, str(identity_file))
        (source_dir / "token.age").write_bytes(encrypt(b"s3cret"))
        out = io.StringIO()
        assert main(['load', '--root', str(source_dir), '--from-file', 'token.age'], out=out) == 0
        assert out.getvalue() == "token=s3cret\n"

    def test_config_and_flags_merge(self, source_dir, temp_dir):
        manifest = temp_dir / "sources.yaml"
        manifest.write_text("literals:\n  - FIRST=1\n")
        out = io.StringIO()
        code = main([
            'load', '--root', str(source_dir), '--config', str(manifest),
            '--from-literal', 'SECOND=2',
        ], out=out)
        assert code == 0
        assert out.getvalue() == "FIRST=1\nSECOND=2\n"

    def test_error_exit_code(self, source_dir, capsys):
        out = io.StringIO()
        code = main(['load', '--root', str(source_dir), '--from-literal', 'novalue'], out=out)
        assert code == 1
        assert out.getvalue() == ""
        assert "literal sources" in capsys.readouterr().err


class TestCheckCommand:
    """Tests for kvctl check."""

    def test_prints_keys_only(self, source_dir):
        out = io.StringIO()
        code = main(['check', '--root', str(source_dir), '--from-literal', 'SECRET=hunter2'], out=out)
        assert code == 0
        assert "hunter2" not in out.getvalue()
        assert out.getvalue() == "SECRET\nOK: 1 pairs\n"
