"""
Tests for source manifests and environment configuration.
"""

import json
import os
import sys

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from kvloader.config import (
    ConfigFormat,
    detect_format,
    identity_sources_from_env,
    load_sources_file,
    sources_from_mapping,
)
from kvloader.constants import IDENTITIES_ENV_VAR
from kvloader.errors import ConfigError
from kvloader.types import KvPairSources


class TestDetectFormat:
    """Tests for manifest format detection."""

    def test_json(self, temp_dir):
        assert detect_format(temp_dir / "sources.json") == ConfigFormat.JSON

    @pytest.mark.parametrize("name", ["sources.yaml", "sources.yml", "sources"])
    def test_yaml_default(self, temp_dir, name):
        assert detect_format(temp_dir / name) == ConfigFormat.YAML


class TestLoadSourcesFile:
    """Tests for load_sources_file."""

    def test_yaml_manifest(self, temp_dir):
        manifest = temp_dir / "sources.yaml"
        manifest.write_text(
            "env:\n"
            "  - app.env\n"
            "literals:\n"
            "  - LOG_LEVEL=debug\n"
            "  - 'QUOTED=\"x\"'\n"
            "files:\n"
            "  - tls.crt=certs/server.crt\n"
            "age_identities:\n"
            "  - /keys/age.txt\n"
        )
        sources = load_sources_file(manifest)
        assert sources == KvPairSources(
            env_sources=("app.env",),
            literal_sources=("LOG_LEVEL=debug", 'QUOTED="x"'),
            file_sources=("tls.crt=certs/server.crt",),
            age_identity_sources=("/keys/age.txt",),
        )

    def test_json_manifest(self, temp_dir):
        manifest = temp_dir / "sources.json"
        manifest.write_text(json.dumps({"literals": ["A=1"], "files": ["b.txt"]}))
        sources = load_sources_file(manifest)
        assert sources.literal_sources == ("A=1",)
        assert sources.file_sources == ("b.txt",)
        assert sources.env_sources == ()

    def test_explicit_format_overrides_extension(self, temp_dir):
        manifest = temp_dir / "sources.txt"
        manifest.write_text('{"literals": ["A=1"]}')
        assert load_sources_file(manifest, ConfigFormat.JSON).literal_sources == ("A=1",)

    def test_empty_yaml(self, temp_dir):
        manifest = temp_dir / "sources.yaml"
        manifest.write_text("")
        assert load_sources_file(manifest) == KvPairSources()

    def test_identity_home_expanded(self, temp_dir, monkeypatch):
        monkeypatch.setenv("HOME", str(temp_dir))
        manifest = temp_dir / "sources.yaml"
        manifest.write_text("age_identities:\n  - ~/keys.txt\n")
        assert load_sources_file(manifest).age_identity_sources == (str(temp_dir / "keys.txt"),)

    def test_missing_file(self, temp_dir):
        with pytest.raises(ConfigError):
            load_sources_file(temp_dir / "absent.yaml")

    def test_parse_error(self, temp_dir):
        manifest = temp_dir / "sources.yaml"
        manifest.write_text("env: [unclosed\n")
        with pytest.raises(ConfigError) as exc:
            load_sources_file(manifest)
        assert "parse error" in str(exc.value)


class TestSourcesFromMapping:
    """Tests for manifest shape validation."""

    def test_none(self):
        assert sources_from_mapping(None) == KvPairSources()

    def test_not_a_mapping(self):
        with pytest.raises(ConfigError):
            sources_from_mapping(["env"])

    def test_unknown_section(self):
        with pytest.raises(ConfigError) as exc:
            sources_from_mapping({"secrets": []})
        assert "unknown sections: secrets" in str(exc.value)

    def test_section_not_a_list(self):
        with pytest.raises(ConfigError):
            sources_from_mapping({"env": "app.env"})

    def test_non_string_entry(self):
        with pytest.raises(ConfigError) as exc:
            sources_from_mapping({"literals": ["A=1", 2]})
        assert "int" in str(exc.value)


class TestIdentitySourcesFromEnv:
    """Tests for KVLOADER_AGE_IDENTITIES."""

    def test_unset(self):
        assert identity_sources_from_env({}) == ()

    def test_pathsep_separated(self):
        value = os.pathsep.join(["/a/keys.txt", " ", "/b/keys.txt"])
        assert identity_sources_from_env({IDENTITIES_ENV_VAR: value}) == (
            "/a/keys.txt", "/b/keys.txt",
        )


class TestKvPairSources:
    """Tests for KvPairSources."""

    def test_lists_become_tuples(self):
        sources = KvPairSources(env_sources=["a"], literal_sources=["b=c"])
        assert sources.env_sources == ("a",)
        assert sources.literal_sources == ("b=c",)

    def test_merged(self):
        merged = KvPairSources(env_sources=["a"]).merged(
            KvPairSources(env_sources=["b"], file_sources=["f"])
        )
        assert merged.env_sources == ("a", "b")
        assert merged.file_sources == ("f",)
