"""
Source manifest handling.

A source manifest lists the sources for one load, in YAML or JSON:

    env:
      - app.env
      - secrets.env.age
    literals:
      - LOG_LEVEL=debug
    files:
      - tls.crt=certs/server.crt
    age_identities:
      - ~/.config/age/keys.txt

Every section is optional. Paths are kept exactly as written and are resolved
later by the loader, relative to its root. Identity paths get '~' expansion.
"""

import json
import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import yaml

from .constants import IDENTITIES_ENV_VAR
from .errors import ConfigError
from .types import KvPairSources

logger = logging.getLogger(__name__)

MANIFEST_SECTIONS = {
    'env': 'env_sources',
    'literals': 'literal_sources',
    'files': 'file_sources',
    'age_identities': 'age_identity_sources',
}


class ConfigFormat(Enum):
    """Supported manifest formats."""
    JSON = "json"
    YAML = "yaml"
    AUTO = "auto"  # Detect from file extension


def detect_format(filepath: Path) -> ConfigFormat:
    """Detect manifest format from the file extension, defaulting to YAML."""
    if filepath.suffix.lower() == '.json':
        return ConfigFormat.JSON
    return ConfigFormat.YAML


def _string_list(path: str, section: str, value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise ConfigError(path, f"'{section}' must be a list of strings")
    items: List[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ConfigError(path, f"'{section}' entries must be strings, got {type(item).__name__}")
        items.append(item)
    return tuple(items)


def sources_from_mapping(data: Any, path: str = "<manifest>") -> KvPairSources:
    """
    Build KvPairSources from a parsed manifest.

    Raises:
        ConfigError: On unknown sections or wrongly typed entries.
    """
    if data is None:
        return KvPairSources()
    if not isinstance(data, Mapping):
        raise ConfigError(path, "top level must be a mapping")

    unknown = sorted(str(k) for k in data if k not in MANIFEST_SECTIONS)
    if unknown:
        raise ConfigError(path, f"unknown sections: {', '.join(unknown)}")

    fields: Dict[str, Tuple[str, ...]] = {}
    for section, attr in MANIFEST_SECTIONS.items():
        fields[attr] = _string_list(path, section, data.get(section))

    fields['age_identity_sources'] = tuple(
        os.path.expanduser(p) for p in fields['age_identity_sources']
    )
    return KvPairSources(**fields)


def load_sources_file(
    filepath: Union[str, Path],
    format: ConfigFormat = ConfigFormat.AUTO,
) -> KvPairSources:
    """
    Load a source manifest.

    Args:
        filepath: Path to the manifest
        format: File format (auto-detected if AUTO)

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    filepath = Path(filepath)

    if format == ConfigFormat.AUTO:
        format = detect_format(filepath)

    try:
        content = filepath.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(str(filepath), str(e)) from e

    try:
        if format == ConfigFormat.JSON:
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(str(filepath), f"parse error: {e}") from e

    sources = sources_from_mapping(data, str(filepath))
    logger.debug(
        f"Manifest {filepath}: {len(sources.env_sources)} env, "
        f"{len(sources.literal_sources)} literal, {len(sources.file_sources)} file, "
        f"{len(sources.age_identity_sources)} identity sources"
    )
    return sources


def identity_sources_from_env(environ: Optional[Mapping[str, str]] = None) -> Tuple[str, ...]:
    """Identity file paths listed in KVLOADER_AGE_IDENTITIES, separated by os.pathsep."""
    environ = environ if environ is not None else os.environ
    value = environ.get(IDENTITIES_ENV_VAR, "")
    return tuple(
        os.path.expanduser(p.strip()) for p in value.split(os.pathsep) if p.strip()
    )
