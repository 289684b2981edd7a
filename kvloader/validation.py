"""
Key name validation.

Mirrors the Kubernetes rules that consumers of the loaded pairs apply:
environment variable names for env-file keys, and ConfigMap/Secret data keys
for literal and file sources.
"""

import logging
import re

from .errors import InvalidKeyName

logger = logging.getLogger(__name__)

ENV_VAR_NAME_PATTERN = re.compile(r'[-._a-zA-Z][-._a-zA-Z0-9]*')
CONFIG_MAP_KEY_PATTERN = re.compile(r'[-._a-zA-Z0-9]+')
CONFIG_MAP_KEY_MAX_LENGTH = 253

ENV_VAR_NAME_MESSAGE = (
    "a valid environment variable name must consist of alphabetic characters, "
    "digits, '_', '-', or '.', and must not start with a digit"
)
CONFIG_MAP_KEY_MESSAGE = (
    "a valid config key must consist of alphanumeric characters, "
    "'-', '_' or '.'"
)


class KeyValidator:
    """
    Default key name validator.

    Any object with is_env_var_name() and is_config_map_key() methods that
    raise InvalidKeyName on rejection can be passed to KvLoader instead.
    """

    def is_env_var_name(self, key: str) -> None:
        """Raise InvalidKeyName unless key is a valid environment variable name."""
        if not ENV_VAR_NAME_PATTERN.fullmatch(key):
            raise InvalidKeyName(key, ENV_VAR_NAME_MESSAGE)

    def is_config_map_key(self, key: str) -> None:
        """Raise InvalidKeyName unless key is a valid ConfigMap/Secret data key."""
        if len(key) > CONFIG_MAP_KEY_MAX_LENGTH:
            raise InvalidKeyName(
                key, f"must be no more than {CONFIG_MAP_KEY_MAX_LENGTH} characters"
            )
        if not CONFIG_MAP_KEY_PATTERN.fullmatch(key):
            raise InvalidKeyName(key, CONFIG_MAP_KEY_MESSAGE)
        if key in (".", ".."):
            raise InvalidKeyName(key, f"must not be '{key}'")
        if key.startswith(".."):
            raise InvalidKeyName(key, "must not start with '..'")
