"""
Centralized Constants Module for kvloader.

This module consolidates the suffixes, markers and well-known locations used
throughout the loader so that the parsing and decryption rules stay consistent
between modules.

Usage:
    from kvloader.constants import Suffixes, Armor, SSHKeys

    if path.endswith(Suffixes.AGE):
        ...
"""

import logging
import os
from dataclasses import dataclass
from typing import Callable, Optional, Tuple, TypeVar

logger = logging.getLogger(__name__)

ENV_PREFIX = "KVLOADER_"


# =============================================================================
# ENVIRONMENT VARIABLE OVERRIDE UTILITIES
# =============================================================================

T = TypeVar('T')


def _env_override(
    env_var: str,
    default: T,
    converter: Callable[[str], T] = str,
    validator: Optional[Callable[[T], bool]] = None,
) -> T:
    """Get a configuration value with environment variable override.

    Args:
        env_var: Environment variable name (will be prefixed with KVLOADER_)
        default: Default value if env var not set
        converter: Function to convert string to target type
        validator: Optional validation function

    Returns:
        Configured value (from env var if valid, otherwise default)
    """
    full_env_var = f"{ENV_PREFIX}{env_var}"
    env_value = os.environ.get(full_env_var)

    if env_value is None:
        return default

    try:
        converted = converter(env_value)

        if validator is not None and not validator(converted):
            logger.warning(
                f"{full_env_var}={env_value} failed validation, using default"
            )
            return default

        logger.info(f"Using {full_env_var}={converted} (override)")
        return converted

    except (ValueError, TypeError) as e:
        logger.warning(f"Invalid value for {full_env_var}: {e}, using default")
        return default


def _is_plain_dir_name(value: str) -> bool:
    """A directory name relative to $HOME, with no separators or parent refs."""
    return bool(value) and os.sep not in value and value not in (".", "..")


# =============================================================================
# SOURCE NAMING
# =============================================================================

@dataclass(frozen=True)
class Suffixes:
    """Name suffixes that drive decryption dispatch."""
    AGE: str = ".age"
    YAML: Tuple[str, ...] = (".yaml", ".yml")


# =============================================================================
# AGE ARMOR
# =============================================================================

@dataclass(frozen=True)
class Armor:
    """
    Markers of the age ASCII armor envelope.

    The body format itself is checked by pyrage when decrypting.
    """
    HEADER: str = "-----BEGIN AGE ENCRYPTED FILE-----"
    FOOTER: str = "-----END AGE ENCRYPTED FILE-----"


# =============================================================================
# ENV FILES
# =============================================================================

UTF8_BOM = "\ufeff"
COMMENT_PREFIX = "#"
SEPARATOR = "="


# =============================================================================
# IMPLICIT IDENTITIES
# =============================================================================

@dataclass(frozen=True)
class SSHKeys:
    """Well-known private key locations probed for identities."""
    DIR: str = _env_override("SSH_DIR", ".ssh", validator=_is_plain_dir_name)
    NAMES: Tuple[str, ...] = ("id_rsa", "id_ed25519")


# Identity files listed in this variable are appended to explicit sources
IDENTITIES_ENV_VAR = f"{ENV_PREFIX}AGE_IDENTITIES"

# Age native identities start with this prefix
AGE_SECRET_KEY_PREFIX = "AGE-SECRET-KEY-1"
